"""State machine for the screen that shows an analysis result."""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import StrEnum

from calorie_lens.domain.errors import (
    AnalysisError,
    AnalysisTimeoutError,
    BadRequestError,
    EmptyResponseError,
    InvalidImageError,
    InvalidValueError,
    MalformedOutputError,
    MalformedResponseError,
    MissingCredentialError,
    MissingFieldsError,
    MissingMacrosError,
    MissingVitaminsError,
    NetworkError,
    ProviderError,
    RateLimitedError,
    UnauthenticatedError,
)
from calorie_lens.domain.nutrition import NutritionRecord
from calorie_lens.services.analysis import AnalysisService

_logger = logging.getLogger(__name__)

DEMO_RECORD = NutritionRecord.model_validate(
    {
        "foodName": "Grilled chicken salad",
        "calories": 420,
        "macros": {"protein": 35, "carbs": 18, "fat": 22, "sugar": 6},
        "vitamins": {
            "vitaminA": "210 mcg",
            "vitaminC": "28 mg",
            "vitaminD": "0.4 mcg",
            "vitaminB12": "0.6 mcg",
            "calcium": "95 mg",
            "iron": "2.1 mg",
        },
        "confidence": 92,
    }
)


class Stage(StrEnum):
    """Presentation states of the analysis screen."""

    LOADING = "loading"
    RESULT = "result"
    ERROR = "error"


class InvalidTransitionError(RuntimeError):
    """Requested action is not allowed from the current stage."""


def describe_error(exc: AnalysisError) -> str:
    """Return the message shown to the user for a failed analysis."""
    # Subclasses come before their bases.
    if isinstance(exc, InvalidImageError):
        return "The photo looks invalid or too small. Please take another picture."
    if isinstance(exc, MissingCredentialError):
        return "No analysis service key is configured."
    if isinstance(exc, UnauthenticatedError):
        return "The analysis service key is invalid or expired."
    if isinstance(exc, RateLimitedError):
        return "Too many requests. Please try again in a few minutes."
    if isinstance(exc, BadRequestError):
        return "The request was rejected. Check that the photo is a valid image."
    if isinstance(exc, ProviderError):
        return f"The analysis service returned an error (HTTP {exc.status_code})."
    if isinstance(exc, AnalysisTimeoutError):
        return "The analysis took too long. Check your connection and try again."
    if isinstance(exc, NetworkError):
        return "Could not reach the analysis service. Check your connection."
    if isinstance(exc, MalformedResponseError):
        return "The analysis service sent an unreadable reply. Please try again."
    if isinstance(exc, EmptyResponseError):
        return "No analysis was received. Please try again."
    if isinstance(exc, MalformedOutputError):
        return "The analysis result could not be read. Please try again."
    if isinstance(exc, MissingFieldsError):
        return f"The analysis result is incomplete: {', '.join(exc.missing)}."
    if isinstance(exc, MissingMacrosError):
        return f"The analysis is missing macros: {', '.join(exc.missing)}."
    if isinstance(exc, MissingVitaminsError):
        return f"The analysis is missing vitamins: {', '.join(exc.missing)}."
    if isinstance(exc, InvalidValueError):
        return "The analysis contained implausible values. Please try again."
    return "The analysis failed. Please try again."


@dataclass
class AnalysisScreen:
    """Drives loading, result and error states for one captured photo."""

    service: AnalysisService | None
    stage: Stage = Stage.LOADING
    record: NutritionRecord | None = None
    error: AnalysisError | None = None
    error_message: str | None = None
    is_demo: bool = False
    _image: bytes | None = field(default=None, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    async def start(self, image_bytes: bytes | None) -> Stage:
        """Begin a new capture; without a photo the demo record is shown."""
        self._image = image_bytes
        return await self._run()

    async def retry(self) -> Stage:
        """Restart the pipeline after a failure."""
        if self.stage is not Stage.ERROR:
            raise InvalidTransitionError(f"Cannot retry from {self.stage}")
        return await self._run()

    async def reanalyze(self) -> Stage:
        """Run the pipeline again for a photo that already has a result."""
        if self.stage is not Stage.RESULT:
            raise InvalidTransitionError(f"Cannot re-analyze from {self.stage}")
        return await self._run()

    async def _run(self) -> Stage:
        async with self._lock:
            self.stage = Stage.LOADING
            self.record = None
            self.error = None
            self.error_message = None
            self.is_demo = False

            if self._image is None:
                _logger.info("No photo supplied, showing demo record")
                self.record = DEMO_RECORD
                self.is_demo = True
                self.stage = Stage.RESULT
                return self.stage
            if self.service is None:
                self.error = MissingCredentialError()
                self.error_message = describe_error(self.error)
                self.stage = Stage.ERROR
                return self.stage

            try:
                self.record = await self.service.analyze_image(self._image)
            except AnalysisError as exc:
                self.error = exc
                self.error_message = describe_error(exc)
                self.stage = Stage.ERROR
                return self.stage
            self.stage = Stage.RESULT
            return self.stage
