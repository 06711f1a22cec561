"""Image-to-nutrition analysis pipeline."""

import logging
from dataclasses import dataclass
from typing import Protocol

from calorie_lens.domain.errors import AnalysisError
from calorie_lens.domain.nutrition import NutritionRecord
from calorie_lens.services.images import (
    MIN_ENCODED_LENGTH,
    EncodedImage,
    encode_base64_image,
    encode_image,
)
from calorie_lens.services.prompts import build_prompt
from calorie_lens.services.validation import validate_nutrition_text

_logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    """Interface for a multimodal completion provider."""

    async def analyze(self, *, image_data_uri: str, prompt: str) -> str:
        """Return the raw model text for one prompt and image."""


@dataclass
class AnalysisService:
    """Runs one photo through encoding, completion and validation."""

    client: CompletionClient
    min_image_length: int = MIN_ENCODED_LENGTH

    async def analyze_image(self, image_bytes: bytes) -> NutritionRecord:
        """Analyze raw image bytes from a capture."""
        return await self._run(encode_image(image_bytes, self.min_image_length))

    async def analyze_base64(self, image_base64: str) -> NutritionRecord:
        """Analyze an image that arrived already base64-encoded."""
        return await self._run(
            encode_base64_image(image_base64, self.min_image_length)
        )

    async def _run(self, image: EncodedImage) -> NutritionRecord:
        _logger.info(
            "Starting image analysis: mime=%s encoded_length=%s",
            image.mime_type,
            len(image.data),
        )
        try:
            raw_text = await self.client.analyze(
                image_data_uri=image.data_uri, prompt=build_prompt()
            )
            record = validate_nutrition_text(raw_text)
        except AnalysisError as exc:
            _logger.warning("Image analysis failed: kind=%s %s", exc.kind, exc)
            raise
        _logger.info(
            "Image analysis succeeded: food=%s confidence=%s",
            record.food_name,
            record.confidence,
        )
        return record
