"""Strict validation of model output into nutrition records."""

import json
import logging
import re

from pydantic import ValidationError

from calorie_lens.domain.errors import (
    InvalidValueError,
    MalformedOutputError,
    MissingFieldsError,
    MissingMacrosError,
    MissingVitaminsError,
)
from calorie_lens.domain.nutrition import (
    REQUIRED_FIELDS,
    REQUIRED_MACROS,
    REQUIRED_VITAMINS,
    NutritionRecord,
)

_OPENING_FENCE = re.compile(r"\A```[A-Za-z0-9_+-]*[ \t]*\r?\n?")
_CLOSING_FENCE = re.compile(r"\r?\n?```\Z")

_logger = logging.getLogger(__name__)


def strip_code_fence(text: str) -> str:
    """Remove a surrounding markdown code fence, leaving its body untouched."""
    cleaned = text.strip()
    opening = _OPENING_FENCE.match(cleaned)
    if opening is None:
        return cleaned
    body = cleaned[opening.end() :]
    closing = _CLOSING_FENCE.search(body)
    if closing is not None:
        body = body[: closing.start()]
    return body.strip()


def validate_nutrition_text(raw_text: str) -> NutritionRecord:
    """Parse model text and return a record only if every field checks out."""
    cleaned = strip_code_fence(raw_text)
    try:
        payload = json.loads(cleaned)
    except ValueError as exc:
        _logger.warning("Model output is not valid JSON: %r", raw_text)
        raise MalformedOutputError(
            f"Model output is not valid JSON: {exc}", raw_text
        ) from exc
    if not isinstance(payload, dict):
        _logger.warning("Model output is not a JSON object: %r", raw_text)
        raise MalformedOutputError("Model output is not a JSON object", raw_text)

    missing = _missing_keys(payload, REQUIRED_FIELDS)
    if missing:
        raise MissingFieldsError(missing, raw_text)
    macros = payload["macros"]
    missing = _missing_keys(macros, REQUIRED_MACROS)
    if missing:
        raise MissingMacrosError(missing, raw_text)
    vitamins = payload["vitamins"]
    missing = _missing_keys(vitamins, REQUIRED_VITAMINS)
    if missing:
        raise MissingVitaminsError(missing, raw_text)

    try:
        return NutritionRecord.model_validate(payload)
    except ValidationError as exc:
        raise InvalidValueError(_describe_problems(exc), raw_text) from exc


def _missing_keys(payload: object, required: tuple[str, ...]) -> list[str]:
    if not isinstance(payload, dict):
        return list(required)
    return [key for key in required if payload.get(key) is None]


def _describe_problems(exc: ValidationError) -> list[str]:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        problems.append(f"{location}: {error['msg']}")
    return problems
