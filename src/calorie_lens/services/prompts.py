"""Instruction text sent alongside the food photo."""

import json

from calorie_lens.domain.nutrition import (
    REQUIRED_FIELDS,
    REQUIRED_MACROS,
    REQUIRED_VITAMINS,
)

_EXAMPLE_VALUES: dict[str, object] = {
    "foodName": "Name of the identified dish or food",
    "calories": 350,
    "macros": {"protein": 25, "carbs": 30, "fat": 15, "sugar": 5},
    "vitamins": {
        "vitaminA": "150 mcg",
        "vitaminC": "25 mg",
        "vitaminD": "2 mcg",
        "vitaminB12": "1.2 mcg",
        "calcium": "180 mg",
        "iron": "3.5 mg",
    },
    "confidence": 85,
}


def _example_schema() -> str:
    # Built from the validator's key tables so the two never drift.
    example = {field: _EXAMPLE_VALUES[field] for field in REQUIRED_FIELDS}
    example["macros"] = {key: _EXAMPLE_VALUES["macros"][key] for key in REQUIRED_MACROS}
    example["vitamins"] = {
        key: _EXAMPLE_VALUES["vitamins"][key] for key in REQUIRED_VITAMINS
    }
    return json.dumps(example, indent=2)


NUTRITION_PROMPT = f"""Analyze this food image and provide detailed nutrition information.

IMPORTANT: Respond ONLY with a valid JSON object, without any additional text, markdown or code fences.

Exact required format:
{_example_schema()}

Rules:
1. Use plain numbers for calories, protein, carbs, fat and sugar (grams for macros).
2. Use strings with units for vitamins and minerals (for example "25 mg", "150 mcg").
3. Use a number from 0 to 100 for confidence.
4. Base the estimates on the apparent portion size in the image.
5. Use realistic values for a typical portion of the identified food.
6. Do NOT add explanatory text, only the raw JSON."""


def build_prompt() -> str:
    """Return the fixed nutrition analysis instruction."""
    return NUTRITION_PROMPT
