"""Nutrition record produced by one food image analysis."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

REQUIRED_FIELDS: tuple[str, ...] = (
    "foodName",
    "calories",
    "macros",
    "vitamins",
    "confidence",
)
REQUIRED_MACROS: tuple[str, ...] = ("protein", "carbs", "fat", "sugar")
REQUIRED_VITAMINS: tuple[str, ...] = (
    "vitaminA",
    "vitaminC",
    "vitaminD",
    "vitaminB12",
    "calcium",
    "iron",
)

_FROZEN = ConfigDict(frozen=True, populate_by_name=True, allow_inf_nan=False)


def _reject_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


class Macros(BaseModel):
    """Macronutrients in grams."""

    model_config = _FROZEN

    protein: float = Field(ge=0, strict=True)
    carbs: float = Field(ge=0, strict=True)
    fat: float = Field(ge=0, strict=True)
    sugar: float = Field(ge=0, strict=True)


class Vitamins(BaseModel):
    """Micronutrient quantities as human-readable strings such as "25 mg"."""

    model_config = _FROZEN

    vitamin_a: str = Field(alias="vitaminA", strict=True)
    vitamin_c: str = Field(alias="vitaminC", strict=True)
    vitamin_d: str = Field(alias="vitaminD", strict=True)
    vitamin_b12: str = Field(alias="vitaminB12", strict=True)
    calcium: str = Field(strict=True)
    iron: str = Field(strict=True)

    @field_validator("*")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        return _reject_blank(value)


class NutritionRecord(BaseModel):
    """Validated nutrition estimate for a single photographed dish."""

    model_config = _FROZEN

    food_name: str = Field(alias="foodName", strict=True)
    calories: float = Field(ge=0, strict=True)
    macros: Macros
    vitamins: Vitamins
    confidence: float = Field(ge=0, le=100, strict=True)

    @field_validator("food_name")
    @classmethod
    def _food_name_not_blank(cls, value: str) -> str:
        return _reject_blank(value)

    def to_payload(self) -> dict[str, object]:
        """Return the record as a camelCase JSON-ready dict."""
        return self.model_dump(by_alias=True)
