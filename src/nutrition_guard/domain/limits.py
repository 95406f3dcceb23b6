"""Models for AI-generated daily nutrition limits."""

import math

from pydantic import BaseModel, Field, field_validator

from nutrition_guard.domain.foods import Biometrics

NUTRIENT_CODES = {
    "NA": "Sodium",
    "K": "Potassium",
    "P": "Phosphorus",
    "PROCNT": "Protein",
    "CHOCDF": "Carbohydrates",
    "SUGAR": "Sugars",
    "ENERC_KCAL": "Calories",
    "FIBTG": "Fiber",
    "CHOLE": "Cholesterol",
}


def _number_or_none(value: object) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, int | float):
        return None
    number = float(value)
    return number if math.isfinite(number) else None


class NutrientBounds(BaseModel):
    """Daily bounds for a nutrient; unparseable numbers become None."""

    min: float | None = None
    max: float | None = None
    unit: str | None = None
    label: str | None = None

    @field_validator("min", "max", mode="before")
    @classmethod
    def _numeric(cls, value: object) -> float | None:
        return _number_or_none(value)


class CalorieRange(BaseModel):
    """Daily calorie window."""

    min: float | None = None
    max: float | None = None

    @field_validator("min", "max", mode="before")
    @classmethod
    def _numeric(cls, value: object) -> float | None:
        return _number_or_none(value)


class ComputedLimits(BaseModel):
    """Personalized daily limits returned by the limit generator."""

    daily_calories: CalorieRange = Field(default_factory=CalorieRange)
    nutrients: dict[str, NutrientBounds] = Field(default_factory=dict)
    avoid_ingredients: list[str] = Field(default_factory=list)
    reasoning: str = ""

    @field_validator("nutrients", mode="before")
    @classmethod
    def _upper_codes(cls, value: object) -> object:
        if isinstance(value, dict):
            return {str(code).upper(): bounds for code, bounds in value.items()}
        return value

    @field_validator("avoid_ingredients", mode="before")
    @classmethod
    def _clean_ingredients(cls, value: object) -> object:
        if isinstance(value, list):
            return [str(item).strip() for item in value if str(item).strip()]
        return value

    def max_for(self, code: str) -> float | None:
        """Return a positive daily maximum for a nutrient code, if usable."""
        bounds = self.nutrients.get(code.upper())
        if bounds is None or bounds.max is None or bounds.max <= 0:
            return None
        return bounds.max


class Medication(BaseModel):
    """Medication entry passed through to the limit generator."""

    name: str
    dosage: str | None = None


class HealthProfile(BaseModel):
    """Input for personalized limit generation."""

    conditions: list[str]
    medications: list[Medication] = Field(default_factory=list)
    biometrics: Biometrics = Field(default_factory=Biometrics)
