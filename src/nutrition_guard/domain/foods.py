"""Engine inputs: food items and user profiles."""

import math
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from nutrition_guard.domain.conditions import ConditionKind, condition_kinds

NUTRIENT_FIELDS = (
    "calories",
    "carbs",
    "protein",
    "fat",
    "sugar",
    "added_sugar",
    "fiber",
    "sodium",
    "potassium",
    "phosphorus",
    "saturated_fat",
    "trans_fat",
    "cholesterol",
    "calcium",
    "iron",
    "vitamin_a",
    "vitamin_c",
    "vitamin_d",
)


def clamp_amount(value: object) -> float:
    """Coerce a nutrient amount to a finite non-negative float, else 0."""
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return 0.0
    if not isinstance(value, int | float):
        return 0.0
    amount = float(value)
    if not math.isfinite(amount) or amount < 0:
        return 0.0
    return amount


class FoodItem(BaseModel):
    """Nutrient values and label ingredients for one serving."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    ingredients: str = ""
    calories: float = 0.0
    carbs: float = 0.0
    protein: float = 0.0
    fat: float = 0.0
    sugar: float = 0.0
    added_sugar: float = 0.0
    fiber: float = 0.0
    sodium: float = 0.0
    potassium: float = 0.0
    phosphorus: float = 0.0
    saturated_fat: float = 0.0
    trans_fat: float = 0.0
    cholesterol: float = 0.0
    calcium: float = 0.0
    iron: float = 0.0
    vitamin_a: float = 0.0
    vitamin_c: float = 0.0
    vitamin_d: float = 0.0

    @field_validator("name", "ingredients", mode="before")
    @classmethod
    def _text_or_empty(cls, value: object) -> str:
        return "" if value is None else str(value)

    @field_validator(*NUTRIENT_FIELDS, mode="before")
    @classmethod
    def _clamp_nutrient(cls, value: object) -> float:
        return clamp_amount(value)


class Gender(str, Enum):
    """Gender used to pick carbohydrate ceilings."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class DietaryGoal(str, Enum):
    """User's dietary goal."""

    WEIGHT_LOSS = "weight_loss"
    MAINTENANCE = "maintenance"


class Biometrics(BaseModel):
    """Body measurements supplied during onboarding."""

    model_config = ConfigDict(frozen=True)

    age: int | None = Field(default=None, ge=0)
    weight_kg: float | None = Field(default=None, ge=0)
    height_cm: float | None = Field(default=None, ge=0)
    gender: Gender = Gender.OTHER


class UserProfile(BaseModel):
    """The part of a user the engine reads."""

    model_config = ConfigDict(frozen=True)

    conditions: frozenset[str] = frozenset()
    biometrics: Biometrics | None = None
    gender: Gender = Gender.OTHER
    goal: DietaryGoal = DietaryGoal.MAINTENANCE
    ckd_stage: int | None = Field(default=None, ge=1, le=5)

    @field_validator("conditions", mode="before")
    @classmethod
    def _normalize_conditions(cls, value: object) -> object:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = [value]
        return frozenset(str(slug).strip().lower() for slug in value if slug)

    @property
    def kinds(self) -> frozenset[ConditionKind]:
        return condition_kinds(self.conditions)

    @property
    def effective_gender(self) -> Gender:
        if self.gender is Gender.OTHER and self.biometrics is not None:
            return self.biometrics.gender
        return self.gender
