"""Request and response bodies for the HTTP API."""

from pydantic import BaseModel, Field

from nutrition_guard.domain.analysis import BioavailabilityTier
from nutrition_guard.domain.foods import FoodItem, UserProfile
from nutrition_guard.domain.limits import ComputedLimits


class RestrictionsRequest(BaseModel):
    """Condition slugs whose restrictions should be merged."""

    conditions: list[str] = Field(default_factory=list)


class EvaluateRequest(BaseModel):
    """A food and the profile to judge it against."""

    food: FoodItem
    profile: UserProfile = Field(default_factory=UserProfile)
    use_restrictions: bool = True
    computed_limits: ComputedLimits | None = None


class ScanRequest(BaseModel):
    ingredients: str | None = None
    conditions: list[str] = Field(default_factory=list)


class ScanResponse(BaseModel):
    has_additives: bool
    dangerous_ingredients: list[str]
    safety_message: str


class GrainResponse(BaseModel):
    """Grain tier plus any condition-level contraindication hits."""

    ingredient: str
    tier: BioavailabilityTier
    tier_name: str
    contraindicated_for: list[str] = Field(default_factory=list)
