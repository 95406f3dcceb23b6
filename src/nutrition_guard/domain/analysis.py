"""Engine outputs."""

from enum import Enum

from pydantic import BaseModel

from nutrition_guard.domain.foods import FoodItem


class SafetyStatus(str, Enum):
    """Verdict for a food, ordered Safe < Caution < Avoid."""

    SAFE = "Safe"
    CAUTION = "Caution"
    AVOID = "Avoid"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]

    def escalate(self, other: "SafetyStatus") -> "SafetyStatus":
        """Return the more severe of two statuses."""
        return other if other.rank > self.rank else self


_STATUS_RANK = {
    SafetyStatus.SAFE: 0,
    SafetyStatus.CAUTION: 1,
    SafetyStatus.AVOID: 2,
}


class BioavailabilityTier(int, Enum):
    """Phytate-bound phosphorus absorption tiers for grains."""

    OPTIMAL = 1
    MODERATE = 2
    CONDITIONAL = 3
    AVOID = 4


class GrainNote(BaseModel):
    """Informational grain classification attached to an analysis."""

    ingredient: str
    tier: BioavailabilityTier


class AnalysisResult(BaseModel):
    """Verdict for one food against one user profile."""

    status: SafetyStatus
    reasons: list[str]
    modifications: list[str]
    nutrition: FoodItem
    grain_notes: list[GrainNote] = []
