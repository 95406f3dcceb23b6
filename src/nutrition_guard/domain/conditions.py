"""Condition, nutrient limit and ingredient exclusion records."""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum


class ConditionKind(Enum):
    """Clinical families the engine has dedicated rules for."""

    KIDNEY_DISEASE = "kidney_disease"
    HYPERTENSION = "hypertension"
    DIABETES = "diabetes"
    PCOS = "pcos"
    HIGH_CHOLESTEROL = "high_cholesterol"


_KIND_ALIASES: dict[str, ConditionKind] = {
    "ckd": ConditionKind.KIDNEY_DISEASE,
    "kidney": ConditionKind.KIDNEY_DISEASE,
    "kidney-disease": ConditionKind.KIDNEY_DISEASE,
    "renal": ConditionKind.KIDNEY_DISEASE,
    "htn": ConditionKind.HYPERTENSION,
    "hypertension": ConditionKind.HYPERTENSION,
    "t1d": ConditionKind.DIABETES,
    "t2d": ConditionKind.DIABETES,
    "t2dm": ConditionKind.DIABETES,
    "diabetes": ConditionKind.DIABETES,
    "insulin-resistance": ConditionKind.DIABETES,
    "pcos": ConditionKind.PCOS,
    "hyperlipidemia": ConditionKind.HIGH_CHOLESTEROL,
    "high-cholesterol": ConditionKind.HIGH_CHOLESTEROL,
}


def condition_kind(slug: str) -> ConditionKind | None:
    """Map a condition slug such as ``ckd-3b-5`` to its clinical family."""
    normalized = slug.strip().lower().replace("_", "-")
    if not normalized:
        return None
    if normalized in _KIND_ALIASES:
        return _KIND_ALIASES[normalized]
    prefix = normalized.split("-", 1)[0]
    return _KIND_ALIASES.get(prefix)


def condition_kinds(slugs: Iterable[str]) -> frozenset[ConditionKind]:
    """Return every clinical family present in a set of condition slugs."""
    kinds = {condition_kind(slug) for slug in slugs}
    return frozenset(kind for kind in kinds if kind is not None)


@dataclass(frozen=True)
class Condition:
    """A named clinical condition."""

    id: str
    slug: str
    label: str
    description: str
    nutritional_focus: dict[str, tuple[str, ...]] = field(default_factory=dict)

    @property
    def kind(self) -> ConditionKind | None:
        return condition_kind(self.slug)


class LimitType(Enum):
    """How a nutrient limit value is encoded."""

    MAX = "MAX"
    MIN = "MIN"
    RANGE = "RANGE"
    TEXT = "TEXT"


@dataclass(frozen=True)
class MaxLimit:
    """Upper bound on a nutrient."""

    value: float


@dataclass(frozen=True)
class MinLimit:
    """Lower bound on a nutrient."""

    value: float


@dataclass(frozen=True)
class RangeLimit:
    """Closed range on a nutrient."""

    low: float
    high: float


@dataclass(frozen=True)
class TextLimit:
    """Free-text guidance with no numeric meaning."""

    text: str


NumericLimit = MaxLimit | MinLimit | RangeLimit
LimitBound = NumericLimit | TextLimit

# Keys are casefolded; the micro sign folds to Greek mu.
_MILLIGRAMS_PER_UNIT = {
    "mcg": 0.001,
    "μg": 0.001,
    "ug": 0.001,
    "mg": 1.0,
    "g": 1000.0,
}


def unit_key(unit: str | None) -> str | None:
    """Normalize a unit label for comparison; blank labels become None."""
    if unit is None:
        return None
    return unit.strip().casefold() or None


def milligrams_per_unit(unit: str | None) -> float | None:
    """Return the mg factor for a mass unit, or None for any other unit."""
    key = unit_key(unit)
    return None if key is None else _MILLIGRAMS_PER_UNIT.get(key)


def scale_limit(bound: NumericLimit, factor: float) -> NumericLimit:
    if isinstance(bound, MaxLimit):
        return MaxLimit(bound.value * factor)
    if isinstance(bound, MinLimit):
        return MinLimit(bound.value * factor)
    return RangeLimit(low=bound.low * factor, high=bound.high * factor)


@dataclass(frozen=True)
class NutrientLimitRecord:
    """Raw nutrient limit row as stored for one condition."""

    condition_slug: str
    nutrient: str
    limit_type: LimitType
    limit_value: str
    unit: str | None = None


_LIMIT_VALUE_RE = re.compile(
    r"^\s*(?:<=|>=|<|>|≤|≥)?\s*"
    r"(?P<first>\d+(?:\.\d+)?)"
    r"(?:\s*-\s*(?P<second>\d+(?:\.\d+)?))?"
    r"\s*%?\s*$"
)


def parse_limit(record: NutrientLimitRecord) -> LimitBound | None:
    """Decode a raw limit value; return None when it is malformed for its type."""
    if record.limit_type is LimitType.TEXT:
        return TextLimit(record.limit_value.strip())

    match = _LIMIT_VALUE_RE.match(record.limit_value or "")
    if match is None:
        return None
    first = float(match.group("first"))
    second = match.group("second")

    if record.limit_type is LimitType.RANGE:
        if second is None:
            return None
        high = float(second)
        if first > high:
            return None
        return RangeLimit(low=first, high=high)

    values = [first] if second is None else [first, float(second)]
    if record.limit_type is LimitType.MAX:
        # "<25-36" reads as "at most 25 to 36"; the lower figure is binding.
        return MaxLimit(min(values))
    return MinLimit(max(values))


class ExclusionSeverity(Enum):
    """Severity of an ingredient exclusion rule."""

    LIMIT = "LIMIT"
    CRITICAL_AVOID = "CRITICAL_AVOID"

    @property
    def rank(self) -> int:
        return 1 if self is ExclusionSeverity.CRITICAL_AVOID else 0

    @classmethod
    def most_severe(
        cls, severities: Iterable["ExclusionSeverity"]
    ) -> "ExclusionSeverity":
        return max(severities, key=lambda severity: severity.rank, default=cls.LIMIT)


@dataclass(frozen=True)
class IngredientExclusion:
    """Pattern rule flagging a class of ingredient; global when no condition."""

    condition_slug: str | None
    additive_category: str
    ingredient_regex: str
    risk_category: str
    severity: ExclusionSeverity
    source: str | None = None
