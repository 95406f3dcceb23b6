"""Consolidated restriction profile models."""

import re
from dataclasses import dataclass, field
from enum import Enum

from nutrition_guard.domain.conditions import (
    ExclusionSeverity,
    IngredientExclusion,
    NumericLimit,
    NutrientLimitRecord,
    TextLimit,
)


class LimitResolution(Enum):
    """Outcome of merging every limit declared for one nutrient."""

    RESOLVED = "RESOLVED"
    CONFLICTING = "CONFLICTING"
    TEXT_ONLY = "TEXT_ONLY"


@dataclass(frozen=True)
class LimitContribution:
    """One condition's numeric limit that fed into a resolution."""

    condition_slug: str
    bound: NumericLimit
    unit: str | None


@dataclass(frozen=True)
class ResolvedLimit:
    """Consolidated limit for a single nutrient."""

    nutrient: str
    resolution: LimitResolution
    bound: NumericLimit | None
    unit: str | None
    notes: tuple[TextLimit, ...] = ()
    contributors: tuple[LimitContribution, ...] = ()

    @property
    def needs_review(self) -> bool:
        return self.resolution is LimitResolution.CONFLICTING


@dataclass(frozen=True)
class IgnoredLimit:
    """A limit row excluded from numeric resolution."""

    record: NutrientLimitRecord
    reason: str


@dataclass(frozen=True)
class ConsolidatedExclusion:
    """All exclusion rules sharing one additive category."""

    category: str
    pattern: str
    severity: ExclusionSeverity
    risk_category: str
    condition_slugs: tuple[str, ...] = ()
    sources: tuple[str, ...] = ()
    _compiled: tuple[re.Pattern[str], ...] = field(
        default=(), repr=False, compare=False
    )

    def matches(self, text: str | None) -> bool:
        """Return True when any pattern of the category hits the text."""
        return bool(self.found_terms(text))

    def found_terms(self, text: str | None) -> list[str]:
        """Return the distinct ingredient fragments matched in the text."""
        if not text:
            return []
        lowered = text.lower()
        found: list[str] = []
        for compiled in self._compiled:
            for match in compiled.finditer(lowered):
                term = match.group(0).strip()
                if term and term not in found:
                    found.append(term)
        return found


@dataclass(frozen=True)
class IgnoredExclusion:
    """An exclusion rule dropped because it could not be used."""

    exclusion: IngredientExclusion
    reason: str


def nutrient_key(name: str) -> str:
    """Normalize a nutrient label for grouping."""
    return " ".join(name.split()).casefold()


@dataclass(frozen=True)
class RestrictionProfile:
    """Conflict-resolved limits and exclusions for a set of active conditions."""

    condition_slugs: frozenset[str]
    limits: dict[str, ResolvedLimit]
    exclusions: tuple[ConsolidatedExclusion, ...]
    ignored_limits: tuple[IgnoredLimit, ...] = ()
    ignored_exclusions: tuple[IgnoredExclusion, ...] = ()

    def limit_for(self, nutrient: str) -> ResolvedLimit | None:
        """Look up a resolved limit by nutrient label, ignoring case."""
        return self.limits.get(nutrient_key(nutrient))

    @property
    def conflicts(self) -> list[ResolvedLimit]:
        return [limit for limit in self.limits.values() if limit.needs_review]
