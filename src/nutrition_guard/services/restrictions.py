"""Build and cache restriction profiles for sets of active conditions."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol

from nutrition_guard.domain.conditions import (
    Condition,
    IngredientExclusion,
    NutrientLimitRecord,
)
from nutrition_guard.domain.restrictions import RestrictionProfile
from nutrition_guard.services.cache import Cache
from nutrition_guard.services.exclusion_aggregator import aggregate_exclusions
from nutrition_guard.services.limit_aggregator import aggregate_nutrient_limits

_logger = logging.getLogger(__name__)


class ConditionRepository(Protocol):
    """Read-only source of condition, limit and exclusion records."""

    def list_conditions(self) -> list[Condition]:
        """Return every known condition."""

    def list_nutrient_limits(
        self, condition_slugs: list[str]
    ) -> list[NutrientLimitRecord]:
        """Return limit rows belonging to the given conditions."""

    def list_exclusions(self, condition_slugs: list[str]) -> list[IngredientExclusion]:
        """Return exclusion rows for the given conditions plus global rows."""


def build_profile(
    condition_slugs: Iterable[str],
    limits: Iterable[NutrientLimitRecord],
    exclusions: Iterable[IngredientExclusion],
) -> RestrictionProfile:
    """Aggregate raw limits and exclusions into one restriction profile."""
    active = frozenset(slug.strip().lower() for slug in condition_slugs if slug)
    nutrient_aggregation = aggregate_nutrient_limits(limits, active)
    exclusion_aggregation = aggregate_exclusions(exclusions, active)
    return RestrictionProfile(
        condition_slugs=active,
        limits=nutrient_aggregation.limits,
        exclusions=exclusion_aggregation.exclusions,
        ignored_limits=nutrient_aggregation.ignored,
        ignored_exclusions=exclusion_aggregation.ignored,
    )


@dataclass
class RestrictionService:
    """Loads records for a condition set and caches the aggregated profile."""

    repository: ConditionRepository
    cache: Cache
    ttl_seconds: int = 3600
    debug: bool = False

    def list_conditions(self) -> list[Condition]:
        """Return known conditions sorted by label."""
        return sorted(self.repository.list_conditions(), key=lambda item: item.label)

    def get_profile(self, condition_slugs: Iterable[str]) -> RestrictionProfile:
        """Return the cached profile for the slugs, building it on a miss."""
        slugs = sorted({slug.strip().lower() for slug in condition_slugs if slug})
        cache_key = _cache_key(slugs)
        cached = self.cache.get(cache_key)
        if isinstance(cached, RestrictionProfile):
            return cached

        profile = build_profile(
            slugs,
            self.repository.list_nutrient_limits(slugs),
            self.repository.list_exclusions(slugs),
        )
        for ignored in profile.ignored_limits:
            _logger.warning(
                "Ignoring nutrient limit: condition=%s nutrient=%s reason=%s",
                ignored.record.condition_slug,
                ignored.record.nutrient,
                ignored.reason,
            )
        for ignored in profile.ignored_exclusions:
            _logger.warning(
                "Ignoring exclusion: condition=%s category=%s reason=%s",
                ignored.exclusion.condition_slug,
                ignored.exclusion.additive_category,
                ignored.reason,
            )
        for conflict in profile.conflicts:
            _logger.warning(
                "Conflicting limits need review: nutrient=%s conditions=%s",
                conflict.nutrient,
                ",".join(c.condition_slug for c in conflict.contributors),
            )
        if self.debug:
            _logger.info(
                "Restriction profile built: conditions=%s limits=%s exclusions=%s",
                ",".join(slugs),
                len(profile.limits),
                len(profile.exclusions),
            )
        self.cache.set(cache_key, profile, ttl_seconds=self.ttl_seconds)
        return profile

    def invalidate(self, condition_slugs: Iterable[str]) -> None:
        """Forget the profile of a condition set after its records change."""
        slugs = sorted({slug.strip().lower() for slug in condition_slugs if slug})
        self.cache.delete(_cache_key(slugs))


def _cache_key(slugs: list[str]) -> str:
    return f"restrictions:{','.join(slugs)}"
