"""Merge ingredient exclusion rules by additive category."""

import re
from collections.abc import Iterable
from dataclasses import dataclass

from nutrition_guard.domain.conditions import ExclusionSeverity, IngredientExclusion
from nutrition_guard.domain.restrictions import (
    ConsolidatedExclusion,
    IgnoredExclusion,
)


@dataclass(frozen=True)
class ExclusionAggregation:
    """Consolidated exclusions sorted by category, plus rejected rules."""

    exclusions: tuple[ConsolidatedExclusion, ...]
    ignored: tuple[IgnoredExclusion, ...]


def aggregate_exclusions(
    exclusions: Iterable[IngredientExclusion], active_slugs: Iterable[str]
) -> ExclusionAggregation:
    """Consolidate global and active-condition rules; the most severe wins."""
    active = {slug.strip().lower() for slug in active_slugs}
    groups: dict[str, list[IngredientExclusion]] = {}
    ignored: list[IgnoredExclusion] = []

    for exclusion in sorted(exclusions, key=_exclusion_sort_key):
        slug = exclusion.condition_slug
        if slug is not None and slug.strip().lower() not in active:
            continue
        category_key = " ".join(exclusion.additive_category.split()).casefold()
        if not category_key:
            ignored.append(
                IgnoredExclusion(exclusion=exclusion, reason="missing category")
            )
            continue
        pattern = exclusion.ingredient_regex.strip()
        if not pattern:
            ignored.append(
                IgnoredExclusion(exclusion=exclusion, reason="empty pattern")
            )
            continue
        try:
            re.compile(pattern, re.IGNORECASE)
        except re.error as exc:
            ignored.append(
                IgnoredExclusion(exclusion=exclusion, reason=f"invalid pattern: {exc}")
            )
            continue
        groups.setdefault(category_key, []).append(exclusion)

    consolidated = tuple(_consolidate(rules) for _, rules in sorted(groups.items()))
    return ExclusionAggregation(exclusions=consolidated, ignored=tuple(ignored))


def _consolidate(rules: list[IngredientExclusion]) -> ConsolidatedExclusion:
    patterns = sorted({rule.ingredient_regex.strip() for rule in rules})
    descriptions = sorted(
        {rule.risk_category.strip() for rule in rules if rule.risk_category.strip()}
    )
    slugs = sorted(
        {rule.condition_slug.strip().lower() for rule in rules if rule.condition_slug}
    )
    sources = sorted({rule.source for rule in rules if rule.source})
    combined = (
        patterns[0]
        if len(patterns) == 1
        else "|".join(f"(?:{pattern})" for pattern in patterns)
    )
    return ConsolidatedExclusion(
        category=min(" ".join(rule.additive_category.split()) for rule in rules),
        pattern=combined,
        severity=ExclusionSeverity.most_severe(rule.severity for rule in rules),
        risk_category="; ".join(descriptions),
        condition_slugs=tuple(slugs),
        sources=tuple(sources),
        _compiled=tuple(re.compile(pattern, re.IGNORECASE) for pattern in patterns),
    )


def _exclusion_sort_key(exclusion: IngredientExclusion) -> tuple[str, ...]:
    return (
        exclusion.additive_category.casefold(),
        (exclusion.condition_slug or "").lower(),
        exclusion.ingredient_regex,
        exclusion.risk_category,
        exclusion.severity.value,
        exclusion.source or "",
    )
