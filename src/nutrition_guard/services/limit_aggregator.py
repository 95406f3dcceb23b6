"""Merge per-condition nutrient limits into one consolidated limit per nutrient."""

import math
from collections.abc import Iterable
from dataclasses import dataclass, replace

from nutrition_guard.domain.conditions import (
    MaxLimit,
    MinLimit,
    NumericLimit,
    NutrientLimitRecord,
    RangeLimit,
    TextLimit,
    milligrams_per_unit,
    parse_limit,
    scale_limit,
    unit_key,
)
from nutrition_guard.domain.restrictions import (
    IgnoredLimit,
    LimitContribution,
    LimitResolution,
    ResolvedLimit,
    nutrient_key,
)


@dataclass(frozen=True)
class NutrientAggregation:
    """Resolved limits keyed by normalized nutrient name, plus rejected rows."""

    limits: dict[str, ResolvedLimit]
    ignored: tuple[IgnoredLimit, ...]


def aggregate_nutrient_limits(
    records: Iterable[NutrientLimitRecord], active_slugs: Iterable[str]
) -> NutrientAggregation:
    """Resolve the limits of all active conditions, most restrictive first.

    MAX limits take the minimum, MIN limits the maximum, and ranges (including
    MAX/MIN read as half-open ranges) are intersected. An empty intersection is
    reported as CONFLICTING instead of being guessed at, as are limits whose
    units cannot be reconciled.
    """
    active = {slug.strip().lower() for slug in active_slugs}
    names: dict[str, str] = {}
    numeric: dict[str, list[LimitContribution]] = {}
    notes: dict[str, set[str]] = {}
    ignored: list[IgnoredLimit] = []

    for record in sorted(records, key=_record_sort_key):
        slug = record.condition_slug.strip().lower()
        if slug not in active:
            continue
        key = nutrient_key(record.nutrient)
        if not key:
            ignored.append(IgnoredLimit(record=record, reason="missing nutrient name"))
            continue
        bound = parse_limit(record)
        if bound is None:
            ignored.append(
                IgnoredLimit(
                    record=record,
                    reason=(
                        f"cannot read {record.limit_value!r} "
                        f"as a {record.limit_type.value} limit"
                    ),
                )
            )
            continue
        display = " ".join(record.nutrient.split())
        names[key] = min(names.get(key, display), display)
        if isinstance(bound, TextLimit):
            notes.setdefault(key, set()).add(bound.text)
            continue
        numeric.setdefault(key, []).append(
            LimitContribution(condition_slug=slug, bound=bound, unit=record.unit)
        )

    limits: dict[str, ResolvedLimit] = {}
    for key in sorted(names):
        text_notes = tuple(TextLimit(text) for text in sorted(notes.get(key, ())))
        contributions = tuple(numeric.get(key, ()))
        if not contributions:
            limits[key] = ResolvedLimit(
                nutrient=names[key],
                resolution=LimitResolution.TEXT_ONLY,
                bound=None,
                unit=None,
                notes=text_notes,
            )
            continue
        limits[key] = _resolve(names[key], contributions, text_notes)

    return NutrientAggregation(limits=limits, ignored=tuple(ignored))


def _resolve(
    name: str,
    contributions: tuple[LimitContribution, ...],
    notes: tuple[TextLimit, ...],
) -> ResolvedLimit:
    unit, comparable = _common_unit(contributions)
    if comparable is None:
        return ResolvedLimit(
            nutrient=name,
            resolution=LimitResolution.CONFLICTING,
            bound=None,
            unit=None,
            notes=notes,
            contributors=contributions,
        )

    intervals = [_interval(contribution.bound) for contribution in comparable]
    lows = [low for low, _ in intervals if low is not None]
    highs = [high for _, high in intervals if high is not None]
    low = max(lows) if lows else None
    high = min(highs) if highs else None

    if low is not None and high is not None and low > high:
        narrowest = min(comparable, key=_narrowness)
        return ResolvedLimit(
            nutrient=name,
            resolution=LimitResolution.CONFLICTING,
            bound=narrowest.bound,
            unit=unit,
            notes=notes,
            contributors=contributions,
        )

    bound: NumericLimit
    if low is None and high is not None:
        bound = MaxLimit(high)
    elif high is None and low is not None:
        bound = MinLimit(low)
    else:
        bound = RangeLimit(low=low, high=high)  # type: ignore[arg-type]
    return ResolvedLimit(
        nutrient=name,
        resolution=LimitResolution.RESOLVED,
        bound=bound,
        unit=unit,
        notes=notes,
        contributors=contributions,
    )


def _interval(bound: NumericLimit) -> tuple[float | None, float | None]:
    if isinstance(bound, MaxLimit):
        return None, bound.value
    if isinstance(bound, MinLimit):
        return bound.value, None
    return bound.low, bound.high


def _narrowness(contribution: LimitContribution) -> tuple[float, float, float, str]:
    low, high = _interval(contribution.bound)
    width = high - low if low is not None and high is not None else math.inf
    return (
        width,
        low if low is not None else -math.inf,
        high if high is not None else math.inf,
        contribution.condition_slug,
    )


def _common_unit(
    contributions: tuple[LimitContribution, ...],
) -> tuple[str | None, tuple[LimitContribution, ...] | None]:
    """Return the shared unit and the contributions expressed in it.

    Rows without a unit share the others' unit, or mg once differing mass
    units have been converted to mg. Any other disagreement cannot be compared
    and yields ``(None, None)``.
    """
    labels: dict[str, str] = {}
    for contribution in contributions:
        key = unit_key(contribution.unit)
        if key is None:
            continue
        label = contribution.unit.strip()  # type: ignore[union-attr]
        labels[key] = min(labels.get(key, label), label)
    if len(labels) <= 1:
        return next(iter(labels.values()), None), contributions
    if any(milligrams_per_unit(key) is None for key in labels):
        return None, None
    return "mg", tuple(_in_milligrams(contribution) for contribution in contributions)


def _in_milligrams(contribution: LimitContribution) -> LimitContribution:
    factor = milligrams_per_unit(contribution.unit)
    if factor is None:
        return replace(contribution, unit="mg")
    return replace(
        contribution, bound=scale_limit(contribution.bound, factor), unit="mg"
    )


def _record_sort_key(record: NutrientLimitRecord) -> tuple[str, str, str, str, str]:
    return (
        record.condition_slug.strip().lower(),
        nutrient_key(record.nutrient),
        record.limit_type.value,
        record.limit_value,
        record.unit or "",
    )
