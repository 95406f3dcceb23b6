"""Tests for nutrient limit aggregation."""

import random

from nutrition_guard.domain.conditions import (
    LimitType,
    MaxLimit,
    MinLimit,
    NutrientLimitRecord,
    RangeLimit,
    TextLimit,
)
from nutrition_guard.domain.restrictions import LimitResolution
from nutrition_guard.seed_data import NUTRIENT_LIMITS
from nutrition_guard.services.limit_aggregator import aggregate_nutrient_limits


def _record(
    slug: str,
    value: str,
    limit_type: LimitType = LimitType.MAX,
    nutrient: str = "Sodium",
    unit: str | None = "mg",
) -> NutrientLimitRecord:
    return NutrientLimitRecord(
        condition_slug=slug,
        nutrient=nutrient,
        limit_type=limit_type,
        limit_value=value,
        unit=unit,
    )


def test_max_limits_take_the_minimum() -> None:
    result = aggregate_nutrient_limits(
        [_record("t2d", "<2300"), _record("htn", "<1500")], ["t2d", "htn"]
    )

    sodium = result.limits["sodium"]
    assert sodium.resolution is LimitResolution.RESOLVED
    assert sodium.bound == MaxLimit(1500)
    assert sodium.unit == "mg"
    assert {c.condition_slug for c in sodium.contributors} == {"t2d", "htn"}


def test_min_limits_take_the_maximum() -> None:
    result = aggregate_nutrient_limits(
        [
            _record("a", ">20", LimitType.MIN, "Fiber", "g"),
            _record("b", ">30", LimitType.MIN, "Fiber", "g"),
        ],
        ["a", "b"],
    )

    assert result.limits["fiber"].bound == MinLimit(30)


def test_overlapping_ranges_intersect() -> None:
    result = aggregate_nutrient_limits(
        [
            _record("htn", "3500-5000", LimitType.RANGE, "Potassium"),
            _record("t2d", "<4000", LimitType.MAX, "Potassium"),
        ],
        ["htn", "t2d"],
    )

    assert result.limits["potassium"].bound == RangeLimit(3500, 4000)


def test_disjoint_ranges_are_conflicting() -> None:
    result = aggregate_nutrient_limits(
        [
            _record("a", "100-200", LimitType.RANGE, "Phosphorus"),
            _record("b", "300-400", LimitType.RANGE, "Phosphorus"),
        ],
        ["a", "b"],
    )

    phosphorus = result.limits["phosphorus"]
    assert phosphorus.resolution is LimitResolution.CONFLICTING
    assert phosphorus.needs_review
    assert phosphorus.bound == RangeLimit(100, 200)


def test_min_above_max_is_conflicting() -> None:
    result = aggregate_nutrient_limits(
        [
            _record("t2d", ">4700", LimitType.MIN, "Potassium"),
            _record("ckd", "<2000", LimitType.MAX, "Potassium"),
        ],
        ["t2d", "ckd"],
    )

    assert result.limits["potassium"].resolution is LimitResolution.CONFLICTING


def test_text_limits_become_notes() -> None:
    result = aggregate_nutrient_limits(
        [
            _record("pcos", "Minimize", LimitType.TEXT, "Added Sugar", None),
            _record("t2d", "<25-36", LimitType.MAX, "Added Sugar", "g"),
            _record("t2d", "Normal", LimitType.TEXT, "Phosphorus", None),
        ],
        ["pcos", "t2d"],
    )

    added_sugar = result.limits["added sugar"]
    assert added_sugar.bound == MaxLimit(25)
    assert added_sugar.notes == (TextLimit("Minimize"),)
    phosphorus = result.limits["phosphorus"]
    assert phosphorus.resolution is LimitResolution.TEXT_ONLY
    assert phosphorus.bound is None


def test_malformed_values_are_ignored_not_raised() -> None:
    result = aggregate_nutrient_limits(
        [
            _record("t2d", "lots"),
            _record("htn", "<1500"),
            _record("htn", "", nutrient=""),
        ],
        ["t2d", "htn"],
    )

    assert result.limits["sodium"].bound == MaxLimit(1500)
    assert len(result.ignored) == 2
    assert {ignored.reason for ignored in result.ignored} == {
        "cannot read 'lots' as a MAX limit",
        "missing nutrient name",
    }


def test_inactive_conditions_are_skipped() -> None:
    result = aggregate_nutrient_limits(
        [_record("t2d", "<2300"), _record("htn", "<1500")], ["t2d", "unknown"]
    )

    assert result.limits["sodium"].bound == MaxLimit(2300)


def test_mass_units_are_converted_to_milligrams() -> None:
    result = aggregate_nutrient_limits(
        [_record("a", "<2", unit="g"), _record("b", "<2300", unit="mg")], ["a", "b"]
    )

    sodium = result.limits["sodium"]
    assert sodium.resolution is LimitResolution.RESOLVED
    assert sodium.bound == MaxLimit(2000)
    assert sodium.unit == "mg"


def test_mass_unit_tighter_after_conversion() -> None:
    result = aggregate_nutrient_limits(
        [_record("a", "<1.5", unit="G"), _record("b", "<2300", unit="mg")], ["a", "b"]
    )

    assert result.limits["sodium"].bound == MaxLimit(1500)


def test_same_unit_keeps_its_label() -> None:
    result = aggregate_nutrient_limits(
        [_record("a", "<2", unit="g"), _record("b", "<3", unit=" g ")], ["a", "b"]
    )

    assert result.limits["sodium"].bound == MaxLimit(2)
    assert result.limits["sodium"].unit == "g"


def test_incompatible_units_are_conflicting() -> None:
    result = aggregate_nutrient_limits(
        [
            _record("a", "<10", nutrient="Sat. Fat", unit="%"),
            _record("b", "<13", nutrient="Sat. Fat", unit="g"),
        ],
        ["a", "b"],
    )

    sat_fat = result.limits["sat. fat"]
    assert sat_fat.resolution is LimitResolution.CONFLICTING
    assert sat_fat.bound is None
    assert sat_fat.unit is None
    assert len(sat_fat.contributors) == 2


def test_order_of_records_does_not_change_result() -> None:
    slugs = ["t2d", "htn", "ckd-3b-5", "pcos", "hyperlipidemia"]
    records = list(NUTRIENT_LIMITS)
    expected = aggregate_nutrient_limits(records, slugs)

    shuffled = records[:]
    random.Random(7).shuffle(shuffled)
    actual = aggregate_nutrient_limits(shuffled, list(reversed(slugs)))

    assert actual.limits == expected.limits
    assert actual.ignored == expected.ignored


def test_seed_limits_for_all_conditions() -> None:
    slugs = ["t2d", "htn", "ckd-3b-5", "pcos", "hyperlipidemia"]
    result = aggregate_nutrient_limits(NUTRIENT_LIMITS, slugs)

    assert result.limits["sodium"].bound == MaxLimit(1500)
    assert result.limits["sat. fat"].bound == MaxLimit(5)
    potassium = result.limits["potassium"]
    assert potassium.bound == RangeLimit(4700, 5000)
    assert potassium.notes == (TextLimit("Limit if High (<2000-3000)"),)
    assert result.ignored == ()
