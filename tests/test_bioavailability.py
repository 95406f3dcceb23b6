"""Tests for grain bioavailability tiers and contraindications."""

from nutrition_guard.domain.analysis import BioavailabilityTier
from nutrition_guard.domain.conditions import ConditionKind
from nutrition_guard.services.bioavailability import (
    classify_grain,
    contraindicated_terms,
    grain_notes,
    is_contraindicated,
)


def test_classify_grain_tiers() -> None:
    assert classify_grain("Bulgur wheat") is BioavailabilityTier.OPTIMAL
    assert classify_grain("brown rice") is BioavailabilityTier.MODERATE
    assert classify_grain("white rice") is BioavailabilityTier.CONDITIONAL
    assert classify_grain("whole wheat flour") is BioavailabilityTier.MODERATE
    assert classify_grain("enriched flour") is BioavailabilityTier.AVOID
    assert classify_grain(None) is BioavailabilityTier.AVOID


def test_grain_notes_skip_non_grains() -> None:
    notes = grain_notes("Water, Barley, salt, enriched flour, barley")

    assert [(note.ingredient, note.tier) for note in notes] == [
        ("barley", BioavailabilityTier.OPTIMAL),
        ("enriched flour", BioavailabilityTier.AVOID),
    ]


def test_starfruit_is_contraindicated_for_kidney_disease() -> None:
    assert is_contraindicated("Star Fruit", ConditionKind.KIDNEY_DISEASE)
    assert not is_contraindicated("star fruit", ConditionKind.DIABETES)
    assert contraindicated_terms(
        "carambola juice", [ConditionKind.KIDNEY_DISEASE]
    ) == ["carambola"]
    assert contraindicated_terms("", [ConditionKind.KIDNEY_DISEASE]) == []
