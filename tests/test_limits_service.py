"""Tests for the personalized limits service."""

import asyncio

import pytest
from pydantic import ValidationError

from nutrition_guard.domain.foods import Biometrics, Gender
from nutrition_guard.domain.limits import HealthProfile, Medication
from nutrition_guard.services.limits import (
    LIMITS_SCHEMA,
    LimitsService,
    build_limits_prompt,
)


def _health_profile() -> HealthProfile:
    return HealthProfile(
        conditions=["htn", "ckd-3b-5"],
        medications=[Medication(name="Lisinopril", dosage="10mg")],
        biometrics=Biometrics(
            age=62, weight_kg=80, height_cm=175, gender=Gender.MALE
        ),
    )


def test_compute_validates_payload(limits_service: LimitsService) -> None:
    limits = asyncio.run(limits_service.compute(_health_profile()))

    assert limits.max_for("NA") == 2000
    assert limits.max_for("fibtg") is None
    assert limits.avoid_ingredients == ["starfruit", "banana"]
    assert limits.daily_calories.max == 2200


def test_compute_is_cached_per_profile(
    limits_service: LimitsService, limits_client
) -> None:
    asyncio.run(limits_service.compute(_health_profile()))
    reordered = _health_profile().model_copy(
        update={"conditions": ["ckd-3b-5", "htn"]}
    )
    asyncio.run(limits_service.compute(reordered))

    assert len(limits_client.prompts) == 1

    other = _health_profile().model_copy(update={"conditions": ["t2d"]})
    asyncio.run(limits_service.compute(other))
    assert len(limits_client.prompts) == 2


def test_compute_rejects_malformed_payload(
    limits_service: LimitsService, limits_client
) -> None:
    limits_client.payload = {"nutrients": ["not", "a", "mapping"]}

    with pytest.raises(ValidationError):
        asyncio.run(limits_service.compute(_health_profile()))


def test_prompt_mentions_profile() -> None:
    prompt = build_limits_prompt(_health_profile())

    assert "clinical renal dietitian" in prompt
    assert '["ckd-3b-5", "htn"]' in prompt
    assert "Lisinopril" in prompt
    assert "age 62" in prompt
    assert "NA (Sodium)" in prompt


def test_prompt_without_medications() -> None:
    prompt = build_limits_prompt(HealthProfile(conditions=["t2d"]))

    assert "Medications: none" in prompt


def test_schema_requires_every_nutrient_code() -> None:
    nutrients = LIMITS_SCHEMA["properties"]["nutrients"]  # type: ignore[index]

    assert set(nutrients["required"]) == {
        "NA",
        "K",
        "P",
        "PROCNT",
        "CHOCDF",
        "SUGAR",
        "ENERC_KCAL",
        "FIBTG",
        "CHOLE",
    }
