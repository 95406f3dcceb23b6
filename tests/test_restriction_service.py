"""Tests for the restriction service and cache."""

import logging
from dataclasses import replace

import pytest

from nutrition_guard.adapters.memory_condition_repository import (
    InMemoryConditionRepository,
)
from nutrition_guard.domain.conditions import (
    ExclusionSeverity,
    LimitType,
    MaxLimit,
    NutrientLimitRecord,
)
from nutrition_guard.domain.restrictions import LimitResolution
from nutrition_guard.services.cache import InMemoryCache
from nutrition_guard.services.restrictions import RestrictionService


def test_list_conditions_sorted_by_label(
    restriction_service: RestrictionService,
) -> None:
    labels = [item.label for item in restriction_service.list_conditions()]

    assert labels == sorted(labels)
    assert "Hypertension" in labels


def test_profile_merges_seeded_records(
    restriction_service: RestrictionService,
) -> None:
    profile = restriction_service.get_profile(["HTN", "ckd-3b-5", "bogus"])

    assert profile.condition_slugs == {"htn", "ckd-3b-5", "bogus"}
    sodium = profile.limit_for("sodium")
    assert sodium is not None
    assert sodium.bound == MaxLimit(1500)
    categories = {item.category: item for item in profile.exclusions}
    assert categories["Sodium Additives"].condition_slugs == ("ckd-3b-5", "htn")
    assert categories["Trans Fats"].severity is ExclusionSeverity.CRITICAL_AVOID
    assert "Hidden Sugars" not in categories


def test_profile_is_cached_until_invalidated(
    restriction_service: RestrictionService,
    repository: InMemoryConditionRepository,
) -> None:
    first = restriction_service.get_profile(["htn", "t2d"])
    repository.limits.append(
        NutrientLimitRecord(
            condition_slug="htn",
            nutrient="Sodium",
            limit_type=LimitType.MAX,
            limit_value="<1200",
            unit="mg",
        )
    )

    assert restriction_service.get_profile(["t2d", "htn"]) is first

    restriction_service.invalidate(["t2d", "htn"])
    refreshed = restriction_service.get_profile(["htn", "t2d"])
    sodium = refreshed.limit_for("Sodium")
    assert sodium is not None
    assert sodium.bound == MaxLimit(1200)


def test_ignored_rows_and_conflicts_are_logged(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(logging.getLogger("nutrition_guard"), "propagate", True)
    repository = InMemoryConditionRepository(
        limits=[
            NutrientLimitRecord("a", "Potassium", LimitType.MIN, ">4700", "mg"),
            NutrientLimitRecord("b", "Potassium", LimitType.MAX, "<2000", "mg"),
            NutrientLimitRecord("a", "Sodium", LimitType.MAX, "plenty", "mg"),
        ]
    )
    service = RestrictionService(repository=repository, cache=InMemoryCache())

    with caplog.at_level(logging.WARNING, logger="nutrition_guard"):
        profile = service.get_profile(["a", "b"])

    potassium = profile.limit_for("Potassium")
    assert potassium is not None
    assert potassium.resolution is LimitResolution.CONFLICTING
    assert len(profile.ignored_limits) == 1
    messages = [record.getMessage() for record in caplog.records]
    assert any("Ignoring nutrient limit" in message for message in messages)
    assert any("Conflicting limits need review" in message for message in messages)


def test_cache_expires_and_deletes() -> None:
    cache = InMemoryCache()
    cache.set("expired", "value", ttl_seconds=0)
    cache.set("kept", "value", ttl_seconds=60)

    assert cache.get("expired") is None
    assert cache.get("kept") == "value"

    cache.delete("kept")
    assert cache.get("kept") is None


def test_exclusions_include_global_rules_only_once(
    repository: InMemoryConditionRepository,
) -> None:
    repository.exclusions.append(replace(repository.exclusions[-1]))
    service = RestrictionService(repository=repository, cache=InMemoryCache())

    profile = service.get_profile([])

    assert [item.category for item in profile.exclusions] == ["Trans Fats"]
