"""Personalized daily limits from an LLM-backed limit generator."""

import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Protocol

from nutrition_guard.domain.limits import NUTRIENT_CODES, ComputedLimits, HealthProfile
from nutrition_guard.services.cache import Cache

_logger = logging.getLogger(__name__)

_NULLABLE_NUMBER: dict[str, object] = {"anyOf": [{"type": "number"}, {"type": "null"}]}


def _bounds_schema() -> dict[str, object]:
    return {
        "type": "object",
        "properties": {
            "min": _NULLABLE_NUMBER,
            "max": _NULLABLE_NUMBER,
            "unit": {"type": "string"},
        },
        "required": ["min", "max", "unit"],
        "additionalProperties": False,
    }


LIMITS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "daily_calories": {
            "type": "object",
            "properties": {"min": _NULLABLE_NUMBER, "max": _NULLABLE_NUMBER},
            "required": ["min", "max"],
            "additionalProperties": False,
        },
        "nutrients": {
            "type": "object",
            "properties": {code: _bounds_schema() for code in NUTRIENT_CODES},
            "required": list(NUTRIENT_CODES),
            "additionalProperties": False,
        },
        "avoid_ingredients": {"type": "array", "items": {"type": "string"}},
        "reasoning": {"type": "string"},
    },
    "required": ["daily_calories", "nutrients", "avoid_ingredients", "reasoning"],
    "additionalProperties": False,
}


class LimitsClient(Protocol):
    """Interface for LLM structured limit generation."""

    async def generate(
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Return raw structured limit data."""


@dataclass
class LimitsService:
    """Builds the clinical prompt, validates and caches generated limits."""

    client: LimitsClient
    model: str
    reasoning_effort: str | None
    store: bool
    cache: Cache
    ttl_seconds: int = 86400
    debug: bool = False

    async def compute(self, profile: HealthProfile) -> ComputedLimits:
        """Return daily limits for a health profile."""
        cache_key = _cache_key(profile)
        cached = self.cache.get(cache_key)
        if isinstance(cached, ComputedLimits):
            return cached

        raw = await self.client.generate(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            schema=LIMITS_SCHEMA,
            prompt=build_limits_prompt(profile),
        )
        limits = ComputedLimits.model_validate(raw)
        if self.debug:
            _logger.info(
                "Computed limits: conditions=%s nutrients=%s avoid=%s",
                ",".join(profile.conditions),
                len(limits.nutrients),
                len(limits.avoid_ingredients),
            )
        self.cache.set(cache_key, limits, ttl_seconds=self.ttl_seconds)
        return limits


def build_limits_prompt(profile: HealthProfile) -> str:
    """Render the clinical dietitian prompt for a health profile."""
    biometrics = profile.biometrics
    medications = ", ".join(med.name for med in profile.medications) or "none"
    codes = ", ".join(f"{code} ({label})" for code, label in NUTRIENT_CODES.items())
    return (
        "You are a clinical renal dietitian. Set daily nutrition limits for this "
        "patient based on their medical profile.\n\n"
        "PATIENT DATA:\n"
        f"- Conditions: {json.dumps(sorted(profile.conditions))}\n"
        "  ('ckd-3b-5' means Stage 3b-5 kidney disease, 'htn' hypertension, "
        "'t2d' type 2 diabetes)\n"
        f"- Medications: {medications}\n"
        f"- Biometrics: age {biometrics.age}, weight {biometrics.weight_kg}kg, "
        f"height {biometrics.height_cm}cm, gender {biometrics.gender.value}\n\n"
        f"Use these nutrient codes: {codes}. Use mg for minerals and cholesterol, "
        "g for macronutrients. Use null where no limit applies.\n"
        "List avoid_ingredients as single food names, not sentences. "
        "Keep reasoning to one or two sentences."
    )


def _cache_key(profile: HealthProfile) -> str:
    payload = profile.model_dump(mode="json")
    payload["conditions"] = sorted(payload["conditions"])
    digest = hashlib.sha256(
        json.dumps(payload, sort_keys=True).encode("utf-8")
    ).hexdigest()
    return f"limits:{digest}"
