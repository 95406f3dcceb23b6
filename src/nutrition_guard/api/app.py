"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query, Request, status
from openai import OpenAIError
from pydantic import ValidationError

from nutrition_guard.api.models import (
    EvaluateRequest,
    GrainResponse,
    RestrictionsRequest,
    ScanRequest,
    ScanResponse,
)
from nutrition_guard.app_logging import configure_logging
from nutrition_guard.containers import AppContainer
from nutrition_guard.domain.analysis import AnalysisResult
from nutrition_guard.domain.conditions import (
    Condition,
    ConditionKind,
    MaxLimit,
    MinLimit,
    NumericLimit,
    RangeLimit,
    condition_kinds,
)
from nutrition_guard.domain.limits import ComputedLimits, HealthProfile
from nutrition_guard.domain.restrictions import (
    ConsolidatedExclusion,
    ResolvedLimit,
    RestrictionProfile,
)
from nutrition_guard.services.bioavailability import (
    classify_grain,
    is_contraindicated,
)
from nutrition_guard.services.engine import evaluate
from nutrition_guard.services.patterns import scan_for_additives


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/conditions")
    async def list_conditions(request: Request) -> dict[str, object]:
        """Return the known conditions."""
        state_container: AppContainer = request.app.state.container
        conditions = state_container.restriction_service.list_conditions()
        return {"conditions": [_serialize_condition(item) for item in conditions]}

    @app.post("/restrictions")
    async def restrictions(
        payload: RestrictionsRequest, request: Request
    ) -> dict[str, object]:
        """Merge the limits and exclusions of a condition set."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.restriction_service.get_profile(payload.conditions)
        return _serialize_profile(profile)

    @app.post("/foods/evaluate")
    async def evaluate_food(
        payload: EvaluateRequest, request: Request
    ) -> AnalysisResult:
        """Judge a food against a user profile."""
        state_container: AppContainer = request.app.state.container
        restriction_profile = None
        if payload.use_restrictions and payload.profile.conditions:
            restriction_profile = state_container.restriction_service.get_profile(
                payload.profile.conditions
            )
        result = evaluate(
            payload.food,
            payload.profile,
            restrictions=restriction_profile,
            computed_limits=payload.computed_limits,
            policy=state_container.policy,
        )
        if state_container.settings.debug:
            logger.info(
                "Evaluated food: name=%s status=%s reasons=%s",
                payload.food.name,
                result.status.value,
                len(result.reasons),
            )
        return result

    @app.post("/ingredients/scan")
    async def scan_ingredients(payload: ScanRequest) -> ScanResponse:
        """Scan an ingredient list for additives."""
        scan = scan_for_additives(payload.ingredients, payload.conditions)
        return ScanResponse(
            has_additives=scan.has_additives,
            dangerous_ingredients=scan.dangerous_ingredients,
            safety_message=scan.safety_message,
        )

    @app.get("/grains/{name}")
    async def grain(
        name: str, conditions: list[str] | None = Query(default=None)
    ) -> GrainResponse:
        """Classify a grain and check it against condition contraindications."""
        tier = classify_grain(name)
        kinds: list[ConditionKind] = sorted(
            condition_kinds(conditions or []), key=lambda kind: kind.value
        )
        return GrainResponse(
            ingredient=name,
            tier=tier,
            tier_name=tier.name,
            contraindicated_for=[
                kind.value for kind in kinds if is_contraindicated(name, kind)
            ],
        )

    @app.post("/limits/compute")
    async def compute_limits(
        payload: HealthProfile, request: Request
    ) -> ComputedLimits:
        """Generate personalized daily limits for a health profile."""
        state_container: AppContainer = request.app.state.container
        if state_container.limits_service is None:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Limit generation is not configured",
            )
        try:
            return await state_container.limits_service.compute(payload)
        except (ValidationError, RuntimeError, OpenAIError) as exc:
            logger.exception("Limit generation failed")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Limit generation failed",
            ) from exc

    return app


def _serialize_condition(condition: Condition) -> dict[str, object]:
    kind = condition.kind
    return {
        "id": condition.id,
        "slug": condition.slug,
        "label": condition.label,
        "description": condition.description,
        "nutritional_focus": {
            key: list(values) for key, values in condition.nutritional_focus.items()
        },
        "kind": kind.value if kind else None,
    }


def _serialize_bound(bound: NumericLimit | None) -> dict[str, object] | None:
    if isinstance(bound, MaxLimit):
        return {"type": "MAX", "max": bound.value}
    if isinstance(bound, MinLimit):
        return {"type": "MIN", "min": bound.value}
    if isinstance(bound, RangeLimit):
        return {"type": "RANGE", "min": bound.low, "max": bound.high}
    return None


def _serialize_limit(limit: ResolvedLimit) -> dict[str, object]:
    return {
        "nutrient": limit.nutrient,
        "resolution": limit.resolution.value,
        "bound": _serialize_bound(limit.bound),
        "unit": limit.unit,
        "notes": [note.text for note in limit.notes],
        "needs_review": limit.needs_review,
        "contributors": [
            {
                "condition": contribution.condition_slug,
                "bound": _serialize_bound(contribution.bound),
                "unit": contribution.unit,
            }
            for contribution in limit.contributors
        ],
    }


def _serialize_exclusion(exclusion: ConsolidatedExclusion) -> dict[str, object]:
    return {
        "category": exclusion.category,
        "pattern": exclusion.pattern,
        "severity": exclusion.severity.value,
        "risk_category": exclusion.risk_category,
        "conditions": list(exclusion.condition_slugs),
        "sources": list(exclusion.sources),
    }


def _serialize_profile(profile: RestrictionProfile) -> dict[str, object]:
    return {
        "conditions": sorted(profile.condition_slugs),
        "limits": [
            _serialize_limit(profile.limits[key]) for key in sorted(profile.limits)
        ],
        "exclusions": [_serialize_exclusion(item) for item in profile.exclusions],
        "ignored_limits": [
            {
                "condition": ignored.record.condition_slug,
                "nutrient": ignored.record.nutrient,
                "reason": ignored.reason,
            }
            for ignored in profile.ignored_limits
        ],
        "ignored_exclusions": [
            {
                "condition": ignored.exclusion.condition_slug,
                "category": ignored.exclusion.additive_category,
                "reason": ignored.reason,
            }
            for ignored in profile.ignored_exclusions
        ],
    }
