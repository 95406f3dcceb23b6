"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrition_guard.adapters.memory_condition_repository import (
    InMemoryConditionRepository,
)
from nutrition_guard.adapters.openai_limits_client import OpenAILimitsClient
from nutrition_guard.adapters.supabase_condition_repository import (
    SupabaseConditionRepository,
)
from nutrition_guard.config import Settings
from nutrition_guard.domain.policy import EnginePolicy
from nutrition_guard.services.cache import InMemoryCache
from nutrition_guard.services.limits import LimitsService
from nutrition_guard.services.restrictions import (
    ConditionRepository,
    RestrictionService,
)

_logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    policy: EnginePolicy
    restriction_service: RestrictionService
    limits_service: LimitsService | None
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    repository: ConditionRepository
    if resolved_settings.uses_supabase:
        supabase_client = create_client(
            resolved_settings.supabase_url, resolved_settings.supabase_service_key
        )
        repository = SupabaseConditionRepository(supabase_client)
    else:
        _logger.warning("Supabase is not configured; using seeded condition data")
        repository = InMemoryConditionRepository()

    restriction_service = RestrictionService(
        repository=repository,
        cache=InMemoryCache(),
        ttl_seconds=resolved_settings.restriction_cache_ttl_seconds,
        debug=resolved_settings.debug,
    )

    limits_client: OpenAILimitsClient | None = None
    limits_service: LimitsService | None = None
    if resolved_settings.openai_api_key:
        limits_client = OpenAILimitsClient.create(resolved_settings.openai_api_key)
        limits_service = LimitsService(
            client=limits_client,
            model=resolved_settings.openai_model,
            reasoning_effort=resolved_settings.openai_reasoning_effort,
            store=resolved_settings.openai_store,
            cache=InMemoryCache(),
            ttl_seconds=resolved_settings.limits_cache_ttl_seconds,
            debug=resolved_settings.debug,
        )

    async def close_resources() -> None:
        if limits_client is not None:
            await limits_client.close()

    return AppContainer(
        settings=resolved_settings,
        policy=resolved_settings.engine_policy,
        restriction_service=restriction_service,
        limits_service=limits_service,
        close_resources=close_resources,
    )
