"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from nutrition_guard.adapters.memory_condition_repository import (
    InMemoryConditionRepository,
)
from nutrition_guard.config import Settings
from nutrition_guard.containers import AppContainer
from nutrition_guard.domain.limits import ComputedLimits
from nutrition_guard.domain.policy import DEFAULT_POLICY
from nutrition_guard.services.cache import InMemoryCache
from nutrition_guard.services.limits import LimitsClient, LimitsService
from nutrition_guard.services.restrictions import RestrictionService


def limits_payload() -> dict[str, object]:
    return {
        "daily_calories": {"min": 1800, "max": 2200},
        "nutrients": {
            "NA": {"min": None, "max": 2000, "unit": "mg"},
            "K": {"min": None, "max": 2000, "unit": "mg"},
            "P": {"min": None, "max": 800, "unit": "mg"},
            "PROCNT": {"min": 40, "max": 60, "unit": "g"},
            "CHOCDF": {"min": None, "max": 200, "unit": "g"},
            "SUGAR": {"min": None, "max": 25, "unit": "g"},
            "ENERC_KCAL": {"min": 1800, "max": 2200, "unit": "kcal"},
            "FIBTG": {"min": 25, "max": None, "unit": "g"},
            "CHOLE": {"min": None, "max": 200, "unit": "mg"},
        },
        "avoid_ingredients": ["starfruit", " banana "],
        "reasoning": "Stage 4 kidney disease requires potassium control.",
    }


@dataclass
class FakeLimitsClient(LimitsClient):
    """Fake limits client returning a fixed payload and recording prompts."""

    payload: dict[str, object] = field(default_factory=limits_payload)
    prompts: list[str] = field(default_factory=list)
    error: Exception | None = None
    closed: bool = False

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.payload

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        supabase_url=None,
        supabase_service_key=None,
        openai_api_key="openai-key",
    )


@pytest.fixture
def computed_limits() -> ComputedLimits:
    return ComputedLimits.model_validate(limits_payload())


@pytest.fixture
def repository() -> InMemoryConditionRepository:
    return InMemoryConditionRepository()


@pytest.fixture
def restriction_service(
    repository: InMemoryConditionRepository,
) -> RestrictionService:
    return RestrictionService(repository=repository, cache=InMemoryCache())


@pytest.fixture
def limits_client() -> FakeLimitsClient:
    return FakeLimitsClient()


@pytest.fixture
def limits_service(
    settings: Settings, limits_client: FakeLimitsClient
) -> LimitsService:
    return LimitsService(
        client=limits_client,
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
        cache=InMemoryCache(),
    )


@pytest.fixture
def container(
    settings: Settings,
    restriction_service: RestrictionService,
    limits_service: LimitsService,
    limits_client: FakeLimitsClient,
) -> AppContainer:
    async def close_resources() -> None:
        await limits_client.close()

    return AppContainer(
        settings=settings,
        policy=DEFAULT_POLICY,
        restriction_service=restriction_service,
        limits_service=limits_service,
        close_resources=close_resources,
    )
