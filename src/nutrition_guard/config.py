"""Application configuration."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from nutrition_guard.domain.policy import EnginePolicy

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str | None = None
    supabase_service_key: str | None = None
    openai_api_key: str | None = None
    openai_model: str = "gpt-5-nano"
    openai_reasoning_effort: str | None = "low"
    openai_store: bool = False
    restriction_cache_ttl_seconds: int = 3600
    limits_cache_ttl_seconds: int = 86400
    debug: bool = False
    environment: str = _ENVIRONMENT
    engine_policy: EnginePolicy = Field(default_factory=EnginePolicy)

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        env_nested_delimiter="__",
        extra="ignore",
    )

    @property
    def uses_supabase(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_key)
