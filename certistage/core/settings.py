"""Application settings for the CertiStage billing service."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .plans import PlanId, build_price_table


class Settings(BaseSettings):
    """Centralised configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_prefix="CERTISTAGE_", case_sensitive=False)

    app_name: str = "CertiStage"
    environment: Literal["development", "staging", "production"] = "development"

    # Database
    data_dir: Path = Field(default_factory=lambda: Path.cwd() / "instance")
    database_url: str | None = None

    # Billing
    currency: str = "INR"
    plan_price_overrides: dict[str, int] = Field(default_factory=dict)

    # Rate limiting / monitoring
    rate_limit_enabled: bool = True
    rate_limit_requests: int = 100
    rate_limit_window_seconds: int = 3600
    rate_limit_storage_url: str | None = None
    redis_url: str | None = None
    payment_rate_limit: str = "3/hour"
    sentry_dsn: str | None = None
    enable_prometheus: bool = True
    metrics_namespace: str = "certistage"
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    @field_validator("plan_price_overrides")
    @classmethod
    def _check_price_overrides(cls, value: dict[str, int]) -> dict[str, int]:
        build_price_table(value)
        return value

    @property
    def resolved_database_url(self) -> str:
        """Return the configured database URL defaulting to a local SQLite file."""
        if self.database_url:
            return self.database_url

        self.data_dir.mkdir(parents=True, exist_ok=True)
        return f"sqlite:///{(self.data_dir / 'certistage.db').as_posix()}"

    @property
    def resolved_rate_limit_storage(self) -> str:
        if self.rate_limit_storage_url:
            return self.rate_limit_storage_url
        if self.redis_url:
            return f"redis://{self.redis_url.split('://')[-1]}"
        return "memory://"

    @property
    def price_table(self) -> dict[PlanId, int]:
        """Effective plan prices in minor units."""
        return build_price_table(self.plan_price_overrides)


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""
    settings = Settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    return settings


__all__ = ["Settings", "get_settings"]
