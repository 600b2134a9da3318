"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    fdc_api_key: str
    fdc_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    fdc_timeout_seconds: float = 8.0
    environment: str = _ENVIRONMENT
    allowed_origins: str | None = None
    debug: bool = False

    cache_max_entries: int = 1000
    cache_sweep_interval_seconds: float = 60
    search_cache_ttl_seconds: float = 300
    food_cache_ttl_seconds: float = 600

    rate_limit_general: int = 100
    rate_limit_general_window_seconds: float = 15 * 60
    rate_limit_search: int = 10
    rate_limit_search_window_seconds: float = 60
    rate_limit_health: int = 60
    rate_limit_health_window_seconds: float = 60

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def parse_allowed_origins(raw: str | None) -> list[str] | None:
    """Parse the comma-separated CORS origin list; None means any origin."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if cleaned in {"", "*"}:
        return None
    origins = [chunk.strip() for chunk in cleaned.split(",") if chunk.strip()]
    return origins or None
