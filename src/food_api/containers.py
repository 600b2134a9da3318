"""Dependency container wiring for the application."""

import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from food_api.adapters.fdc_client import HttpxFdcClient
from food_api.config import Settings
from food_api.services.cache import InMemoryCache
from food_api.services.foods import FoodService
from food_api.services.rate_limit import FixedWindowRateLimiter, RateLimiters


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    cache: InMemoryCache
    food_service: FoodService
    rate_limiters: RateLimiters
    close_resources: Callable[[], Awaitable[None]]
    started_at: float = field(default_factory=time.monotonic)


def build_rate_limiters(settings: Settings) -> RateLimiters:
    """Create the per-route limiters from settings."""
    return RateLimiters(
        general=FixedWindowRateLimiter(
            name="general",
            limit=settings.rate_limit_general,
            window_seconds=settings.rate_limit_general_window_seconds,
        ),
        search=FixedWindowRateLimiter(
            name="search",
            limit=settings.rate_limit_search,
            window_seconds=settings.rate_limit_search_window_seconds,
        ),
        health=FixedWindowRateLimiter(
            name="health",
            limit=settings.rate_limit_health,
            window_seconds=settings.rate_limit_health_window_seconds,
        ),
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    cache = InMemoryCache(max_entries=resolved_settings.cache_max_entries)
    fdc_client = HttpxFdcClient.create(
        api_key=resolved_settings.fdc_api_key,
        base_url=resolved_settings.fdc_base_url,
        timeout_seconds=resolved_settings.fdc_timeout_seconds,
    )
    food_service = FoodService(
        fdc_client=fdc_client,
        cache=cache,
        search_ttl_seconds=resolved_settings.search_cache_ttl_seconds,
        food_ttl_seconds=resolved_settings.food_cache_ttl_seconds,
        debug=resolved_settings.debug,
    )

    async def close_resources() -> None:
        await fdc_client.close()
        cache.clear()

    return AppContainer(
        settings=resolved_settings,
        cache=cache,
        food_service=food_service,
        rate_limiters=build_rate_limiters(resolved_settings),
        close_resources=close_resources,
    )
