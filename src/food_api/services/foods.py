"""Food lookups against USDA FDC with response caching."""

import asyncio
import logging
import time
from dataclasses import dataclass

from food_api.adapters.fdc_client import FdcClient
from food_api.domain.errors import MalformedResponseError
from food_api.domain.nutrition import NutritionSummary, RawFoodRecord, SearchResult
from food_api.services import extraction
from food_api.services.cache import Cache, InMemoryCache

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpstreamStatus:
    """Result of a live upstream connectivity check."""

    status: str
    response_time_ms: int


@dataclass
class FoodService:
    """Service for food search, details and nutrition with caching."""

    fdc_client: FdcClient
    cache: Cache
    search_ttl_seconds: float = 300
    food_ttl_seconds: float = 600
    debug: bool = False

    async def search(
        self, query: str, page_size: int = 25, page_number: int = 1
    ) -> SearchResult:
        """Search FDC foods and extract nutrition summaries."""
        cache_key = InMemoryCache.generate_key(
            "search",
            {"type": query, "pageSize": page_size, "pageNumber": page_number},
        )
        cached = self.cache.get(cache_key)
        if isinstance(cached, SearchResult):
            return cached

        payload = await self.fdc_client.search_foods(
            query, page_size=page_size, page_number=page_number
        )
        try:
            result = extraction.extract_search_result(payload, query)
        except Exception as exc:
            msg = "Failed to extract nutrition data from USDA response"
            raise MalformedResponseError(msg) from exc
        self.cache.set(cache_key, result, ttl_seconds=self.search_ttl_seconds)
        if self.debug:
            _logger.info(
                "Food search: query=%s results=%s total=%s",
                query,
                len(result.foods),
                result.total_hits,
            )
        return result

    async def get_food(self, fdc_id: int) -> RawFoodRecord:
        """Return the raw FDC record for a food."""
        cache_key = InMemoryCache.generate_key("food", {"fdcId": fdc_id})
        cached = self.cache.get(cache_key)
        if isinstance(cached, dict):
            return cached

        record = await self.fdc_client.get_food(fdc_id)
        self.cache.set(cache_key, record, ttl_seconds=self.food_ttl_seconds)
        if self.debug:
            _logger.info("Food details: fdc_id=%s", fdc_id)
        return record

    async def get_nutrition(self, fdc_id: int) -> NutritionSummary | None:
        """Return a nutrition summary, or None when extraction yields nothing."""
        cache_key = InMemoryCache.generate_key("nutrition", {"fdcId": fdc_id})
        cached = self.cache.get(cache_key)
        if isinstance(cached, NutritionSummary):
            return cached

        record = await self.get_food(fdc_id)
        summary = extraction.extract(record)
        if summary is not None:
            self.cache.set(cache_key, summary, ttl_seconds=self.food_ttl_seconds)
        return summary

    async def check_upstream(self, timeout_seconds: float = 2.0) -> UpstreamStatus:
        """Run a minimal live search and report whether FDC answered in time."""
        started = time.perf_counter()
        try:
            await asyncio.wait_for(
                self.fdc_client.search_foods("test", page_size=1, page_number=1),
                timeout=timeout_seconds,
            )
        except Exception as exc:  # noqa: BLE001
            _logger.warning(
                "USDA API health check failed: %s: %s", type(exc).__name__, exc
            )
            return UpstreamStatus(status="unhealthy", response_time_ms=0)
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        return UpstreamStatus(status="healthy", response_time_ms=elapsed_ms)
