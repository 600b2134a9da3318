"""Process-wide in-memory response cache."""

import asyncio
import json
import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Protocol

_logger = logging.getLogger(__name__)


class Cache(Protocol):
    """Cache interface for simple key-value data."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object, ttl_seconds: float | None = None) -> None:
        """Store a cached value with a TTL in seconds."""

    def delete(self, key: str) -> None:
        """Remove a cached value."""


@dataclass(frozen=True)
class CacheEntry:
    value: object
    created_at: float
    ttl_seconds: float

    def is_expired(self, now: float) -> bool:
        return self.ttl_seconds <= 0 or now - self.created_at > self.ttl_seconds


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time cache size information."""

    size: int
    max_entries: int


class InMemoryCache(Cache):
    """Bounded TTL cache with oldest-first eviction."""

    def __init__(
        self,
        max_entries: int = 1000,
        default_ttl_seconds: float = 300,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_entries = max_entries
        self.default_ttl_seconds = default_ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: str, value: object, ttl_seconds: float | None = None) -> None:
        """Store a cached value, evicting the oldest entries when full."""
        if key not in self._entries and len(self._entries) >= self.max_entries:
            self._evict_oldest()
        ttl = self.default_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._entries[key] = CacheEntry(
            value=value, created_at=self._clock(), ttl_seconds=ttl
        )

    def delete(self, key: str) -> None:
        """Remove a cached value if present."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def sweep(self) -> int:
        """Remove all expired entries and return how many were dropped."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def stats(self) -> CacheStats:
        """Return the current size and capacity."""
        return CacheStats(size=len(self._entries), max_entries=self.max_entries)

    @staticmethod
    def generate_key(prefix: str, params: Mapping[str, object]) -> str:
        """Build a key that is independent of parameter insertion order."""
        parts = [f"{name}={json.dumps(params[name])}" for name in sorted(params)]
        return f"{prefix}:{'&'.join(parts)}"

    def _evict_oldest(self) -> None:
        count = max(1, int(self.max_entries * 0.1))
        oldest = sorted(self._entries.items(), key=lambda item: item[1].created_at)
        for key, _ in oldest[:count]:
            del self._entries[key]
        _logger.debug("Cache full, evicted %s oldest entries", count)


async def run_periodic_sweep(
    cache: InMemoryCache, interval_seconds: float = 60
) -> None:
    """Sweep expired entries on a fixed interval until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        removed = cache.sweep()
        if removed:
            _logger.debug("Cache sweep removed %s expired entries", removed)
