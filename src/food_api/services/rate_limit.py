"""Fixed-window rate limiting keyed by client address."""

import math
import time
from collections.abc import Callable
from dataclasses import dataclass, field


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a single rate-limit check."""

    allowed: bool
    limit: int
    remaining: int
    reset_after_seconds: int


@dataclass
class _Window:
    started_at: float
    count: int


@dataclass
class FixedWindowRateLimiter:
    """Allow at most ``limit`` hits per key within each window."""

    name: str
    limit: int
    window_seconds: float
    clock: Callable[[], float] = time.monotonic
    _windows: dict[str, _Window] = field(default_factory=dict, repr=False)

    def hit(self, key: str) -> RateLimitDecision:
        """Record a hit for ``key`` and report whether it is allowed."""
        now = self.clock()
        window = self._windows.get(key)
        if window is None or now - window.started_at >= self.window_seconds:
            self._prune(now)
            window = _Window(started_at=now, count=0)
            self._windows[key] = window
        window.count += 1
        reset_after = math.ceil(self.window_seconds - (now - window.started_at))
        return RateLimitDecision(
            allowed=window.count <= self.limit,
            limit=self.limit,
            remaining=max(self.limit - window.count, 0),
            reset_after_seconds=max(reset_after, 0),
        )

    def reset(self) -> None:
        """Forget all recorded hits."""
        self._windows.clear()

    def _prune(self, now: float) -> None:
        stale = [
            key
            for key, window in self._windows.items()
            if now - window.started_at >= self.window_seconds
        ]
        for key in stale:
            del self._windows[key]


@dataclass
class RateLimiters:
    """The limiters applied to the public routes."""

    general: FixedWindowRateLimiter
    search: FixedWindowRateLimiter
    health: FixedWindowRateLimiter
