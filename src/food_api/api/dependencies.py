"""Request-scoped helpers shared by the routers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request

from food_api.domain.errors import RateLimitExceededError, ValidationError

if TYPE_CHECKING:
    from food_api.containers import AppContainer
    from food_api.services.rate_limit import FixedWindowRateLimiter


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


def get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def client_key(request: Request) -> str:
    """Identify the caller for rate limiting."""
    return request.client.host if request.client else "unknown"


def enforce_rate_limit(
    request: Request, limiter: FixedWindowRateLimiter, message: str
) -> None:
    """Record a hit and raise once the caller is over the limit."""
    decision = limiter.hit(client_key(request))
    request.state.rate_limit = decision
    if not decision.allowed:
        raise RateLimitExceededError(
            message,
            limit=decision.limit,
            reset_after_seconds=decision.reset_after_seconds,
        )


async def limit_search(request: Request) -> None:
    """Apply the stricter search limit to food routes."""
    enforce_rate_limit(
        request,
        get_container(request).rate_limiters.search,
        f"Too many search requests from IP {client_key(request)}. "
        "Please wait before searching again.",
    )


async def limit_health(request: Request) -> None:
    """Apply the health check limit."""
    enforce_rate_limit(
        request,
        get_container(request).rate_limiters.health,
        "Too many health check requests.",
    )


def parse_fdc_id(raw: str) -> int:
    """Parse a path FDC id, rejecting non-numeric and non-positive values."""
    try:
        fdc_id = int(raw.strip())
    except ValueError:
        raise ValidationError(
            "Invalid FDC ID",
            details=[
                {
                    "field": "fdcId",
                    "message": "FDC ID must be a valid number",
                    "value": raw,
                }
            ],
        ) from None
    if fdc_id <= 0:
        raise ValidationError(
            "Invalid FDC ID",
            details=[
                {
                    "field": "fdcId",
                    "message": "FDC ID must be a positive number",
                    "value": fdc_id,
                }
            ],
        )
    return fdc_id
