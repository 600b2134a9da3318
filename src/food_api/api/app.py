"""FastAPI application factory."""

import asyncio
import contextlib
import logging
import platform
import secrets
import string
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from food_api.api.dependencies import (
    client_key,
    get_container,
    get_request_id,
    limit_health,
)
from food_api.api.foods import router as foods_router
from food_api.api.models import ApiResponse
from food_api.app_logging import configure_logging
from food_api.config import parse_allowed_origins
from food_api.containers import AppContainer
from food_api.domain.errors import ErrorCode, FoodApiError
from food_api.services.cache import run_periodic_sweep
from food_api.services.rate_limit import RateLimitDecision

_REQUEST_ID_ALPHABET = string.digits + string.ascii_lowercase
_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Content-Security-Policy": (
        "default-src 'self'; style-src 'self' 'unsafe-inline'; "
        "script-src 'self'; img-src 'self' data: https:"
    ),
}
_RATE_LIMIT_HEADERS = ("RateLimit-Limit", "RateLimit-Remaining", "RateLimit-Reset")


def generate_request_id() -> str:
    """Return an id like ``req_<epoch ms>_<9 base36 chars>``."""
    suffix = "".join(secrets.choice(_REQUEST_ID_ALPHABET) for _ in range(9))
    return f"req_{int(time.time() * 1000)}_{suffix}"


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    settings = container.settings
    configure_logging(debug=settings.debug)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        sweeper = asyncio.create_task(
            run_periodic_sweep(
                state_container.cache, settings.cache_sweep_interval_seconds
            )
        )
        try:
            yield
        finally:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper
            await state_container.close_resources()

    app = FastAPI(title="Food API", version="1.0.0", lifespan=lifespan)
    app.state.container = container

    app.add_middleware(GZipMiddleware, minimum_size=1000)
    origins = parse_allowed_origins(settings.allowed_origins)
    if settings.is_production:
        allow_origins = origins or []
    else:
        allow_origins = ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
        expose_headers=["X-Request-ID", *_RATE_LIMIT_HEADERS],
    )

    @app.middleware("http")
    async def request_context(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        started = time.perf_counter()
        request_id = generate_request_id()
        request.state.request_id = request_id
        state_container: AppContainer = request.app.state.container
        decision = state_container.rate_limiters.general.hit(client_key(request))
        request.state.rate_limit = decision
        if not decision.allowed:
            response: Response = _envelope_response(
                429,
                ApiResponse(
                    success=False,
                    error=ErrorCode.RATE_LIMIT_EXCEEDED,
                    message=(
                        f"Too many requests from IP {client_key(request)}. "
                        "Please try again later."
                    ),
                    request_id=request_id,
                ),
            )
        else:
            try:
                response = await call_next(request)
            except Exception as exc:
                logger.exception(
                    "Unhandled error",
                    extra={
                        "request_id": request_id,
                        "method": request.method,
                        "path": request.url.path,
                    },
                )
                message = "An unexpected error occurred"
                if settings.environment == "local":
                    message = f"{type(exc).__name__}: {exc}"
                response = _envelope_response(
                    500,
                    ApiResponse(
                        success=False,
                        error=ErrorCode.INTERNAL_SERVER_ERROR,
                        message=message,
                        request_id=request_id,
                    ),
                )
        response.headers["X-Request-ID"] = request_id
        response.headers.update(_SECURITY_HEADERS)
        _apply_rate_limit_headers(response, request.state.rate_limit)
        logger.info(
            "%s %s -> %s in %.1fms [%s]",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
            request_id,
        )
        return response

    @app.exception_handler(FoodApiError)
    async def food_api_error_handler(request: Request, exc: FoodApiError) -> Response:
        logger.warning(
            "Request failed: %s %s -> %s %s: %s",
            request.method,
            request.url.path,
            exc.status_code,
            exc.code,
            exc.message,
        )
        return _envelope_response(
            exc.status_code,
            ApiResponse(
                success=False,
                error=exc.code,
                message=exc.message,
                details=exc.details,
                request_id=get_request_id(request),
            ),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> Response:
        details = [
            {
                "field": ".".join(str(part) for part in error["loc"][1:]),
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        return _envelope_response(
            400,
            ApiResponse(
                success=False,
                error=ErrorCode.VALIDATION_ERROR,
                message="Validation failed",
                details=details,
                request_id=get_request_id(request),
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> Response:
        if exc.status_code == 404:  # noqa: PLR2004
            error = ErrorCode.ENDPOINT_NOT_FOUND
            message = f"Route {request.method} {request.url.path} not found"
        else:
            error = ErrorCode.HTTP_ERROR
            message = str(exc.detail)
        return _envelope_response(
            exc.status_code,
            ApiResponse(
                success=False,
                error=error,
                message=message,
                request_id=get_request_id(request),
            ),
        )

    @app.get("/")
    async def root(request: Request) -> dict[str, object]:
        """Describe the service and its endpoints."""
        return ApiResponse(
            success=True,
            message="Food API - USDA FoodData Central Integration",
            data={
                "version": app.version,
                "endpoints": {
                    "health": "/health",
                    "searchFoods": "/foods?type=apple&pageSize=10",
                    "getFoodNutrition": "/foods/{fdcId}/nutrition",
                    "getFoodDetails": "/foods/{fdcId}",
                },
                "documentation": "https://fdc.nal.usda.gov/api-guide.html",
            },
            request_id=get_request_id(request),
        ).to_content()

    @app.get("/health", dependencies=[Depends(limit_health)])
    async def health(request: Request, full: bool = False) -> Response:
        """Report service health, optionally checking FDC connectivity."""
        state_container = get_container(request)
        upstream_status, response_time_ms = "healthy", 0
        if full:
            upstream = await state_container.food_service.check_upstream()
            upstream_status = upstream.status
            response_time_ms = upstream.response_time_ms
        healthy = upstream_status == "healthy"
        uptime = time.monotonic() - state_container.started_at
        cache_stats = state_container.cache.stats()
        rate_limit: RateLimitDecision | None = getattr(
            request.state, "rate_limit", None
        )
        data = {
            "status": "healthy" if healthy else "degraded",
            "timestamp": datetime.now(tz=UTC).isoformat(),
            "uptime": {"seconds": int(uptime), "human": format_uptime(uptime)},
            "system": {
                "platform": platform.system().lower(),
                "pythonVersion": platform.python_version(),
                "environment": settings.environment,
            },
            "services": {
                "usdaApi": {
                    "status": upstream_status,
                    "responseTime": response_time_ms,
                }
            },
            "cache": {
                "size": cache_stats.size,
                "maxEntries": cache_stats.max_entries,
            },
            "rateLimit": (
                {
                    "limit": rate_limit.limit,
                    "remaining": rate_limit.remaining,
                    "resetAfterSeconds": rate_limit.reset_after_seconds,
                }
                if rate_limit
                else None
            ),
        }
        message = (
            "Food API is running and all services are healthy"
            if healthy
            else "Food API is running but some services are experiencing issues"
        )
        return _envelope_response(
            200 if healthy else 503,
            ApiResponse(
                success=True,
                data=data,
                message=message,
                request_id=get_request_id(request),
            ),
        )

    app.include_router(foods_router)

    return app


def format_uptime(seconds: float) -> str:
    """Format an uptime in seconds as ``1d 2h 3m 4s``, dropping leading zeros."""
    total = int(seconds)
    days, remainder = divmod(total, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, secs = divmod(remainder, 60)
    if days:
        return f"{days}d {hours}h {minutes}m {secs}s"
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def _envelope_response(status_code: int, payload: ApiResponse) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=payload.to_content())


def _apply_rate_limit_headers(
    response: Response, decision: RateLimitDecision | None
) -> None:
    if decision is None:
        return
    response.headers["RateLimit-Limit"] = str(decision.limit)
    response.headers["RateLimit-Remaining"] = str(decision.remaining)
    response.headers["RateLimit-Reset"] = str(decision.reset_after_seconds)
