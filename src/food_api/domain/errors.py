"""Typed errors surfaced by the food API."""

from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable error codes returned in the response envelope."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    API_KEY_INVALID = "API_KEY_INVALID"
    FORBIDDEN = "FORBIDDEN"
    FOOD_NOT_FOUND = "FOOD_NOT_FOUND"
    ENDPOINT_NOT_FOUND = "ENDPOINT_NOT_FOUND"
    NUTRITION_DATA_MISSING = "NUTRITION_DATA_MISSING"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    NETWORK_ERROR = "NETWORK_ERROR"
    USDA_API_ERROR = "USDA_API_ERROR"
    USDA_API_UNAVAILABLE = "USDA_API_UNAVAILABLE"
    PARSING_ERROR = "PARSING_ERROR"
    HTTP_ERROR = "HTTP_ERROR"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class FoodApiError(Exception):
    """Base error carrying an HTTP status and a stable error code."""

    status_code: int = 500
    code: ErrorCode = ErrorCode.INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        *,
        details: object | None = None,
        status_code: int | None = None,
        code: ErrorCode | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code


class ValidationError(FoodApiError):
    """Request input failed validation."""

    status_code = 400
    code = ErrorCode.VALIDATION_ERROR


class FoodNotFoundError(FoodApiError):
    """Upstream has no food with the requested identifier.

    Searches never raise this; zero hits is an empty result page.
    """

    status_code = 404
    code = ErrorCode.FOOD_NOT_FOUND

    def __init__(self, *, fdc_id: int) -> None:
        super().__init__(
            f"Food with FDC ID {fdc_id} not found", details={"fdcId": fdc_id}
        )
        self.fdc_id = fdc_id


# Upstream status -> (error code, HTTP status exposed to our callers).
_UPSTREAM_STATUS_MAP: dict[int, tuple[ErrorCode, int]] = {
    400: (ErrorCode.VALIDATION_ERROR, 400),
    401: (ErrorCode.API_KEY_INVALID, 401),
    403: (ErrorCode.FORBIDDEN, 403),
    404: (ErrorCode.FOOD_NOT_FOUND, 404),
    429: (ErrorCode.RATE_LIMIT_EXCEEDED, 429),
}


class UpstreamError(FoodApiError):
    """Upstream was reachable but answered with a non-success status."""

    code = ErrorCode.USDA_API_ERROR
    status_code = 502

    def __init__(self, upstream_status: int, message: str) -> None:
        code, status_code = _map_upstream_status(upstream_status)
        super().__init__(
            message,
            details={"usdaStatusCode": upstream_status},
            status_code=status_code,
            code=code,
        )
        self.upstream_status = upstream_status


def _map_upstream_status(upstream_status: int) -> tuple[ErrorCode, int]:
    if upstream_status in _UPSTREAM_STATUS_MAP:
        return _UPSTREAM_STATUS_MAP[upstream_status]
    if upstream_status >= 500:  # noqa: PLR2004
        return ErrorCode.USDA_API_UNAVAILABLE, 503
    return ErrorCode.USDA_API_ERROR, 502


class NetworkError(FoodApiError):
    """Upstream was unreachable or timed out."""

    status_code = 502
    code = ErrorCode.NETWORK_ERROR

    def __init__(self, service: str, reason: str | None = None) -> None:
        super().__init__(
            f"Network error connecting to {service}",
            details={"service": service, "reason": reason},
        )
        self.service = service


class MalformedResponseError(FoodApiError):
    """Upstream payload could not be parsed into the expected shape."""

    status_code = 422
    code = ErrorCode.PARSING_ERROR


class RateLimitExceededError(FoodApiError):
    """Caller exceeded one of the inbound rate limits."""

    status_code = 429
    code = ErrorCode.RATE_LIMIT_EXCEEDED

    def __init__(self, message: str, *, limit: int, reset_after_seconds: int) -> None:
        super().__init__(
            message,
            details={"limit": limit, "retryAfterSeconds": reset_after_seconds},
        )
        self.limit = limit
