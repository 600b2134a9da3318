"""USDA FoodData Central API client."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from food_api.domain.errors import (
    FoodNotFoundError,
    MalformedResponseError,
    NetworkError,
    UpstreamError,
    ValidationError,
)

SERVICE_NAME = "USDA API"
MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 200
_HTTP_NOT_FOUND = 404

_logger = logging.getLogger(__name__)


class FdcClient(Protocol):
    """Interface for FoodData Central API interactions."""

    async def search_foods(
        self, query: str, page_size: int = 25, page_number: int = 1
    ) -> dict[str, object]:
        """Search foods by query and return raw API data."""

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        """Fetch a food by FDC id and return raw API data."""


def clamp_page_size(page_size: int) -> int:
    """Clamp a page size into the range FDC accepts."""
    return min(max(page_size, MIN_PAGE_SIZE), MAX_PAGE_SIZE)


def clamp_page_number(page_number: int) -> int:
    """Clamp a page number to the first page at minimum."""
    return max(page_number, 1)


@dataclass
class HttpxFdcClient(FdcClient):
    """HTTPX-backed FDC client making a single attempt per call."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 8.0

    @classmethod
    def create(
        cls, api_key: str, base_url: str, timeout_seconds: float = 8.0
    ) -> "HttpxFdcClient":
        """Create an FDC client with a pooled keep-alive httpx session."""
        http_client = httpx.AsyncClient(
            limits=httpx.Limits(max_connections=50, max_keepalive_connections=10),
            headers={"User-Agent": "FoodAPI/1.0.0", "Accept": "application/json"},
            follow_redirects=True,
            max_redirects=3,
        )
        return cls(
            api_key=api_key,
            base_url=base_url.rstrip("/"),
            http_client=http_client,
            timeout_seconds=timeout_seconds,
        )

    async def search_foods(
        self, query: str, page_size: int = 25, page_number: int = 1
    ) -> dict[str, object]:
        """Search foods by query, clamping pagination into range."""
        term = query.strip() if isinstance(query, str) else ""
        if not term:
            msg = "Food type parameter is required"
            raise ValidationError(msg)
        params: dict[str, str | int] = {
            "query": term,
            "pageSize": clamp_page_size(page_size),
            "pageNumber": clamp_page_number(page_number),
            "api_key": self.api_key,
            "sortBy": "dataType.keyword",
            "sortOrder": "asc",
        }
        return await self._get_json(f"{self.base_url}/foods/search", params)

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        """Fetch a food by FDC id."""
        if fdc_id <= 0:
            msg = "Valid FDC ID is required"
            raise ValidationError(msg)
        return await self._get_json(
            f"{self.base_url}/food/{fdc_id}",
            {"api_key": self.api_key},
            fdc_id=fdc_id,
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _get_json(
        self,
        url: str,
        params: dict[str, str | int],
        *,
        fdc_id: int | None = None,
    ) -> dict[str, object]:
        try:
            response = await self.http_client.get(
                url, params=params, timeout=self.timeout_seconds
            )
        except httpx.DecodingError as exc:
            _logger.warning("FDC response could not be decoded: %s", exc)
            msg = "Invalid response format from USDA API"
            raise MalformedResponseError(msg) from exc
        except httpx.RequestError as exc:
            _logger.warning("FDC request failed: %s: %s", type(exc).__name__, exc)
            raise NetworkError(SERVICE_NAME, reason=type(exc).__name__) from exc

        if fdc_id is not None and response.status_code == _HTTP_NOT_FOUND:
            raise FoodNotFoundError(fdc_id=fdc_id)
        if not response.is_success:
            message = _error_message(response)
            _logger.warning(
                "FDC responded with status %s: %s", response.status_code, message
            )
            raise UpstreamError(response.status_code, message)

        try:
            payload = response.json()
        except ValueError as exc:
            msg = "Invalid response format from USDA API"
            raise MalformedResponseError(msg) from exc
        if not isinstance(payload, dict):
            msg = "Invalid response format from USDA API"
            raise MalformedResponseError(msg, details={"type": type(payload).__name__})
        return payload


def _error_message(response: httpx.Response) -> str:
    """Pull a readable message out of an FDC error response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            return error["message"]
        for key in ("message", "error"):
            if isinstance(body.get(key), str):
                return body[key]
    return response.reason_phrase or "Unknown error"
