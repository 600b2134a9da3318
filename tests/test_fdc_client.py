"""Tests for the FDC HTTP client."""

import asyncio

import httpx
import pytest

from food_api.adapters.fdc_client import (
    HttpxFdcClient,
    clamp_page_number,
    clamp_page_size,
)
from food_api.domain.errors import (
    ErrorCode,
    FoodNotFoundError,
    MalformedResponseError,
    NetworkError,
    UpstreamError,
    ValidationError,
)


def _client(handler) -> HttpxFdcClient:  # type: ignore[no-untyped-def]
    transport = httpx.MockTransport(handler)
    return HttpxFdcClient(
        api_key="key",
        base_url="https://api.test/fdc/v1",
        http_client=httpx.AsyncClient(transport=transport),
    )


def test_search_sends_clamped_query_params() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"foods": [], "totalHits": 0})

    client = _client(handler)

    payload = asyncio.run(client.search_foods("  apple ", page_size=500, page_number=0))

    assert payload == {"foods": [], "totalHits": 0}
    params = seen[0].url.params
    assert seen[0].url.path == "/fdc/v1/foods/search"
    assert params["query"] == "apple"
    assert params["pageSize"] == "200"
    assert params["pageNumber"] == "1"
    assert params["api_key"] == "key"
    assert params["sortBy"] == "dataType.keyword"


def test_get_food_hits_detail_endpoint() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/fdc/v1/food/171688"
        return httpx.Response(200, json={"fdcId": 171688, "foodNutrients": []})

    food = asyncio.run(_client(handler).get_food(171688))

    assert food["fdcId"] == 171688


def test_clamping_helpers() -> None:
    assert clamp_page_size(0) == 1
    assert clamp_page_size(50) == 50
    assert clamp_page_size(201) == 200
    assert clamp_page_number(-3) == 1
    assert clamp_page_number(7) == 7


def test_empty_query_rejected_without_network_call() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(ValidationError):
        asyncio.run(_client(handler).search_foods("   "))


def test_detail_404_maps_to_not_found() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "missing"})

    with pytest.raises(FoodNotFoundError) as exc_info:
        asyncio.run(_client(handler).get_food(42))

    assert exc_info.value.fdc_id == 42
    assert exc_info.value.status_code == 404


@pytest.mark.parametrize(
    ("upstream_status", "code", "status_code"),
    [
        (400, ErrorCode.VALIDATION_ERROR, 400),
        (401, ErrorCode.API_KEY_INVALID, 401),
        (403, ErrorCode.FORBIDDEN, 403),
        (429, ErrorCode.RATE_LIMIT_EXCEEDED, 429),
        (500, ErrorCode.USDA_API_UNAVAILABLE, 503),
        (503, ErrorCode.USDA_API_UNAVAILABLE, 503),
        (418, ErrorCode.USDA_API_ERROR, 502),
    ],
)
def test_upstream_status_is_remapped(
    upstream_status: int, code: ErrorCode, status_code: int
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            upstream_status, json={"error": {"message": "upstream says no"}}
        )

    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(_client(handler).search_foods("apple"))

    error = exc_info.value
    assert error.upstream_status == upstream_status
    assert error.code == code
    assert error.status_code == status_code
    assert error.message == "upstream says no"
    assert error.details == {"usdaStatusCode": upstream_status}


def test_error_message_falls_back_to_reason_phrase() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>bad gateway</html>")

    with pytest.raises(UpstreamError) as exc_info:
        asyncio.run(_client(handler).search_foods("apple"))

    assert exc_info.value.message == "Bad Gateway"


def test_timeout_maps_to_network_error() -> None:
    calls: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(NetworkError) as exc_info:
        asyncio.run(_client(handler).search_foods("apple"))

    assert exc_info.value.code == ErrorCode.NETWORK_ERROR
    assert len(calls) == 1


def test_connection_error_maps_to_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NetworkError):
        asyncio.run(_client(handler).get_food(1))


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="not json"),
        httpx.Response(200, json=["a", "list"]),
    ],
)
def test_unparseable_payload_is_malformed(response: httpx.Response) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return response

    with pytest.raises(MalformedResponseError):
        asyncio.run(_client(handler).search_foods("apple"))


def test_create_builds_pooled_client() -> None:
    client = HttpxFdcClient.create(
        api_key="key", base_url="https://api.test/fdc/v1/", timeout_seconds=3
    )

    assert client.base_url == "https://api.test/fdc/v1"
    assert client.timeout_seconds == 3
    assert client.http_client.headers["User-Agent"] == "FoodAPI/1.0.0"
    asyncio.run(client.close())


def test_undecodable_body_is_malformed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, headers={"Content-Encoding": "gzip"}, content=b"not gzip"
        )

    with pytest.raises(MalformedResponseError):
        asyncio.run(_client(handler).get_food(1))


def test_redirect_loop_maps_to_network_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(302, headers={"Location": str(request.url)})

    client = HttpxFdcClient(
        api_key="key",
        base_url="https://api.test/fdc/v1",
        http_client=httpx.AsyncClient(
            transport=httpx.MockTransport(handler),
            follow_redirects=True,
            max_redirects=3,
        ),
    )

    with pytest.raises(NetworkError) as exc_info:
        asyncio.run(client.get_food(1))

    assert exc_info.value.details == {
        "service": "USDA API",
        "reason": "TooManyRedirects",
    }
