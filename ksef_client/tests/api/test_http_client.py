"""Tests for AsyncHttpClient."""

import json

import httpx
import pytest

from ksef_client.api.http_client import (
    AsyncHttpClient,
    extract_error_description,
    sanitize_for_log,
)
from ksef_client.config import KsefConfig
from ksef_client.exceptions import APIError, RateLimitError, ServerError
from ksef_client.models.auth import AccessToken
from ksef_client.tests.utils.mock_transport import MockTransport


@pytest.fixture
def config() -> KsefConfig:
    return KsefConfig()


@pytest.fixture
def mock_transport() -> MockTransport:
    return MockTransport()


# Configuration snapshot tests


def test_is_authenticated_returns_false_initially(config: KsefConfig) -> None:
    client = AsyncHttpClient(config)
    assert client.is_authenticated is False


@pytest.mark.asyncio
async def test_set_config_swaps_snapshot(config: KsefConfig) -> None:
    client = AsyncHttpClient(config)
    updated = config.with_access_token(AccessToken(token="A"))

    await client.set_config(updated)

    assert client.config is updated
    assert client.is_authenticated is True


# Request headers tests


@pytest.mark.asyncio
async def test_request_includes_bearer_token_when_authenticated(
    config: KsefConfig,
    mock_transport: MockTransport,
) -> None:
    mock_transport.add_response("GET", "/test", json_data={})

    async with AsyncHttpClient(config, transport=mock_transport) as client:
        await client.set_config(config.with_access_token(AccessToken(token="test-token")))
        await client.request("GET", "/test")

    assert mock_transport.requests[0].headers.get("authorization") == "Bearer test-token"


@pytest.mark.asyncio
async def test_request_excludes_bearer_token_when_not_authenticated(
    config: KsefConfig,
    mock_transport: MockTransport,
) -> None:
    mock_transport.add_response("GET", "/test", json_data={})

    async with AsyncHttpClient(
        config.with_access_token(AccessToken(token="test-token")), transport=mock_transport
    ) as client:
        await client.request("GET", "/test", authenticated=False)

    assert "authorization" not in mock_transport.requests[0].headers


@pytest.mark.asyncio
async def test_request_uses_mode_base_url(
    config: KsefConfig,
    mock_transport: MockTransport,
) -> None:
    mock_transport.add_response("POST", "/auth/challenge", json_data={})

    async with AsyncHttpClient(config, transport=mock_transport) as client:
        await client.request("POST", "/auth/challenge", authenticated=False)

    request = mock_transport.requests[0]
    assert str(request.url) == "https://api-test.ksef.mf.gov.pl/api/v2/auth/challenge"
    assert request.headers.get("accept") == "application/json"
    assert "user-agent" in request.headers


# Request/response handling tests


@pytest.mark.asyncio
async def test_request_returns_json_data(
    config: KsefConfig,
    mock_transport: MockTransport,
) -> None:
    mock_transport.add_response("GET", "/test", json_data={"data": "test"})

    async with AsyncHttpClient(config, transport=mock_transport) as client:
        result = await client.request("GET", "/test", authenticated=False)

    assert result == {"data": "test"}


@pytest.mark.asyncio
async def test_request_wraps_json_list(
    config: KsefConfig,
    mock_transport: MockTransport,
) -> None:
    mock_transport.add_response("GET", "/test", json_data=[{"a": 1}])

    async with AsyncHttpClient(config, transport=mock_transport) as client:
        result = await client.request("GET", "/test", authenticated=False)

    assert result == {"items": [{"a": 1}]}


@pytest.mark.asyncio
async def test_request_returns_empty_dict_for_empty_body(
    config: KsefConfig,
    mock_transport: MockTransport,
) -> None:
    mock_transport.add_response("POST", "/test", status_code=httpx.codes.NO_CONTENT)

    async with AsyncHttpClient(config, transport=mock_transport) as client:
        result = await client.request("POST", "/test")

    assert result == {}


@pytest.mark.asyncio
async def test_request_sends_json_body(
    config: KsefConfig,
    mock_transport: MockTransport,
) -> None:
    mock_transport.add_response("POST", "/test", json_data={})

    async with AsyncHttpClient(config, transport=mock_transport) as client:
        await client.request("POST", "/test", json={"key": "value"})

    assert json.loads(mock_transport.requests[0].content) == {"key": "value"}


@pytest.mark.asyncio
async def test_request_sends_raw_content_with_headers(
    config: KsefConfig,
    mock_transport: MockTransport,
) -> None:
    mock_transport.add_response("POST", "/xml", json_data={})

    async with AsyncHttpClient(config, transport=mock_transport) as client:
        await client.request(
            "POST", "/xml", content=b"<a/>", headers={"Content-Type": "application/xml"}
        )

    request = mock_transport.requests[0]
    assert request.content == b"<a/>"
    assert request.headers.get("content-type") == "application/xml"


@pytest.mark.asyncio
async def test_request_raises_on_invalid_json(
    config: KsefConfig,
    mock_transport: MockTransport,
) -> None:
    mock_transport.add_response("GET", "/test", content=b"not json")

    async with AsyncHttpClient(config, transport=mock_transport) as client:
        with pytest.raises(APIError, match="Invalid JSON"):
            await client.request("GET", "/test")


@pytest.mark.asyncio
async def test_request_raises_api_error_with_exception_description(
    config: KsefConfig,
    mock_transport: MockTransport,
) -> None:
    mock_transport.add_response(
        "POST",
        "/auth/ksef-token",
        status_code=httpx.codes.BAD_REQUEST,
        json_data={
            "exception": {
                "exceptionDetailList": [
                    {"exceptionCode": 21115, "exceptionDescription": "Nieprawidłowy token."}
                ]
            }
        },
    )

    async with AsyncHttpClient(config, transport=mock_transport) as client:
        with pytest.raises(APIError) as exc_info:
            await client.request("POST", "/auth/ksef-token")

    assert exc_info.value.code == 400
    assert exc_info.value.message == "Nieprawidłowy token."
    assert exc_info.value.endpoint == "/auth/ksef-token"


@pytest.mark.asyncio
async def test_request_raises_rate_limit_error(
    config: KsefConfig,
    mock_transport: MockTransport,
) -> None:
    mock_transport.add_response(
        "GET",
        "/test",
        status_code=httpx.codes.TOO_MANY_REQUESTS,
        json_data={"title": "Too Many Requests"},
        headers={"Retry-After": "30"},
    )

    async with AsyncHttpClient(config, transport=mock_transport) as client:
        with pytest.raises(RateLimitError) as exc_info:
            await client.request("GET", "/test")

    assert exc_info.value.retry_after == 30


@pytest.mark.asyncio
async def test_request_raises_server_error_for_non_json_body(
    config: KsefConfig,
    mock_transport: MockTransport,
) -> None:
    mock_transport.add_response(
        "GET", "/test", status_code=httpx.codes.BAD_GATEWAY, content=b"<html>Bad gateway</html>"
    )

    async with AsyncHttpClient(config, transport=mock_transport) as client:
        with pytest.raises(ServerError) as exc_info:
            await client.request("GET", "/test")

    assert exc_info.value.code == 502
    assert "Bad gateway" in exc_info.value.message


@pytest.mark.asyncio
async def test_request_without_context_raises_runtime_error(config: KsefConfig) -> None:
    client = AsyncHttpClient(config)

    with pytest.raises(RuntimeError, match="not initialized"):
        await client.request("GET", "/test")


# Helpers


def test_sanitize_for_log_masks_nested_secrets() -> None:
    data = {
        "challenge": "c1",
        "contextIdentifier": {"type": "Nip", "value": "5260250274"},
        "accessToken": {"token": "A", "validUntil": "later"},
        "items": [{"token": "B"}, "plain"],
    }

    assert sanitize_for_log(data) == {
        "challenge": "***",
        "contextIdentifier": {"type": "Nip", "value": "5260250274"},
        "accessToken": {"token": "***", "validUntil": "later"},
        "items": [{"token": "***"}, "plain"],
    }


def test_extract_error_description_joins_details() -> None:
    data = {
        "exception": {
            "exceptionDetailList": [
                {"exceptionDescription": "first"},
                {"exceptionDescription": "second"},
            ]
        }
    }

    assert extract_error_description(data) == "first; second"


def test_extract_error_description_problem_details() -> None:
    assert extract_error_description({"title": "Unauthorized"}) == "Unauthorized"
    assert extract_error_description({"detail": "Expired", "title": "x"}) == "Expired"
    assert extract_error_description({}) is None
