"""
Async HTTP client for the KSeF API.

Provides a clean interface for making API requests with bearer token
injection from the active configuration snapshot and error mapping.
"""

import asyncio
from typing import Any

import httpx
import structlog

from ksef_client.config import KsefConfig
from ksef_client.exceptions import APIError, RateLimitError, ServerError

logger = structlog.get_logger(__name__)

SENSITIVE_KEYS = frozenset(
    {
        "token",
        "challenge",
        "encryptedToken",
        "encryptedSymmetricKey",
        "initializationVector",
        "certificate",
    }
)


def sanitize_for_log(data: dict[str, Any]) -> dict[str, Any]:
    """
    Remove sensitive fields from a dict before logging.

    Recursively sanitizes nested dictionaries and lists.

    Args:
        data: Dictionary that may contain sensitive values.

    Returns:
        Copy with sensitive values replaced by "***".
    """
    result = {}
    for key, value in data.items():
        if key in SENSITIVE_KEYS:
            result[key] = "***"
        elif isinstance(value, dict):
            result[key] = sanitize_for_log(value)
        elif isinstance(value, list):
            result[key] = [
                sanitize_for_log(item) if isinstance(item, dict) else item for item in value
            ]
        else:
            result[key] = value
    return result


def extract_error_description(data: Any) -> str | None:
    """
    Pull a human-readable description out of a KSeF error body.

    Handles the ``exception.exceptionDetailList`` envelope and
    problem-details bodies (``detail`` / ``title``).
    """
    if not isinstance(data, dict):
        return None

    exception = data.get("exception")
    if isinstance(exception, dict):
        descriptions = [
            str(item["exceptionDescription"])
            for item in exception.get("exceptionDetailList") or ()
            if isinstance(item, dict) and item.get("exceptionDescription")
        ]
        if descriptions:
            return "; ".join(descriptions)

    for key in ("detail", "title", "message"):
        if data.get(key):
            return str(data[key])
    return None


class AsyncHttpClient:
    """Async HTTP client for the KSeF API."""

    def __init__(
        self,
        config: KsefConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            config: Initial configuration snapshot.
            transport: Optional transport for testing (mock transport).
        """
        self._config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

        self._client_lock = asyncio.Lock()
        self._config_lock = asyncio.Lock()

    async def __aenter__(self) -> "AsyncHttpClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self._close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self._config.base_url,
                    timeout=self._config.timeout,
                    transport=self._transport,
                    headers={
                        "Accept": "application/json",
                        "User-Agent": self._config.user_agent,
                    },
                )
        return self._client

    async def _close(self) -> None:
        async with self._client_lock:
            if self._client is None:
                logger.debug("Client not open.")
                return
            await self._client.aclose()
            self._client = None

    @property
    def config(self) -> KsefConfig:
        """The active configuration snapshot."""
        return self._config

    async def set_config(self, config: KsefConfig) -> None:
        """
        Install a new configuration snapshot.

        The swap is a single reference assignment, so a concurrent request
        sees either the old or the new snapshot, never a mix.

        Args:
            config: Snapshot carrying the tokens to use from now on.
        """
        async with self._config_lock:
            self._config = config

    @property
    def is_authenticated(self) -> bool:
        """Check if an access token is installed."""
        return self._config.access_token is not None

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json: dict[str, Any] | None = None,
        content: bytes | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        authenticated: bool = True,
    ) -> dict[str, Any]:
        """
        Make an API request.

        Args:
            method: HTTP method (GET, POST, etc.).
            endpoint: API endpoint (e.g., "/auth/challenge").
            json: JSON body for POST/PUT requests.
            content: Raw body, used instead of ``json`` for XML payloads.
            params: Query parameters.
            headers: Extra request headers.
            authenticated: Whether to include the bearer token.

        Returns:
            Response JSON data (empty dict for an empty body).

        Raises:
            APIError: If the API returns an error status or invalid JSON.
            RateLimitError: On HTTP 429.
            ServerError: On HTTP 5xx.
            httpx.HTTPError: If the request fails due to network issues.
        """
        config = self._config  # Capture atomically for consistent reads
        request_headers = dict(headers or {})
        if authenticated and config.access_token is not None:
            request_headers["Authorization"] = f"Bearer {config.access_token.token}"

        if self._client is None:
            msg = "HTTP client not initialized. Use 'async with' first."
            raise RuntimeError(msg)

        logger.debug(
            "API request",
            method=method,
            endpoint=endpoint,
            body=sanitize_for_log(json) if json is not None else None,
        )
        response = await self._client.request(
            method=method,
            url=endpoint,
            json=json,
            content=content,
            params=params,
            headers=request_headers,
        )

        data = self._parse_body(response, endpoint)

        if response.is_error:
            self._raise_api_error(response, data, endpoint)

        logger.debug("API response", endpoint=endpoint, status=response.status_code)
        return data

    @staticmethod
    def _parse_body(response: httpx.Response, endpoint: str) -> dict[str, Any]:
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as e:
            if response.is_error:
                return {"detail": response.text}
            raise APIError(
                "Invalid JSON response from API",
                code=response.status_code,
                endpoint=endpoint,
            ) from e
        if isinstance(data, list):
            return {"items": data}
        return data

    @staticmethod
    def _raise_api_error(response: httpx.Response, data: dict[str, Any], endpoint: str) -> None:
        code = response.status_code
        error_msg = extract_error_description(data) or response.reason_phrase or "Unknown error"

        if code == httpx.codes.TOO_MANY_REQUESTS:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                error_msg,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
                endpoint=endpoint,
            )
        if code >= 500:
            raise ServerError(error_msg, code=code, endpoint=endpoint)

        raise APIError(error_msg, code=code, endpoint=endpoint)
