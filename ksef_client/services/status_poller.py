"""
Polling of an authentication operation until the platform decides.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Any

import structlog

from ksef_client.api.endpoints.auth import get_auth_status
from ksef_client.api.http_client import AsyncHttpClient
from ksef_client.exceptions import APIError, AuthenticationError, AuthenticationTimeoutError
from ksef_client.models.auth import AuthStatus

logger = structlog.get_logger(__name__)

DEFAULT_POLL_INTERVAL = 10.0
DEFAULT_POLL_TIMEOUT = 120.0


class PollState(StrEnum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def classify(status: AuthStatus) -> PollState:
    if status.is_success:
        return PollState.SUCCEEDED
    if status.is_failure:
        return PollState.FAILED
    return PollState.PENDING


class AuthStatusPoller:
    """
    Queries authentication status under a fixed-backoff, bounded-time policy.

    Only the pending state is retried. The wait before each retry is clipped
    to the remaining budget, and no query is made once the budget is spent.
    """

    def __init__(
        self,
        http_client: AsyncHttpClient,
        *,
        interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = DEFAULT_POLL_TIMEOUT,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            http_client: HTTP client carrying the interim token.
            interval: Delay between attempts in seconds.
            timeout: Total polling budget in seconds.
            sleep: Awaitable sleep, replaceable in tests.
            clock: Monotonic clock in seconds, replaceable in tests.
        """
        if interval <= 0 or timeout <= 0:
            msg = "interval and timeout must be positive"
            raise ValueError(msg)
        self._http = http_client
        self._interval = interval
        self._timeout = timeout
        self._sleep = sleep
        self._clock = clock

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def timeout(self) -> float:
        return self._timeout

    async def poll_until_done(self, reference_number: str) -> dict[str, Any]:
        """
        Poll until the operation succeeds, fails, or the budget runs out.

        Args:
            reference_number: Reference of the authentication operation.

        Returns:
            The status response that reported success.

        Raises:
            AuthenticationError: If the platform reports a failure status
                or rejects the status request.
            AuthenticationTimeoutError: If the budget is exhausted while pending.
        """
        started = self._clock()
        deadline = started + self._timeout
        attempt = 0

        while True:
            attempt += 1
            response = await self._query(reference_number)
            status = AuthStatus.from_dict(response)

            match classify(status):
                case PollState.SUCCEEDED:
                    logger.debug("Authentication status succeeded", attempt=attempt)
                    return response
                case PollState.FAILED:
                    description = status.description or "Authentication failed"
                    raise AuthenticationError(
                        description,
                        code=status.code,
                        reference_number=reference_number,
                    )

            remaining = deadline - self._clock()
            logger.debug(
                "Authentication pending",
                attempt=attempt,
                code=status.code,
                remaining=round(max(remaining, 0.0), 3),
            )
            if remaining > 0:
                await self._sleep(min(self._interval, remaining))

            if self._clock() >= deadline:
                msg = "Authentication status polling timed out"
                raise AuthenticationTimeoutError(
                    msg,
                    reference_number=reference_number,
                    elapsed=self._clock() - started,
                )

    async def _query(self, reference_number: str) -> dict[str, Any]:
        try:
            return await get_auth_status(self._http, reference_number)
        except APIError as e:
            raise AuthenticationError(
                e.message,
                code=e.code,
                reference_number=reference_number,
            ) from e
