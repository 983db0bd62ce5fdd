"""
KSeF client exception hierarchy.

All exceptions inherit from KsefError for easy catching.
"""

from typing import Any


class KsefError(Exception):
    """Base exception for all ksef_client errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class ValidationError(KsefError, ValueError):
    """Malformed input to a value object or configuration."""


class AuthenticationError(KsefError):
    """Authentication failed or was rejected by the platform."""


class AuthenticationTimeoutError(KsefError, TimeoutError):
    """Authentication status stayed pending for the whole polling budget."""

    def __init__(self, message: str, *, reference_number: str, elapsed: float) -> None:
        super().__init__(message, reference_number=reference_number, elapsed=round(elapsed, 3))
        self.reference_number = reference_number
        self.elapsed = elapsed


class CryptoError(KsefError):
    """Cryptographic operation failed."""


class CertificateNotFoundError(CryptoError):
    """No published certificate carries the required usage tag."""

    def __init__(self, message: str, *, usage: str) -> None:
        super().__init__(message, usage=usage)
        self.usage = usage


class EncryptionError(CryptoError):
    """RSA-OAEP wrapping failed (payload too large, unsupported key, bad certificate)."""


class SignatureError(CryptoError):
    """XAdES signing of the authentication request failed."""


class APIError(KsefError):
    """API request failed."""

    def __init__(self, message: str, *, code: int, endpoint: str | None = None) -> None:
        super().__init__(message, code=code, endpoint=endpoint)
        self.code = code
        self.endpoint = endpoint


class RateLimitError(APIError):
    """Rate limited by API."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        *,
        retry_after: int | None = None,
        endpoint: str | None = None,
    ) -> None:
        super().__init__(message, code=429, endpoint=endpoint)
        self.retry_after = retry_after


class ServerError(APIError):
    """Server-side error (5xx)."""

    def __init__(self, message: str, *, code: int = 500, endpoint: str | None = None) -> None:
        super().__init__(message, code=code, endpoint=endpoint)
