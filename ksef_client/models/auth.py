"""
Authentication-related domain models.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import StrEnum
from pathlib import Path
from typing import Any, Self

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes
from cryptography.hazmat.primitives.serialization import pkcs12

from ksef_client.exceptions import ValidationError

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_NIP_SEPARATORS = re.compile(r"[\s-]")
_EXCESS_FRACTION = re.compile(r"(\.\d{6})\d+")


def parse_instant(value: str | None) -> datetime | None:
    """
    Parse an ISO-8601 instant as returned by the KSeF API.

    The API emits up to seven fractional digits, which are truncated to
    microseconds. Naive values are assumed to be UTC.
    """
    if not value:
        return None
    normalized = _EXCESS_FRACTION.sub(r"\1", value)
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError as e:
        msg = f"Invalid timestamp: {value!r}"
        raise ValidationError(msg) from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class Mode(StrEnum):
    """KSeF environment; each maps to one fixed API base URL."""

    TEST = "test"
    DEMO = "demo"
    PRODUCTION = "production"

    @property
    def base_url(self) -> str:
        match self:
            case Mode.TEST:
                return "https://api-test.ksef.mf.gov.pl/api/v2"
            case Mode.DEMO:
                return "https://ksef-demo.mf.gov.pl/api/v2"
            case Mode.PRODUCTION:
                return "https://ksef.mf.gov.pl/api/v2"

    @classmethod
    def parse(cls, value: "Mode | str") -> "Mode":
        """
        Build a Mode from a Mode or a case-insensitive name.

        Raises:
            ValidationError: If the value is not a known mode.
        """
        if isinstance(value, Mode):
            return value
        if not isinstance(value, str):
            msg = "Mode must be a string"
            raise ValidationError(msg, value=value)
        try:
            return cls(value.strip().lower())
        except ValueError as e:
            valid = ", ".join(m.value for m in cls)
            msg = f"Invalid mode: {value}. Must be one of: {valid}"
            raise ValidationError(msg) from e


@dataclass(frozen=True)
class Nip:
    """
    Polish tax identification number used as the authentication context.

    Attributes:
        value: Ten digits, separators removed.
    """

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str):
            msg = "NIP must be a string"
            raise ValidationError(msg)
        normalized = _NIP_SEPARATORS.sub("", self.value)
        if len(normalized) != 10 or not normalized.isdigit():
            msg = "NIP must consist of exactly 10 digits"
            raise ValidationError(msg, value=self.value)
        object.__setattr__(self, "value", normalized)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class KsefToken:
    """Pre-issued KSeF API token used for token-based authentication."""

    token: str = field(repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.token, str) or not self.token.strip():
            msg = "KSeF token must be a non-empty string"
            raise ValidationError(msg)


@dataclass(frozen=True, kw_only=True)
class AccessToken:
    """
    Bearer token for API requests.

    Attributes:
        token: Opaque JWT string.
        expires_at: Expiry instant reported by the API, if any.
    """

    token: str = field(repr=False)
    expires_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Parse a ``{"token", "validUntil"}`` object."""
        return cls(token=data["token"], expires_at=parse_instant(data.get("validUntil")))

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or datetime.now(timezone.utc)) >= self.expires_at


@dataclass(frozen=True, kw_only=True)
class RefreshToken(AccessToken):
    """Token used to obtain a new access token."""


@dataclass(frozen=True, kw_only=True)
class Challenge:
    """
    Server-issued nonce anchoring one authentication attempt.

    Attributes:
        challenge: Challenge string to echo back.
        timestamp_ms: Challenge timestamp in milliseconds since the epoch.
    """

    challenge: str
    timestamp_ms: int

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        timestamp = data.get("timestampMs")
        if timestamp is None:
            timestamp = data.get("timestamp")
        if timestamp is None:
            msg = "Challenge response has no timestamp"
            raise ValidationError(msg)

        if isinstance(timestamp, str) and not timestamp.isdigit():
            instant = parse_instant(timestamp)
            timestamp_ms = (instant - _EPOCH) // timedelta(milliseconds=1)
        else:
            timestamp_ms = int(timestamp)

        return cls(challenge=data["challenge"], timestamp_ms=timestamp_ms)


@dataclass(frozen=True, kw_only=True)
class AuthenticationInit:
    """
    Result of a credential-proof submission.

    Attributes:
        authentication_token: Interim token used to poll and redeem.
        reference_number: Reference of the authentication operation.
    """

    authentication_token: AccessToken
    reference_number: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            authentication_token=AccessToken.from_dict(data["authenticationToken"]),
            reference_number=data["referenceNumber"],
        )


@dataclass(frozen=True, kw_only=True)
class AuthStatus:
    """Status of an authentication operation."""

    code: int
    description: str = ""
    details: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        status = data.get("status") or {}
        raw_code = status.get("code")
        try:
            code = int(raw_code or 0)
        except (TypeError, ValueError) as e:
            msg = "Invalid authentication status code"
            raise ValidationError(msg, code=raw_code) from e
        return cls(
            code=code,
            description=status.get("description") or "",
            details=tuple(status.get("details") or ()),
        )

    @property
    def is_success(self) -> bool:
        return self.code == 200

    @property
    def is_failure(self) -> bool:
        return self.code >= 400


@dataclass(frozen=True, kw_only=True)
class TokenPair:
    """Final access/refresh tokens issued by ``auth/token/redeem``."""

    access_token: AccessToken
    refresh_token: RefreshToken

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            access_token=AccessToken.from_dict(data["accessToken"]),
            refresh_token=RefreshToken.from_dict(data["refreshToken"]),
        )


@dataclass(frozen=True, kw_only=True)
class CertificateCredential:
    """
    Client certificate with its private key, used for XAdES authentication.

    Attributes:
        certificate: Signing certificate.
        private_key: Matching private key (RSA or EC).
        additional_certificates: Intermediate certificates from the bundle.
    """

    certificate: x509.Certificate
    private_key: PrivateKeyTypes = field(repr=False)
    additional_certificates: tuple[x509.Certificate, ...] = ()

    @classmethod
    def from_pkcs12(cls, source: Path | str | bytes, passphrase: str | bytes | None) -> Self:
        """
        Load a credential from a PKCS#12 (.p12/.pfx) bundle.

        Args:
            source: Path to the bundle, or its raw bytes.
            passphrase: Bundle passphrase.

        Raises:
            ValidationError: If the bundle cannot be read or lacks a key or certificate.
        """
        data = source if isinstance(source, bytes) else Path(source).read_bytes()
        password = passphrase.encode() if isinstance(passphrase, str) else passphrase
        try:
            key, certificate, additional = pkcs12.load_key_and_certificates(data, password)
        except ValueError as e:
            msg = "Cannot load PKCS#12 bundle"
            raise ValidationError(msg) from e
        if key is None or certificate is None:
            msg = "PKCS#12 bundle must contain a private key and a certificate"
            raise ValidationError(msg)
        return cls(
            certificate=certificate,
            private_key=key,
            additional_certificates=tuple(additional),
        )
