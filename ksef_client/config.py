"""
KSeF client configuration.

The configuration is an immutable snapshot: every ``with_*`` method returns a
new instance, so a holder swaps whole snapshots instead of mutating fields.
"""

from dataclasses import dataclass, field, replace
from typing import Self

from ksef_client.exceptions import ValidationError
from ksef_client.models.auth import (
    AccessToken,
    CertificateCredential,
    KsefToken,
    Mode,
    Nip,
    RefreshToken,
)
from ksef_client.models.crypto import EncryptionKey


@dataclass(frozen=True, kw_only=True)
class KsefConfig:
    """
    Attributes:
        mode: Target environment; selects the base URL.
        api_url: Explicit base URL overriding the mode's URL.
        identifier: Tax identifier (NIP) used as authentication context.
        access_token: Currently installed bearer token.
        refresh_token: Refresh token from the last redemption.
        ksef_token: Pre-issued KSeF token for token-based authentication.
        certificate: Client certificate for XAdES authentication.
        verify_certificate_chain: Ask the platform to verify the certificate chain
            during XAdES authentication (test environment only); None leaves it unset.
        encryption_key: Symmetric key for document encryption.
        timeout: Request timeout in seconds.
        user_agent: User-Agent header value.
        auth_poll_interval: Delay between authentication status checks in seconds.
        auth_poll_timeout: Total time budget for authentication status polling in seconds.
    """

    mode: Mode = Mode.TEST
    api_url: str | None = None
    identifier: Nip | None = None
    access_token: AccessToken | None = None
    refresh_token: RefreshToken | None = None
    ksef_token: KsefToken | None = None
    certificate: CertificateCredential | None = field(default=None, repr=False)
    verify_certificate_chain: bool | None = None
    encryption_key: EncryptionKey | None = field(default=None, repr=False)
    timeout: float = 30.0
    user_agent: str = "ksef-client-python/0.1"
    auth_poll_interval: float = 10.0
    auth_poll_timeout: float = 120.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", Mode.parse(self.mode))
        if self.timeout <= 0:
            msg = "timeout must be positive"
            raise ValidationError(msg)
        if self.auth_poll_interval <= 0:
            msg = "auth_poll_interval must be positive"
            raise ValidationError(msg)
        if self.auth_poll_timeout <= 0:
            msg = "auth_poll_timeout must be positive"
            raise ValidationError(msg)

    @property
    def base_url(self) -> str:
        return self.api_url or self.mode.base_url

    @property
    def requires_authentication(self) -> bool:
        """True when no access token is installed but a credential and identifier are."""
        has_credential = self.certificate is not None or self.ksef_token is not None
        return self.access_token is None and has_credential and self.identifier is not None

    def with_mode(self, mode: Mode | str) -> Self:
        return replace(self, mode=Mode.parse(mode))

    def with_api_url(self, api_url: str | None) -> Self:
        return replace(self, api_url=api_url)

    def with_identifier(self, identifier: Nip | str) -> Self:
        if isinstance(identifier, str):
            identifier = Nip(identifier)
        return replace(self, identifier=identifier)

    def with_access_token(self, access_token: AccessToken | None) -> Self:
        return replace(self, access_token=access_token)

    def with_refresh_token(self, refresh_token: RefreshToken | None) -> Self:
        return replace(self, refresh_token=refresh_token)

    def with_ksef_token(self, ksef_token: KsefToken | str | None) -> Self:
        if isinstance(ksef_token, str):
            ksef_token = KsefToken(ksef_token)
        return replace(self, ksef_token=ksef_token)

    def with_certificate(self, certificate: CertificateCredential | None) -> Self:
        return replace(self, certificate=certificate)

    def with_verify_certificate_chain(self, verify: bool | None) -> Self:
        return replace(self, verify_certificate_chain=verify)

    def with_encryption_key(self, encryption_key: EncryptionKey | None) -> Self:
        return replace(self, encryption_key=encryption_key)
