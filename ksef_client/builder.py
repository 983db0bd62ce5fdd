"""
Fluent construction of a KsefClient.
"""

from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Self

import httpx

from ksef_client.client import KsefClient
from ksef_client.config import KsefConfig
from ksef_client.models.auth import (
    AccessToken,
    CertificateCredential,
    KsefToken,
    Mode,
    Nip,
    RefreshToken,
)
from ksef_client.models.crypto import EncryptionKey


class ClientBuilder:
    """
    Fluent builder over an immutable KsefConfig.

    Each setter replaces the builder's snapshot with a new one.

    Example:
        ```python
        client = (
            ClientBuilder()
            .mode("test")
            .identifier("5260250274")
            .ksef_token("...")
            .build()
        )
        async with client:
            ...
        ```
    """

    def __init__(self, config: KsefConfig | None = None) -> None:
        self._config = config or KsefConfig()

    @property
    def config(self) -> KsefConfig:
        return self._config

    def mode(self, value: Mode | str) -> Self:
        self._config = self._config.with_mode(value)
        return self

    def api_url(self, url: str) -> Self:
        self._config = self._config.with_api_url(url)
        return self

    def identifier(self, value: Nip | str) -> Self:
        self._config = self._config.with_identifier(value)
        return self

    def access_token(self, token: str, *, expires_at: datetime | None = None) -> Self:
        self._config = self._config.with_access_token(
            AccessToken(token=token, expires_at=expires_at)
        )
        return self

    def refresh_token(self, token: str, *, expires_at: datetime | None = None) -> Self:
        self._config = self._config.with_refresh_token(
            RefreshToken(token=token, expires_at=expires_at)
        )
        return self

    def ksef_token(self, token: str) -> Self:
        self._config = self._config.with_ksef_token(KsefToken(token))
        return self

    def certificate(self, credential: CertificateCredential) -> Self:
        self._config = self._config.with_certificate(credential)
        return self

    def certificate_path(self, path: Path | str, passphrase: str | None) -> Self:
        return self.certificate(CertificateCredential.from_pkcs12(path, passphrase))

    def verify_certificate_chain(self, verify: bool = True) -> Self:
        self._config = self._config.with_verify_certificate_chain(verify)
        return self

    def encryption_key(self, key: bytes, iv: bytes) -> Self:
        self._config = self._config.with_encryption_key(EncryptionKey(key=key, iv=iv))
        return self

    def random_encryption_key(self) -> Self:
        self._config = self._config.with_encryption_key(EncryptionKey.generate())
        return self

    def poll_policy(self, *, interval: float, timeout: float) -> Self:
        self._config = replace(
            self._config, auth_poll_interval=interval, auth_poll_timeout=timeout
        )
        return self

    def build(self, *, transport: httpx.AsyncBaseTransport | None = None) -> KsefClient:
        """Create the client; authentication runs when its context is entered."""
        return KsefClient(self._config, transport=transport)
