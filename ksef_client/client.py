"""
KSeF client facade.

This is the main entry point for users of the library. It wires the HTTP
layer and the authentication services and keeps the active configuration.
"""

import asyncio
from typing import Self

import httpx
import structlog

from ksef_client.api.http_client import AsyncHttpClient
from ksef_client.config import KsefConfig
from ksef_client.exceptions import ValidationError
from ksef_client.models.crypto import EncryptedSessionKey, EncryptionKey
from ksef_client.services.auth_service import AuthService
from ksef_client.services.public_keys import PublicKeyResolver
from ksef_client.services.session_keys import SessionKeyEncryptor

logger = structlog.get_logger(__name__)


class KsefClient:
    """
    Async client for KSeF.

    Entering the context authenticates automatically when the configuration
    holds a credential and an identifier but no access token yet.

    Example:
        ```python
        config = KsefConfig(mode="test", identifier=Nip("5260250274"), ksef_token=KsefToken("..."))

        async with KsefClient(config) as client:
            print(client.config.access_token.expires_at)
            encrypted = await client.encrypt_session_key(EncryptionKey.generate())
        ```

    Args:
        config: Client configuration. Uses defaults if not provided.
        transport: Optional httpx transport for testing (mock transport).
    """

    def __init__(
        self,
        config: KsefConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or KsefConfig()
        self._transport = transport

        self._http: AsyncHttpClient | None = None
        self._resolver: PublicKeyResolver | None = None
        self._auth_service: AuthService | None = None
        self._session_keys: SessionKeyEncryptor | None = None

        self._initialized = False
        self._init_lock = asyncio.Lock()

    async def __aenter__(self) -> Self:
        """Enter async context, authenticating if the configuration calls for it."""
        await self._ensure_initialized()
        if self._config.requires_authentication:
            try:
                await self.authenticate()
            except Exception:
                await self.close()
                raise
        return self

    async def __aexit__(
        self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object
    ) -> None:
        """Exit async context."""
        await self.close()

    async def _ensure_initialized(self) -> None:
        async with self._init_lock:
            if self._initialized:
                return

            self._http = AsyncHttpClient(self._config, transport=self._transport)
            await self._http.__aenter__()

            self._resolver = PublicKeyResolver(self._http)
            self._auth_service = AuthService(self._http, resolver=self._resolver)
            self._session_keys = SessionKeyEncryptor(self._resolver)

            self._initialized = True
            logger.debug("Client initialized", mode=str(self._config.mode))

    async def close(self) -> None:
        """Close the client and release resources."""
        async with self._init_lock:
            if self._http:
                await self._http.__aexit__(None, None, None)
                self._http = None

            self._resolver = None
            self._auth_service = None
            self._session_keys = None
            self._initialized = False
            logger.debug("Client closed")

    @property
    def config(self) -> KsefConfig:
        """Current configuration, including installed tokens."""
        return self._config

    @property
    def is_authenticated(self) -> bool:
        return self._config.access_token is not None

    async def authenticate(self) -> KsefConfig:
        """
        Run the authentication workflow with the configured credential.

        Returns:
            Configuration holding the final access and refresh tokens.

        Raises:
            AuthenticationError: If authentication fails.
            AuthenticationTimeoutError: If verification does not complete in time.
        """
        await self._ensure_initialized()
        if self._auth_service is None:
            raise RuntimeError("Client not initialized")
        self._config = await self._auth_service.authenticate(self._config)
        return self._config

    async def encrypt_session_key(
        self, encryption_key: EncryptionKey | None = None
    ) -> EncryptedSessionKey:
        """
        Wrap a document encryption key for the platform.

        Args:
            encryption_key: Key to wrap; defaults to the configured key.

        Raises:
            ValidationError: If no key is given or configured.
            CertificateNotFoundError: If the platform publishes no SymmetricKeyEncryption certificate.
        """
        encryption_key = encryption_key or self._config.encryption_key
        if encryption_key is None:
            msg = "No encryption key given or configured"
            raise ValidationError(msg)

        await self._ensure_initialized()
        if self._session_keys is None:
            raise RuntimeError("Client not initialized")
        return await self._session_keys.wrap_session_key(encryption_key)
