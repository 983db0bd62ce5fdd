"""
KSeF Python Client.

An async client for the Polish National e-Invoicing System (KSeF) covering
authentication and document key wrapping.

Example:
    ```python
    from ksef_client import ClientBuilder, EncryptionKey

    client = ClientBuilder().mode("test").identifier("5260250274").ksef_token("...").build()

    async with client:
        # Authenticated on entry; tokens are in client.config
        encrypted = await client.encrypt_session_key(EncryptionKey.generate())
        body = {"encryption": encrypted.to_dict()}
    ```
"""

from ksef_client.builder import ClientBuilder
from ksef_client.client import KsefClient
from ksef_client.config import KsefConfig
from ksef_client.exceptions import (
    APIError,
    AuthenticationError,
    AuthenticationTimeoutError,
    CertificateNotFoundError,
    CryptoError,
    EncryptionError,
    KsefError,
    RateLimitError,
    ServerError,
    SignatureError,
    ValidationError,
)
from ksef_client.models.auth import (
    AccessToken,
    CertificateCredential,
    KsefToken,
    Mode,
    Nip,
    RefreshToken,
)
from ksef_client.models.crypto import EncryptedSessionKey, EncryptionKey, KeyUsage

__version__ = "0.1.0"

__all__ = [
    # Main client
    "KsefClient",
    "KsefConfig",
    "ClientBuilder",
    # Models
    "Mode",
    "Nip",
    "KsefToken",
    "AccessToken",
    "RefreshToken",
    "CertificateCredential",
    "EncryptionKey",
    "EncryptedSessionKey",
    "KeyUsage",
    # Exceptions
    "KsefError",
    "ValidationError",
    "AuthenticationError",
    "AuthenticationTimeoutError",
    "CryptoError",
    "CertificateNotFoundError",
    "EncryptionError",
    "SignatureError",
    "APIError",
    "RateLimitError",
    "ServerError",
]
