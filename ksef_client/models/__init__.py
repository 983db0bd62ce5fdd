"""
Domain models for the KSeF client.

These are immutable (frozen) dataclasses representing the core domain concepts.
"""

from ksef_client.models.auth import (
    AccessToken,
    AuthenticationInit,
    AuthStatus,
    CertificateCredential,
    Challenge,
    KsefToken,
    Mode,
    Nip,
    RefreshToken,
    TokenPair,
)
from ksef_client.models.crypto import (
    EncryptedSessionKey,
    EncryptionKey,
    KeyUsage,
    PublicKeyEntry,
)

__all__ = [
    # Auth
    "Mode",
    "Nip",
    "KsefToken",
    "AccessToken",
    "RefreshToken",
    "Challenge",
    "AuthenticationInit",
    "AuthStatus",
    "TokenPair",
    "CertificateCredential",
    # Crypto
    "KeyUsage",
    "PublicKeyEntry",
    "EncryptionKey",
    "EncryptedSessionKey",
]
