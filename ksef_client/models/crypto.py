"""
Cryptography-related domain models.
"""

import base64
import binascii
import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any, Self

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes

from ksef_client.exceptions import EncryptionError, ValidationError
from ksef_client.models.auth import parse_instant

SYMMETRIC_KEY_SIZE = 32
IV_SIZE = 16


class KeyUsage(StrEnum):
    """Usage tags of the platform's published certificates."""

    KSEF_TOKEN_ENCRYPTION = "KsefTokenEncryption"
    SYMMETRIC_KEY_ENCRYPTION = "SymmetricKeyEncryption"


@dataclass(frozen=True, kw_only=True)
class PublicKeyEntry:
    """
    One entry of the published public key certificate list.

    Attributes:
        usage: Usage tags this certificate is authorized for.
        certificate: Base64-encoded DER certificate.
        valid_from: Start of validity, if reported.
        valid_to: End of validity, if reported.
    """

    usage: frozenset[str]
    certificate: str = field(repr=False)
    valid_from: datetime | None = None
    valid_to: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Parse an API entry; ``usage`` may be a single tag or a list of tags."""
        usage = data.get("usage") or ()
        if isinstance(usage, str):
            usage = (usage,)
        return cls(
            usage=frozenset(usage),
            certificate=data["certificate"],
            valid_from=parse_instant(data.get("validFrom")),
            valid_to=parse_instant(data.get("validTo")),
        )

    def has_usage(self, usage: str) -> bool:
        return usage in self.usage

    def load_certificate(self) -> x509.Certificate:
        """
        Decode the DER certificate.

        Raises:
            EncryptionError: If the certificate cannot be decoded.
        """
        try:
            der = base64.b64decode(self.certificate, validate=True)
            return x509.load_der_x509_certificate(der)
        except (binascii.Error, ValueError) as e:
            msg = "Invalid public key certificate"
            raise EncryptionError(msg, usage=sorted(self.usage)) from e

    def public_key(self) -> PublicKeyTypes:
        return self.load_certificate().public_key()


@dataclass(frozen=True, kw_only=True)
class EncryptionKey:
    """
    Symmetric key material for document encryption.

    Attributes:
        key: 32-byte AES-256 key.
        iv: 16-byte initialization vector.
    """

    key: bytes = field(repr=False)
    iv: bytes = field(repr=False)

    def __post_init__(self) -> None:
        if len(self.key) != SYMMETRIC_KEY_SIZE:
            msg = f"Encryption key must be {SYMMETRIC_KEY_SIZE} bytes, got {len(self.key)}"
            raise ValidationError(msg)
        if len(self.iv) != IV_SIZE:
            msg = f"Initialization vector must be {IV_SIZE} bytes, got {len(self.iv)}"
            raise ValidationError(msg)

    @classmethod
    def generate(cls) -> Self:
        """Create a fresh random key and IV."""
        return cls(key=os.urandom(SYMMETRIC_KEY_SIZE), iv=os.urandom(IV_SIZE))


@dataclass(frozen=True, kw_only=True)
class EncryptedSessionKey:
    """
    Symmetric key wrapped for the platform, as sent when opening a session.

    Attributes:
        encrypted_symmetric_key: Base64 RSA-OAEP ciphertext of the key.
        initialization_vector: Base64 IV, in clear.
    """

    encrypted_symmetric_key: str
    initialization_vector: str

    def to_dict(self) -> dict[str, str]:
        return {
            "encryptedSymmetricKey": self.encrypted_symmetric_key,
            "initializationVector": self.initialization_vector,
        }
