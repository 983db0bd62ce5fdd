"""
Wrapping of the document encryption key for an interactive session.
"""

import base64

import structlog

from ksef_client.crypto.rsa_oaep import wrap
from ksef_client.models.crypto import EncryptedSessionKey, EncryptionKey, KeyUsage
from ksef_client.services.public_keys import PublicKeyResolver

logger = structlog.get_logger(__name__)


class SessionKeyEncryptor:
    """
    Wraps a caller-supplied symmetric key under the platform's
    ``SymmetricKeyEncryption`` certificate.

    Only the 32-byte key is encrypted; the IV travels base64-encoded in clear.
    """

    def __init__(self, resolver: PublicKeyResolver) -> None:
        self._resolver = resolver

    async def wrap_session_key(self, encryption_key: EncryptionKey) -> EncryptedSessionKey:
        """
        Args:
            encryption_key: Key and IV chosen by the caller.

        Returns:
            Wrapped key and clear IV, both base64.

        Raises:
            CertificateNotFoundError: If no SymmetricKeyEncryption certificate is published.
            EncryptionError: If wrapping fails.
        """
        entry = await self._resolver.resolve(KeyUsage.SYMMETRIC_KEY_ENCRYPTION)
        encrypted_key = wrap(entry.public_key(), encryption_key.key)

        logger.debug("Session key wrapped")
        return EncryptedSessionKey(
            encrypted_symmetric_key=encrypted_key,
            initialization_vector=base64.b64encode(encryption_key.iv).decode("ascii"),
        )
