"""
RSA-OAEP key wrapping for KSeF.

The platform only accepts OAEP with SHA-256 as both the digest and the
MGF1 digest; PKCS#1 v1.5 or SHA-1 ciphertexts are rejected.
"""

import base64

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes

from ksef_client.exceptions import EncryptionError

_HASH_LENGTH = hashes.SHA256.digest_size


def _oaep_padding() -> padding.OAEP:
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=None,
    )


def oaep_capacity(public_key: rsa.RSAPublicKey) -> int:
    """Largest plaintext, in bytes, that OAEP-SHA256 can wrap under this key."""
    modulus_bytes = (public_key.key_size + 7) // 8
    return modulus_bytes - 2 * _HASH_LENGTH - 2


def wrap(public_key: PublicKeyTypes, plaintext: bytes) -> str:
    """
    Encrypt a payload with RSA-OAEP (SHA-256, MGF1-SHA256).

    Args:
        public_key: Platform RSA public key.
        plaintext: Bytes to wrap.

    Returns:
        Base64-encoded ciphertext without line breaks.

    Raises:
        EncryptionError: If the key is not RSA, the payload exceeds the OAEP
            capacity, or encryption fails.
    """
    if not isinstance(public_key, rsa.RSAPublicKey):
        msg = "RSA-OAEP wrapping requires an RSA public key"
        raise EncryptionError(msg, key_type=type(public_key).__name__)

    capacity = oaep_capacity(public_key)
    if len(plaintext) > capacity:
        msg = "Payload exceeds RSA-OAEP capacity"
        raise EncryptionError(msg, size=len(plaintext), capacity=capacity)

    try:
        ciphertext = public_key.encrypt(plaintext, _oaep_padding())
    except ValueError as e:
        msg = "RSA-OAEP encryption failed"
        raise EncryptionError(msg) from e

    return base64.b64encode(ciphertext).decode("ascii")
