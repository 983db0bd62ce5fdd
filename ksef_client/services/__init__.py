"""
Business logic services for the KSeF client.
"""

from ksef_client.services.auth_service import AuthService
from ksef_client.services.credentials import (
    CertificateProof,
    CredentialProof,
    TokenProof,
    select_credential_proof,
)
from ksef_client.services.public_keys import PublicKeyResolver
from ksef_client.services.session_keys import SessionKeyEncryptor
from ksef_client.services.status_poller import AuthStatusPoller

__all__ = [
    "AuthService",
    "AuthStatusPoller",
    "CertificateProof",
    "CredentialProof",
    "PublicKeyResolver",
    "SessionKeyEncryptor",
    "TokenProof",
    "select_credential_proof",
]
