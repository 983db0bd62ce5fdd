"""
Cryptographic operations for the KSeF client.

This module provides:
- RSA-OAEP (SHA-256) wrapping of tokens and symmetric keys
- XAdES-BES enveloped signing of authentication requests
"""

from ksef_client.crypto.rsa_oaep import oaep_capacity, wrap
from ksef_client.crypto.xades import build_auth_token_request, sign_enveloped

__all__ = [
    "oaep_capacity",
    "wrap",
    "build_auth_token_request",
    "sign_enveloped",
]
