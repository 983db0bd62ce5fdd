"""
Credential proofs answering an authentication challenge.

Two credential kinds exist: a client certificate (XAdES-signed request) and a
pre-issued KSeF token (RSA-OAEP encrypted ``token|timestampMs``). Both submit
their proof and return the interim token with the operation reference number.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import structlog

from ksef_client.api.endpoints.auth import submit_ksef_token, submit_xades_signature
from ksef_client.api.http_client import AsyncHttpClient
from ksef_client.config import KsefConfig
from ksef_client.crypto.rsa_oaep import wrap
from ksef_client.crypto.xades import build_auth_token_request, sign_enveloped
from ksef_client.exceptions import AuthenticationError
from ksef_client.models.auth import (
    AuthenticationInit,
    CertificateCredential,
    Challenge,
    KsefToken,
    Nip,
)
from ksef_client.models.crypto import KeyUsage
from ksef_client.services.public_keys import PublicKeyResolver

logger = structlog.get_logger(__name__)


def build_token_payload(token: str, timestamp_ms: int) -> bytes:
    """
    Build the plaintext encrypted for token authentication.

    The timestamp must be the challenge timestamp in milliseconds.
    """
    return f"{token}|{timestamp_ms}".encode()


@runtime_checkable
class CredentialProof(Protocol):
    """A credential able to answer an authentication challenge."""

    async def produce_proof(self, challenge: Challenge) -> AuthenticationInit:
        """
        Submit proof of possession for the challenge.

        Returns:
            Interim token and reference number of the operation.
        """
        ...


@dataclass(frozen=True, kw_only=True)
class CertificateProof:
    """Proof by XAdES signature with the caller's certificate."""

    http: AsyncHttpClient
    credential: CertificateCredential
    identifier: Nip
    verify_certificate_chain: bool | None = None

    async def produce_proof(self, challenge: Challenge) -> AuthenticationInit:
        document = build_auth_token_request(challenge.challenge, self.identifier.value)
        signed = sign_enveloped(document, self.credential)

        response = await submit_xades_signature(
            self.http,
            signed,
            verify_certificate_chain=self.verify_certificate_chain,
        )
        return AuthenticationInit.from_dict(response)


@dataclass(frozen=True, kw_only=True)
class TokenProof:
    """Proof by a KSeF token encrypted with the platform's token key."""

    http: AsyncHttpClient
    token: KsefToken
    identifier: Nip
    resolver: PublicKeyResolver

    async def produce_proof(self, challenge: Challenge) -> AuthenticationInit:
        entry = await self.resolver.resolve(KeyUsage.KSEF_TOKEN_ENCRYPTION)
        payload = build_token_payload(self.token.token, challenge.timestamp_ms)
        encrypted_token = wrap(entry.public_key(), payload)

        response = await submit_ksef_token(
            self.http,
            challenge=challenge.challenge,
            identifier=self.identifier.value,
            encrypted_token=encrypted_token,
        )
        return AuthenticationInit.from_dict(response)


def select_credential_proof(
    http: AsyncHttpClient,
    config: KsefConfig,
    *,
    resolver: PublicKeyResolver | None = None,
) -> CredentialProof:
    """
    Pick the credential proof for a configuration.

    A certificate takes precedence over a KSeF token when both are configured.

    Raises:
        AuthenticationError: If no credential or no identifier is configured.
    """
    if config.identifier is None:
        msg = "Identifier (NIP) required for authentication"
        raise AuthenticationError(msg)

    if config.certificate is not None:
        if config.ksef_token is not None:
            logger.debug("Both certificate and KSeF token configured, using certificate")
        return CertificateProof(
            http=http,
            credential=config.certificate,
            identifier=config.identifier,
            verify_certificate_chain=config.verify_certificate_chain,
        )

    if config.ksef_token is not None:
        return TokenProof(
            http=http,
            token=config.ksef_token,
            identifier=config.identifier,
            resolver=resolver or PublicKeyResolver(http),
        )

    msg = "No credential configured: provide a certificate or a KSeF token"
    raise AuthenticationError(msg)
