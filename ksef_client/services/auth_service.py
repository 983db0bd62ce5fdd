"""
Authentication service for the KSeF client.

Runs the challenge / proof / status / redeem workflow that turns a
certificate or KSeF token into an access and refresh token pair.
"""

import asyncio

import structlog

from ksef_client.api.endpoints.auth import redeem_tokens, request_challenge
from ksef_client.api.http_client import AsyncHttpClient
from ksef_client.config import KsefConfig
from ksef_client.exceptions import APIError, AuthenticationError
from ksef_client.models.auth import AuthenticationInit, Challenge, TokenPair
from ksef_client.services.credentials import CredentialProof, select_credential_proof
from ksef_client.services.public_keys import PublicKeyResolver
from ksef_client.services.status_poller import AuthStatusPoller

logger = structlog.get_logger(__name__)


class AuthService:
    """
    Handles KSeF authentication.

    The workflow is strictly sequential:
    challenge → proof → interim token installed → status polling → redeem →
    final tokens installed. Each installed token is a new configuration
    snapshot pushed to the HTTP client, so later requests carry it as bearer.

    Any failure aborts the whole workflow; the HTTP client's configuration is
    restored to what it was before the attempt and the error is re-raised.
    There is no resume: retry by calling ``authenticate`` again.

    Concurrency:
    - Concurrent authenticate() calls execute sequentially.
    """

    def __init__(
        self,
        http_client: AsyncHttpClient,
        *,
        resolver: PublicKeyResolver | None = None,
        poller: AuthStatusPoller | None = None,
    ) -> None:
        """
        Args:
            http_client: HTTP client for API requests.
            resolver: Public key resolver for token encryption.
            poller: Status poller; defaults to the config's poll policy.
        """
        self._http = http_client
        self._resolver = resolver or PublicKeyResolver(http_client)
        self._poller = poller
        self._lock = asyncio.Lock()

    async def authenticate(self, config: KsefConfig) -> KsefConfig:
        """
        Authenticate with KSeF.

        Args:
            config: Snapshot holding the identifier and one credential.

        Returns:
            New config holding the final access and refresh tokens.

        Raises:
            AuthenticationError: If a credential is missing or the platform rejects the attempt.
            AuthenticationTimeoutError: If verification stays pending past the polling budget.
            CertificateNotFoundError: If the token encryption certificate is not published.
            EncryptionError: If the token cannot be encrypted.
            SignatureError: If the XAdES request cannot be signed.
        """
        async with self._lock:
            previous = self._http.config
            proof = select_credential_proof(self._http, config, resolver=self._resolver)

            logger.info("Starting authentication", method=type(proof).__name__)

            try:
                challenge = await self._request_challenge()
                init = await self._submit_proof(proof, challenge)
                logger.info("Authentication proof accepted", reference_number=init.reference_number)

                config = config.with_access_token(init.authentication_token)
                await self._http.set_config(config)

                await self._poller_for(config).poll_until_done(init.reference_number)

                tokens = TokenPair.from_dict(await redeem_tokens(self._http))
                config = config.with_access_token(tokens.access_token).with_refresh_token(
                    tokens.refresh_token
                )
                await self._http.set_config(config)

            except Exception as e:
                logger.warning("Authentication failed", error_type=type(e).__name__)
                await self._http.set_config(previous)
                raise

            logger.info("Authentication successful")
            return config

    async def _request_challenge(self) -> Challenge:
        try:
            response = await request_challenge(self._http)
        except APIError as e:
            raise AuthenticationError(e.message, code=e.code, step="challenge") from e
        return Challenge.from_dict(response)

    @staticmethod
    async def _submit_proof(proof: CredentialProof, challenge: Challenge) -> AuthenticationInit:
        try:
            return await proof.produce_proof(challenge)
        except APIError as e:
            raise AuthenticationError(e.message, code=e.code, step="proof") from e

    def _poller_for(self, config: KsefConfig) -> AuthStatusPoller:
        if self._poller is not None:
            return self._poller
        return AuthStatusPoller(
            self._http,
            interval=config.auth_poll_interval,
            timeout=config.auth_poll_timeout,
        )
