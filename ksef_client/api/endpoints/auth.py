"""Authentication-related API endpoints."""

from typing import Any

from ksef_client.api.http_client import AsyncHttpClient


async def request_challenge(http: AsyncHttpClient) -> dict[str, Any]:
    """
    Request a fresh authentication challenge.

    Args:
        http: Configured async HTTP client.

    Returns:
        Response with challenge, timestamp and timestampMs.
    """
    return await http.request("POST", "/auth/challenge", authenticated=False)


async def submit_xades_signature(
    http: AsyncHttpClient,
    signed_request: bytes,
    *,
    verify_certificate_chain: bool | None = None,
) -> dict[str, Any]:
    """
    Submit a XAdES-signed AuthTokenRequest document.

    Args:
        http: Configured async HTTP client.
        signed_request: Signed XML document.
        verify_certificate_chain: Ask the platform to verify the chain (test environment only).

    Returns:
        Response with authenticationToken and referenceNumber.
    """
    params = None
    if verify_certificate_chain is not None:
        params = {"verifyCertificateChain": str(verify_certificate_chain).lower()}
    return await http.request(
        "POST",
        "/auth/xades-signature",
        content=signed_request,
        params=params,
        headers={"Content-Type": "application/xml"},
        authenticated=False,
    )


async def submit_ksef_token(
    http: AsyncHttpClient,
    challenge: str,
    identifier: str,
    encrypted_token: str,
) -> dict[str, Any]:
    """
    Submit an encrypted KSeF token.

    Args:
        http: Configured async HTTP client.
        challenge: Challenge string from ``request_challenge``.
        identifier: NIP of the authentication context.
        encrypted_token: Base64 RSA-OAEP ciphertext of ``token|timestampMs``.

    Returns:
        Response with authenticationToken and referenceNumber.
    """
    return await http.request(
        "POST",
        "/auth/ksef-token",
        json={
            "challenge": challenge,
            "contextIdentifier": {"type": "Nip", "value": identifier},
            "encryptedToken": encrypted_token,
        },
        authenticated=False,
    )


async def get_auth_status(http: AsyncHttpClient, reference_number: str) -> dict[str, Any]:
    """Get the status of an authentication operation (uses the interim token)."""
    return await http.request("GET", f"/auth/sessions/{reference_number}/status")


async def redeem_tokens(http: AsyncHttpClient) -> dict[str, Any]:
    """
    Exchange the interim token for access and refresh tokens.

    Returns:
        Response with accessToken and refreshToken objects.
    """
    return await http.request("POST", "/auth/token/redeem")
