"""Security-related API endpoints."""

from ksef_client.api.http_client import AsyncHttpClient
from ksef_client.models.crypto import PublicKeyEntry


async def get_public_key_certificates(http: AsyncHttpClient) -> list[PublicKeyEntry]:
    """Get the platform's published public key certificates, in server order."""
    response = await http.request(
        "GET",
        "/security/public-key-certificates",
        authenticated=False,
    )
    return [PublicKeyEntry.from_dict(entry) for entry in response.get("items", [])]
