"""
Selection of the platform's published encryption certificates.
"""

import structlog

from ksef_client.api.endpoints.security import get_public_key_certificates
from ksef_client.api.http_client import AsyncHttpClient
from ksef_client.exceptions import CertificateNotFoundError
from ksef_client.models.crypto import KeyUsage, PublicKeyEntry

logger = structlog.get_logger(__name__)


class PublicKeyResolver:
    """
    Finds the published certificate authorized for a given usage.

    Every call fetches the current list; nothing is cached between calls.
    """

    def __init__(self, http_client: AsyncHttpClient) -> None:
        self._http = http_client

    async def fetch_all(self) -> list[PublicKeyEntry]:
        """Fetch all published certificates in server order."""
        return await get_public_key_certificates(self._http)

    async def resolve(self, usage: KeyUsage | str) -> PublicKeyEntry:
        """
        Return the first published certificate tagged with ``usage``.

        Server order is authoritative; entries are not re-sorted.

        Raises:
            CertificateNotFoundError: If no entry carries the tag.
        """
        usage = str(usage)
        entries = await self.fetch_all()

        entry = next((e for e in entries if e.has_usage(usage)), None)
        if entry is None:
            msg = f"{usage} certificate not found"
            raise CertificateNotFoundError(msg, usage=usage)

        logger.debug("Resolved public key certificate", usage=usage, candidates=len(entries))
        return entry
