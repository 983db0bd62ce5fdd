from unittest.mock import AsyncMock, Mock, patch

import pytest

from ksef_client.exceptions import CertificateNotFoundError
from ksef_client.models.crypto import KeyUsage, PublicKeyEntry
from ksef_client.services.public_keys import PublicKeyResolver


def _entry(usage: str | list[str], certificate: str) -> PublicKeyEntry:
    return PublicKeyEntry.from_dict({"usage": usage, "certificate": certificate})


PUBLISHED = [
    _entry(["SymmetricKeyEncryption"], "SYM-1"),
    _entry("KsefTokenEncryption", "TOK-1"),
    _entry(["KsefTokenEncryption", "SymmetricKeyEncryption"], "BOTH"),
]


@pytest.fixture
def resolver(mock_http: Mock) -> PublicKeyResolver:
    return PublicKeyResolver(mock_http)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("usage", "expected"),
    [
        (KeyUsage.SYMMETRIC_KEY_ENCRYPTION, "SYM-1"),
        (KeyUsage.KSEF_TOKEN_ENCRYPTION, "TOK-1"),
        ("KsefTokenEncryption", "TOK-1"),
    ],
)
async def test_resolve_returns_first_match_in_server_order(
    resolver: PublicKeyResolver, usage: str, expected: str
) -> None:
    with patch(
        "ksef_client.services.public_keys.get_public_key_certificates",
        AsyncMock(return_value=PUBLISHED),
    ):
        entry = await resolver.resolve(usage)

    assert entry.certificate == expected


@pytest.mark.asyncio
async def test_resolve_does_not_reorder_entries(resolver: PublicKeyResolver) -> None:
    reordered = [PUBLISHED[2], PUBLISHED[0], PUBLISHED[1]]

    with patch(
        "ksef_client.services.public_keys.get_public_key_certificates",
        AsyncMock(return_value=reordered),
    ):
        entry = await resolver.resolve(KeyUsage.SYMMETRIC_KEY_ENCRYPTION)

    assert entry.certificate == "BOTH"


@pytest.mark.asyncio
async def test_resolve_raises_when_tag_absent(resolver: PublicKeyResolver) -> None:
    with patch(
        "ksef_client.services.public_keys.get_public_key_certificates",
        AsyncMock(return_value=[PUBLISHED[0]]),
    ):
        with pytest.raises(CertificateNotFoundError, match="KsefTokenEncryption") as exc_info:
            await resolver.resolve(KeyUsage.KSEF_TOKEN_ENCRYPTION)

    assert exc_info.value.usage == "KsefTokenEncryption"


@pytest.mark.asyncio
async def test_resolve_fetches_on_every_call(resolver: PublicKeyResolver) -> None:
    fetch = AsyncMock(return_value=PUBLISHED)

    with patch("ksef_client.services.public_keys.get_public_key_certificates", fetch):
        await resolver.resolve(KeyUsage.SYMMETRIC_KEY_ENCRYPTION)
        await resolver.resolve(KeyUsage.KSEF_TOKEN_ENCRYPTION)

    assert fetch.await_count == 2
