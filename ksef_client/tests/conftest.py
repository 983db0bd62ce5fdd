from unittest.mock import Mock

import pytest
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import rsa

from ksef_client.models.auth import CertificateCredential
from ksef_client.tests.utils.certificates import (
    certificate_b64,
    generate_rsa_key,
    self_signed_certificate,
)


@pytest.fixture(scope="session")
def platform_key() -> rsa.RSAPrivateKey:
    """Private half of the platform's encryption certificate."""
    return generate_rsa_key()


@pytest.fixture(scope="session")
def platform_certificate(platform_key: rsa.RSAPrivateKey) -> x509.Certificate:
    return self_signed_certificate(platform_key, common_name="KSeF Platform")


@pytest.fixture(scope="session")
def platform_certificate_b64(platform_certificate: x509.Certificate) -> str:
    return certificate_b64(platform_certificate)


@pytest.fixture(scope="session")
def client_credential() -> CertificateCredential:
    key = generate_rsa_key()
    return CertificateCredential(
        certificate=self_signed_certificate(key, common_name="Jan Kowalski"),
        private_key=key,
    )


@pytest.fixture
def mock_http() -> Mock:
    return Mock()
