"""
XAdES proof of possession for certificate-based authentication.

The challenge is embedded in an ``AuthTokenRequest`` document which is then
signed with an enveloped XAdES-BES signature using the caller's certificate.
"""

from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.hazmat.primitives.serialization import Encoding
from lxml import etree
from signxml import DigestAlgorithm, InvalidInput, SignatureMethod
from signxml.xades import XAdESSigner

from ksef_client.exceptions import SignatureError
from ksef_client.models.auth import CertificateCredential

AUTH_TOKEN_NAMESPACE = "http://ksef.mf.gov.pl/auth/token/2.0"
SUBJECT_IDENTIFIER_TYPE = "certificateSubject"


def _qname(tag: str) -> str:
    return f"{{{AUTH_TOKEN_NAMESPACE}}}{tag}"


def build_auth_token_request(challenge: str, identifier: str) -> etree._Element:
    """
    Build the unsigned AuthTokenRequest document.

    Args:
        challenge: Challenge string from the platform.
        identifier: NIP of the authentication context.

    Returns:
        Root element of the document.
    """
    root = etree.Element(_qname("AuthTokenRequest"), nsmap={None: AUTH_TOKEN_NAMESPACE})
    etree.SubElement(root, _qname("Challenge")).text = challenge
    context = etree.SubElement(root, _qname("ContextIdentifier"))
    etree.SubElement(context, _qname("Nip")).text = identifier
    etree.SubElement(root, _qname("SubjectIdentifierType")).text = SUBJECT_IDENTIFIER_TYPE
    return root


def _signature_method(credential: CertificateCredential) -> SignatureMethod:
    match credential.private_key:
        case rsa.RSAPrivateKey():
            return SignatureMethod.RSA_SHA256
        case ec.EllipticCurvePrivateKey():
            return SignatureMethod.ECDSA_SHA256
        case _:
            msg = "Unsupported private key type for XAdES signing"
            raise SignatureError(msg, key_type=type(credential.private_key).__name__)


def _certificate_chain_pem(credential: CertificateCredential) -> str:
    chain = (credential.certificate, *credential.additional_certificates)
    return "".join(cert.public_bytes(Encoding.PEM).decode("ascii") for cert in chain)


def sign_enveloped(document: etree._Element, credential: CertificateCredential) -> bytes:
    """
    Sign a document with an enveloped XAdES-BES signature.

    Args:
        document: Root element to sign.
        credential: Certificate and private key of the signer.

    Returns:
        Serialized signed document, UTF-8 with XML declaration.

    Raises:
        SignatureError: If the key type is unsupported or signing fails.
    """
    signer = XAdESSigner(
        signature_algorithm=_signature_method(credential),
        digest_algorithm=DigestAlgorithm.SHA256,
    )
    try:
        signed = signer.sign(
            document,
            key=credential.private_key,
            cert=_certificate_chain_pem(credential),
        )
    except (InvalidInput, ValueError, TypeError) as e:
        msg = "XAdES signing failed"
        raise SignatureError(msg) from e

    return etree.tostring(signed, xml_declaration=True, encoding="UTF-8")
