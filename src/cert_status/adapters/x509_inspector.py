"""
X.509 inspector — decode the certificate a Secret's tls.crt holds.

Adapter layer — uses cryptography (PyCA) for typed X.509 metadata extraction.
Only the first (leaf) certificate of a PEM bundle is inspected; any chain
that follows it is ignored.

Decoding never raises: a corrupt or non-PEM tls.crt becomes a
Failed(MALFORMED) outcome that the report shows next to the Secret.
"""

from __future__ import annotations

import structlog
from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import dsa, ec, ed448, ed25519, rsa
from cryptography.x509.extensions import ExtensionNotFound

from cert_status.domain.models import CertificateDetails
from cert_status.domain.outcome import FailureKind, LookupOutcome

log = structlog.get_logger()

_KEY_USAGE_FLAGS = (
    ("digital_signature", "Digital Signature"),
    ("content_commitment", "Content Commitment"),
    ("key_encipherment", "Key Encipherment"),
    ("data_encipherment", "Data Encipherment"),
    ("key_agreement", "Key Agreement"),
    ("key_cert_sign", "Cert Sign"),
    ("crl_sign", "CRL Sign"),
)


def _dns_names(cert: x509.Certificate) -> tuple[str, ...]:
    try:
        ext = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName)
    except ExtensionNotFound:
        return ()
    return tuple(ext.value.get_values_for_type(x509.DNSName))


def _is_ca(cert: x509.Certificate) -> bool:
    try:
        ext = cert.extensions.get_extension_for_class(x509.BasicConstraints)
    except ExtensionNotFound:
        return False
    return ext.value.ca


def _key_usages(cert: x509.Certificate) -> tuple[str, ...]:
    """Names of the asserted KeyUsage bits, in RFC 5280 order."""
    try:
        usage = cert.extensions.get_extension_for_class(x509.KeyUsage).value
    except ExtensionNotFound:
        return ()
    names = [label for attr, label in _KEY_USAGE_FLAGS if getattr(usage, attr)]
    # encipher_only/decipher_only are only defined when key_agreement is set
    if usage.key_agreement:
        if usage.encipher_only:
            names.append("Encipher Only")
        if usage.decipher_only:
            names.append("Decipher Only")
    return tuple(names)


def _extended_key_usages(cert: x509.Certificate) -> tuple[str, ...]:
    try:
        ext = cert.extensions.get_extension_for_class(x509.ExtendedKeyUsage)
    except ExtensionNotFound:
        return ()
    return tuple(oid._name for oid in ext.value)


def _public_key_algorithm(cert: x509.Certificate) -> str:
    key = cert.public_key()
    match key:
        case rsa.RSAPublicKey():
            return f"RSA ({key.key_size} bits)"
        case ec.EllipticCurvePublicKey():
            return f"ECDSA ({key.curve.name})"
        case ed25519.Ed25519PublicKey():
            return "Ed25519"
        case ed448.Ed448PublicKey():
            return "Ed448"
        case dsa.DSAPublicKey():
            return f"DSA ({key.key_size} bits)"
        case _:
            return type(key).__name__


def _signature_algorithm(cert: x509.Certificate) -> str:
    return cert.signature_algorithm_oid._name


def _decode(pem_bytes: bytes) -> CertificateDetails:
    cert = x509.load_pem_x509_certificate(pem_bytes)
    return CertificateDetails(
        subject=cert.subject.rfc4514_string(),
        issuer=cert.issuer.rfc4514_string(),
        serial_number=format(cert.serial_number, "x"),
        not_before=cert.not_valid_before_utc,
        not_after=cert.not_valid_after_utc,
        dns_names=_dns_names(cert),
        is_ca=_is_ca(cert),
        key_usages=_key_usages(cert),
        extended_key_usages=_extended_key_usages(cert),
        public_key_algorithm=_public_key_algorithm(cert),
        signature_algorithm=_signature_algorithm(cert),
    )


def inspect_certificate(pem_bytes: bytes) -> LookupOutcome[CertificateDetails]:
    """
    Decode the leaf certificate of a PEM-encoded tls.crt.

    Returns Present(CertificateDetails), or Failed(MALFORMED) when the data
    is not a parseable PEM certificate.
    """
    return LookupOutcome.from_computation(
        lambda: _decode(pem_bytes),
        FailureKind.MALFORMED,
        "error when parsing 'tls.crt'",
    ).peek_failure(
        lambda reason: log.warning("x509.decode_failed", error=reason.describe())
    )
