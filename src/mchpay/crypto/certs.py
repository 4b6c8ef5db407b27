"""Client certificate loading for mutual-TLS calls.

Three sources converge on the same :class:`ClientIdentity`:

- a PKCS#12 (p12/pfx) archive, unlocked with the merchant ID,
- a certificate PEM file plus a private key PEM file,
- in-memory PEM bytes for the certificate and the key.

Every loader either returns a fully checked identity or raises a
:class:`~mchpay.errors.CertificateError`; nothing is installed on failure.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Union

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa
from cryptography.hazmat.primitives.serialization import load_pem_private_key, pkcs12

from mchpay.errors import (
    CertificateDecodeError,
    CertificateFormatError,
    CertificateIOError,
    KeypairMismatchError,
)
from mchpay.observability import get_logger

logger = get_logger(__name__)

PrivateKey = Union[rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey, ed25519.Ed25519PrivateKey]

# Days before expiry at which loading a certificate logs a renewal warning.
CERT_EXPIRY_WARNING_DAYS = 30
# Recommended mode for private key files (owner read/write only).
KEY_FILE_RECOMMENDED_MODE = 0o600

# Markers checked before parsing to report which half of the pair is missing.
CERTIFICATE_PEM_MARKER = b"-----BEGIN CERTIFICATE-----"
PRIVATE_KEY_PEM_MARKER = b"PRIVATE KEY-----"
PEM_BEGIN = b"-----BEGIN "


@dataclass(frozen=True)
class ClientIdentity:
    """Private key and certificate chain presented on mutual-TLS connections.

    ``certificate`` is the leaf; ``chain`` holds any further certificates in
    the order they were found. ``cert_chain_pem`` and ``key_pem`` are the PEM
    encodings handed to the TLS layer.
    """

    private_key: PrivateKey
    certificate: x509.Certificate
    chain: tuple[x509.Certificate, ...]
    cert_chain_pem: bytes
    key_pem: bytes

    @property
    def subject(self) -> str:
        return self.certificate.subject.rfc4514_string()

    @property
    def not_valid_after(self) -> datetime:
        return self.certificate.not_valid_after_utc

    def fingerprint(self) -> str:
        """SHA-256 hex digest of the leaf certificate's DER encoding."""
        der = self.certificate.public_bytes(serialization.Encoding.DER)
        return hashlib.sha256(der).hexdigest()


def _public_der(key: object) -> bytes:
    return key.public_bytes(  # type: ignore[attr-defined]
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def _build_identity(cert_pem: bytes, key_pem: bytes) -> ClientIdentity:
    """Parse PEM certificate and key blocks and check that they form a pair.

    Like a TLS key pair loader, blocks of other types are skipped: the same
    concatenated PEM text may be passed as both arguments. Every certificate
    is read in order (the first is the leaf); the first private key is used.
    """
    if CERTIFICATE_PEM_MARKER not in cert_pem:
        raise CertificateFormatError("no CERTIFICATE block found in certificate PEM data")
    key_start = key_pem.find(PRIVATE_KEY_PEM_MARKER)
    if key_start < 0:
        raise CertificateFormatError("no PRIVATE KEY block found in key PEM data")
    # The key loader reads only the first PEM block.
    key_pem = key_pem[max(key_pem.rfind(PEM_BEGIN, 0, key_start), 0):]

    try:
        certificates = x509.load_pem_x509_certificates(cert_pem)
    except ValueError as e:
        raise CertificateFormatError(f"malformed certificate: {e}") from e

    try:
        private_key = load_pem_private_key(key_pem, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise CertificateFormatError(f"malformed or encrypted private key: {e}") from e

    if not isinstance(
        private_key, (rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey, ed25519.Ed25519PrivateKey)
    ):
        raise CertificateFormatError(
            f"unsupported private key type {type(private_key).__name__}"
        )

    leaf = certificates[0]
    if _public_der(leaf.public_key()) != _public_der(private_key.public_key()):
        raise KeypairMismatchError(details={"subject": leaf.subject.rfc4514_string()})

    normalized_key = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return ClientIdentity(
        private_key=private_key,
        certificate=leaf,
        chain=tuple(certificates[1:]),
        cert_chain_pem=b"".join(c.public_bytes(serialization.Encoding.PEM) for c in certificates),
        key_pem=normalized_key,
    )


def _warn_if_expiring(identity: ClientIdentity) -> None:
    remaining = identity.not_valid_after - datetime.now(timezone.utc)
    if remaining.days < CERT_EXPIRY_WARNING_DAYS:
        logger.warning(
            "mchpay.certs.expiring",
            subject=identity.subject,
            fingerprint=identity.fingerprint(),
            not_valid_after=identity.not_valid_after.isoformat(),
            days_left=remaining.days,
        )


def _log_loaded(identity: ClientIdentity, source: str) -> None:
    logger.info(
        "mchpay.certs.loaded",
        source=source,
        subject=identity.subject,
        fingerprint=identity.fingerprint(),
        not_valid_after=identity.not_valid_after.isoformat(),
    )
    _warn_if_expiring(identity)


def warn_if_key_file_permissions_loose(path: Path) -> None:
    """Warn when a file holding a private key is group/other readable."""
    try:
        mode = path.stat().st_mode
    except OSError:
        return
    if (mode & 0o77) != 0:
        logger.warning(
            "mchpay.certs.key_file_permissions_loose",
            path=str(path),
            mode=oct(mode),
            recommended=oct(KEY_FILE_RECOMMENDED_MODE),
        )


def _read_bytes(path: str | Path) -> bytes:
    path = Path(path)
    try:
        return path.read_bytes()
    except OSError as e:
        raise CertificateIOError(str(path), e) from e


def p12_to_pem(data: bytes, mch_id: str) -> bytes:
    """Decode a PKCS#12 archive into concatenated PEM text.

    The archive is unlocked with the merchant ID. The output holds the private
    key, the leaf certificate and any additional certificates, each re-encoded
    as a PEM block.

    Raises:
        CertificateDecodeError: Wrong merchant ID or undecodable archive.
        CertificateFormatError: Archive lacks a private key or a certificate.
    """
    try:
        private_key, certificate, additional = pkcs12.load_key_and_certificates(
            data, mch_id.encode("utf-8")
        )
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise CertificateDecodeError(str(e) or "invalid archive or merchant ID") from e

    if private_key is None:
        raise CertificateFormatError("PKCS#12 archive holds no private key")
    if certificate is None:
        raise CertificateFormatError("PKCS#12 archive holds no certificate")

    blocks = [
        private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ),
        certificate.public_bytes(serialization.Encoding.PEM),
    ]
    blocks.extend(c.public_bytes(serialization.Encoding.PEM) for c in additional)
    return b"".join(blocks)


def load_identity_from_p12(data: bytes, mch_id: str) -> ClientIdentity:
    pem_data = p12_to_pem(data, mch_id)
    identity = _build_identity(pem_data, pem_data)
    _log_loaded(identity, source="p12")
    return identity


def load_identity_from_p12_file(path: str | Path, mch_id: str) -> ClientIdentity:
    """Load an identity from a p12/pfx file unlocked with the merchant ID.

    Raises:
        CertificateIOError: File missing or unreadable.
        CertificateDecodeError: Wrong merchant ID or undecodable archive.
        CertificateFormatError: Unexpected archive contents.
        KeypairMismatchError: Certificate and key do not match.
    """
    path = Path(path)
    warn_if_key_file_permissions_loose(path)
    return load_identity_from_p12(_read_bytes(path), mch_id)


def load_identity_from_pem(cert_pem: bytes, key_pem: bytes) -> ClientIdentity:
    identity = _build_identity(cert_pem, key_pem)
    _log_loaded(identity, source="pem")
    return identity


def load_identity_from_pem_files(cert_file: str | Path, key_file: str | Path) -> ClientIdentity:
    """Load an identity from separate certificate and private key PEM files.

    Raises:
        CertificateIOError: Either file missing or unreadable.
        CertificateFormatError: Invalid PEM content.
        KeypairMismatchError: Certificate and key do not match.
    """
    key_path = Path(key_file)
    cert_pem = _read_bytes(cert_file)
    key_pem = _read_bytes(key_path)
    warn_if_key_file_permissions_loose(key_path)
    identity = _build_identity(cert_pem, key_pem)
    _log_loaded(identity, source="pem_files")
    return identity
