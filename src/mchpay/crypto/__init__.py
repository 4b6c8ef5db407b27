"""mchpay cryptographic layer.

This package provides request signing and reply authentication:
- Canonical string encoding of flat payloads
- MD5 and HMAC-SHA256 signatures (uppercase hex)
- Reply verification (signature, appid, mch_id)
- Client certificate loading from PKCS#12 or PEM for mutual TLS

Public exports:
    canonical: canonical_string, canonicalize
    signing: sign, sign_md5, sign_hmac_sha256
    reply: verify_reply
    certs: ClientIdentity and the three loaders
"""

from mchpay.crypto import canonical, certs, reply, signing
from mchpay.crypto.canonical import canonical_string, canonicalize
from mchpay.crypto.certs import (
    ClientIdentity,
    load_identity_from_p12,
    load_identity_from_p12_file,
    load_identity_from_pem,
    load_identity_from_pem_files,
)
from mchpay.crypto.reply import verify_reply
from mchpay.crypto.signing import resolve_sign_type, sign, sign_hmac_sha256, sign_md5

__all__ = [
    "canonical",
    "certs",
    "reply",
    "signing",
    "ClientIdentity",
    "canonical_string",
    "canonicalize",
    "load_identity_from_p12",
    "load_identity_from_p12_file",
    "load_identity_from_pem",
    "load_identity_from_pem_files",
    "resolve_sign_type",
    "sign",
    "sign_hmac_sha256",
    "sign_md5",
    "verify_reply",
]
