"""SSL context creation for gateway connections.

The standard handle authenticates the server only; the mutual-TLS handle
additionally presents the merchant's :class:`ClientIdentity`.
"""

from __future__ import annotations

import ssl
import tempfile
from pathlib import Path

from mchpay.crypto.certs import ClientIdentity
from mchpay.errors import CertificateFormatError

IDENTITY_FILE_NAME = "identity.pem"


def _load_identity(ctx: ssl.SSLContext, identity: ClientIdentity) -> None:
    # ssl only loads cert chains from files; the directory is private to this process.
    with tempfile.TemporaryDirectory(prefix="mchpay-") as tmp_dir:
        identity_path = Path(tmp_dir) / IDENTITY_FILE_NAME
        identity_path.touch(mode=0o600)
        identity_path.write_bytes(identity.cert_chain_pem + identity.key_pem)
        try:
            ctx.load_cert_chain(certfile=str(identity_path))
        except ssl.SSLError as e:
            raise CertificateFormatError(f"TLS layer rejected client identity: {e}") from e


def create_ssl_context(
    identity: ClientIdentity | None = None,
    *,
    verify: bool = True,
    ca_certs: str | Path | None = None,
) -> ssl.SSLContext:
    """Build a client-side SSL context.

    Args:
        identity: Client certificate and key to present; None for server-only TLS.
        verify: Verify the gateway's certificate and hostname.
        ca_certs: CA bundle used instead of the system trust store.

    Raises:
        FileNotFoundError: ``ca_certs`` does not exist.
        CertificateFormatError: The TLS layer refuses the identity.
    """
    ctx = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    if ca_certs:
        ca_path = Path(ca_certs)
        if not ca_path.exists():
            raise FileNotFoundError(f"CA certs file not found: {ca_path}")
        ctx.load_verify_locations(cafile=str(ca_path))
    else:
        ctx.load_default_certs(ssl.Purpose.SERVER_AUTH)

    if verify:
        ctx.check_hostname = True
        ctx.verify_mode = ssl.CERT_REQUIRED
    else:
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE

    if identity is not None:
        _load_identity(ctx, identity)

    return ctx
