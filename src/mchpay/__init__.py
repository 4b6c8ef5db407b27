"""mchpay: signed XML client for a payment gateway's merchant API.

Requests are signed over a canonical string (MD5 or HMAC-SHA256), sent over
a standard or mutual-TLS connection depending on their sensitivity, and
replies are verified before they reach the caller.

Example:
    >>> from mchpay import MchClient
    >>> from mchpay.operations import UnifiedOrderParams
    >>>
    >>> with MchClient.create("wx2421b1c4370ec43b", "10000100", "<api key>") as client:
    ...     client.load_cert_from_p12_file("apiclient_cert.p12")
    ...     reply = client.order().query(out_trade_no="20150806125346")
"""

__version__ = "0.1.0"

from mchpay.client import MchClient
from mchpay.config import ClientConfig, MchSettings
from mchpay.crypto.certs import ClientIdentity
from mchpay.errors import (
    CertificateDecodeError,
    CertificateError,
    CertificateFormatError,
    CertificateIOError,
    GatewayError,
    IdentityMismatchError,
    KeypairMismatchError,
    MchError,
    SignatureMismatchError,
    TransportError,
    UnsupportedAlgorithmError,
)
from mchpay.models import Credential, Sensitivity, SignType

__all__ = [
    "__version__",
    "CertificateDecodeError",
    "CertificateError",
    "CertificateFormatError",
    "CertificateIOError",
    "ClientConfig",
    "ClientIdentity",
    "Credential",
    "GatewayError",
    "IdentityMismatchError",
    "KeypairMismatchError",
    "MchClient",
    "MchError",
    "MchSettings",
    "Sensitivity",
    "SignType",
    "SignatureMismatchError",
    "TransportError",
    "UnsupportedAlgorithmError",
]
