"""Enumerations for mchpay.

Defines the signature algorithms understood by the gateway and the
transport sensitivity used to route a call.
"""

from enum import Enum


class SignType(str, Enum):
    """Signature algorithms carried in the ``sign_type`` field.

    Example:
        >>> SignType("HMAC-SHA256") is SignType.HMAC_SHA256
        True
        >>> SignType.default()
        <SignType.MD5: 'MD5'>
    """

    MD5 = "MD5"
    HMAC_SHA256 = "HMAC-SHA256"

    @classmethod
    def default(cls) -> "SignType":
        """Algorithm assumed when a payload carries no sign_type."""
        return cls.MD5


class Sensitivity(str, Enum):
    """Which transport handle a call goes through.

    MUTUAL_TLS calls (refund, transfer, cash bonus) present the merchant's
    client certificate; STANDARD calls only authenticate the server.
    """

    STANDARD = "standard"
    MUTUAL_TLS = "mutual_tls"

    @classmethod
    def from_flag(cls, sensitive: bool) -> "Sensitivity":
        return cls.MUTUAL_TLS if sensitive else cls.STANDARD
