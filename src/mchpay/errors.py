"""mchpay Error Taxonomy.

This module defines the error hierarchy for the merchant API client,
providing structured error handling with specific error codes
and context information.
"""
from __future__ import annotations

from typing import Any


class MchError(Exception):
    """Base exception for all mchpay errors.

    This is the root exception class that all mchpay-specific errors
    inherit from. It carries an error code, a human-readable message
    and optional structured context.

    Attributes:
        code: Error code following the mchpay:<area>/<name> pattern
        message: Human-readable error message
        details: Optional additional error context
    """

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to ``{code, message, details}`` dict."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class TransportError(MchError):
    """Raised when the HTTP round trip to the gateway fails.

    Covers connection failures, timeouts, non-2xx HTTP statuses and reply
    bodies that cannot be decoded as XML. Never retried by this layer.

    Attributes:
        url: Sanitized URL of the failed request (if available)
        cause: Original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        cause: BaseException | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="mchpay:transport/failed",
            message=message,
            details={"url": url, **(details or {})},
        )
        self.url = url
        self.cause = cause


class GatewayError(MchError):
    """Raised when the gateway answers with a non-success return_code.

    The embedded return_msg becomes the error message. Signature
    verification is never attempted on such replies.

    Attributes:
        return_code: The return_code value sent by the gateway
    """

    def __init__(
        self,
        message: str,
        return_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="mchpay:gateway/failed",
            message=message,
            details={"return_code": return_code, **(details or {})},
        )
        self.return_code = return_code


class SignatureMismatchError(MchError):
    """Recomputed signature differs from the one carried by the payload."""

    def __init__(self, expected: str, actual: str) -> None:
        message = f"signature verification failed, want: {expected}, got: {actual}"
        super().__init__(
            code="mchpay:signature/mismatch",
            message=message,
            details={"expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual


class IdentityMismatchError(MchError):
    """Raised when a reply's appid or mch_id differs from the local credential.

    Attributes:
        field: Name of the mismatching field ("appid" or "mch_id")
        expected: Value from the local credential
        actual: Value carried by the reply
    """

    def __init__(self, field: str, expected: str, actual: str) -> None:
        message = f"{field} mismatch, want: {expected}, got: {actual}"
        super().__init__(
            code="mchpay:identity/mismatch",
            message=message,
            details={"field": field, "expected": expected, "actual": actual},
        )
        self.field = field
        self.expected = expected
        self.actual = actual


class UnsupportedAlgorithmError(MchError):
    """Raised for a sign_type value other than MD5 or HMAC-SHA256."""

    def __init__(self, sign_type: str) -> None:
        super().__init__(
            code="mchpay:signature/unsupported_algorithm",
            message=f"invalid sign type: {sign_type}",
            details={"sign_type": sign_type},
        )
        self.sign_type = sign_type


class CertificateError(MchError):
    """Base class for client certificate pipeline failures.

    A certificate error never replaces the identity already installed
    on a client.
    """


class CertificateIOError(CertificateError):
    """Raised when a certificate or key file cannot be read."""

    def __init__(self, path: str, cause: BaseException | None = None) -> None:
        reason = f": {cause}" if cause is not None else ""
        super().__init__(
            code="mchpay:certificate/io",
            message=f"Cannot read certificate material from {path}{reason}",
            details={"path": path},
        )
        self.path = path
        self.cause = cause


class CertificateFormatError(CertificateError):
    """Raised when certificate material has an unexpected structure."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="mchpay:certificate/format",
            message=f"Invalid certificate material: {reason}",
            details=details or {},
        )
        self.reason = reason


class CertificateDecodeError(CertificateFormatError):
    """Raised when a PKCS#12 archive cannot be unlocked with the merchant ID."""

    def __init__(self, reason: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(reason, details)
        self.code = "mchpay:certificate/decode"
        self.message = f"Cannot decode PKCS#12 archive: {reason}"
        self.args = (self.message,)


class KeypairMismatchError(CertificateError):
    """Raised when the certificate's public key does not belong to the private key."""

    def __init__(self, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="mchpay:certificate/keypair_mismatch",
            message="Private key does not match certificate public key",
            details=details or {},
        )
