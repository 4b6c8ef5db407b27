"""Tests for mchpay error handling."""

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


class TestMchError:
    """Test MchError base class."""

    def test_basic_error_creation(self) -> None:
        """Test creating a basic MchError."""
        error = MchError(code="mchpay:test/error", message="Test error message")

        assert error.code == "mchpay:test/error"
        assert error.message == "Test error message"
        assert error.details == {}
        assert str(error) == "Test error message"

    def test_error_details_immutability(self) -> None:
        """Test that details dict is not shared between instances."""
        error1 = MchError("code", "msg", {"key": "value1"})
        error2 = MchError("code", "msg", {"key": "value2"})

        assert error1.details["key"] == "value1"
        assert error2.details["key"] == "value2"

    def test_to_dict(self) -> None:
        error = MchError("mchpay:test/error", "boom", {"a": 1})
        assert error.to_dict() == {"code": "mchpay:test/error", "message": "boom", "details": {"a": 1}}


class TestCallErrors:
    """Errors raised while calling the gateway."""

    def test_transport_error(self) -> None:
        cause = ConnectionError("refused")
        error = TransportError("Connection error", url="https://api.example.com", cause=cause)
        assert error.code == "mchpay:transport/failed"
        assert error.cause is cause
        assert error.details == {"url": "https://api.example.com"}

    def test_gateway_error_carries_message(self) -> None:
        error = GatewayError("signature error", return_code="FAIL")
        assert str(error) == "signature error"
        assert error.return_code == "FAIL"
        assert error.details["return_code"] == "FAIL"

    def test_signature_mismatch_message(self) -> None:
        error = SignatureMismatchError(expected="AAA", actual="BBB")
        assert str(error) == "signature verification failed, want: AAA, got: BBB"
        assert error.details == {"expected": "AAA", "actual": "BBB"}

    def test_identity_mismatch_message(self) -> None:
        error = IdentityMismatchError("mch_id", "1900000109", "10000100")
        assert str(error) == "mch_id mismatch, want: 1900000109, got: 10000100"
        assert error.field == "mch_id"

    def test_unsupported_algorithm(self) -> None:
        error = UnsupportedAlgorithmError("SHA1")
        assert str(error) == "invalid sign type: SHA1"
        assert error.sign_type == "SHA1"


class TestCertificateErrors:
    """Certificate pipeline errors share one base class."""

    def test_hierarchy(self) -> None:
        for cls in (CertificateIOError, CertificateFormatError, KeypairMismatchError):
            assert issubclass(cls, CertificateError)
            assert issubclass(cls, MchError)
        assert issubclass(CertificateDecodeError, CertificateFormatError)

    def test_io_error(self) -> None:
        error = CertificateIOError("/etc/mchpay/cert.p12", FileNotFoundError("missing"))
        assert error.code == "mchpay:certificate/io"
        assert "/etc/mchpay/cert.p12" in str(error)
        assert error.details == {"path": "/etc/mchpay/cert.p12"}

    def test_decode_error_overrides_code_and_message(self) -> None:
        error = CertificateDecodeError("mac verify failure")
        assert error.code == "mchpay:certificate/decode"
        assert str(error) == "Cannot decode PKCS#12 archive: mac verify failure"
        assert error.reason == "mac verify failure"

    def test_keypair_mismatch(self) -> None:
        error = KeypairMismatchError(details={"subject": "CN=1900000109"})
        assert error.code == "mchpay:certificate/keypair_mismatch"
        assert error.details["subject"] == "CN=1900000109"
