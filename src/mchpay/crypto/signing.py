"""MD5 and HMAC-SHA256 payload signatures over the canonical string."""

import hashlib
import hmac
from collections.abc import Callable, Mapping

from mchpay.crypto.canonical import canonicalize
from mchpay.errors import UnsupportedAlgorithmError
from mchpay.models.enums import SignType


def sign_md5(payload: Mapping[str, str], api_key: str) -> str:
    return hashlib.md5(canonicalize(payload, api_key)).hexdigest().upper()  # nosec B324


def sign_hmac_sha256(payload: Mapping[str, str], api_key: str) -> str:
    mac = hmac.new(api_key.encode("utf-8"), canonicalize(payload, api_key), hashlib.sha256)
    return mac.hexdigest().upper()


_SIGNERS: dict[SignType, Callable[[Mapping[str, str], str], str]] = {
    SignType.MD5: sign_md5,
    SignType.HMAC_SHA256: sign_hmac_sha256,
}


def resolve_sign_type(value: SignType | str | None) -> SignType:
    """Parse a sign_type value; ``None`` and ``""`` mean the default (MD5).

    Raises:
        UnsupportedAlgorithmError: If the value names no known algorithm.
    """
    if isinstance(value, SignType):
        return value
    if not value:
        return SignType.default()
    try:
        return SignType(value)
    except ValueError as e:
        raise UnsupportedAlgorithmError(value) from e


def sign(
    payload: Mapping[str, str],
    api_key: str,
    sign_type: SignType | str | None = SignType.MD5,
) -> str:
    """Compute the uppercase hex signature of a payload.

    The payload is not modified; callers store the result under ``sign``.

    Args:
        payload: Flat string mapping to sign. Any existing ``sign`` entry is ignored.
        api_key: Merchant signing secret.
        sign_type: Algorithm, as enum or its wire value.

    Raises:
        UnsupportedAlgorithmError: If ``sign_type`` is not MD5 or HMAC-SHA256.
    """
    return _SIGNERS[resolve_sign_type(sign_type)](payload, api_key)


def signatures_equal(expected: str, actual: str) -> bool:
    """Constant-time comparison of two hex signatures."""
    return hmac.compare_digest(expected.encode("utf-8"), actual.encode("utf-8"))
