"""Canonical string encoding of gateway payloads.

The canonical form is the signing input shared with the gateway::

    k1=v1&k2=v2&...&key=<api_key>

Keys are sorted in ascending byte order; the ``sign`` entry and entries with
an empty value are left out. The result depends only on the set of
non-empty pairs, never on the mapping's iteration order.
"""

from collections.abc import Mapping

from mchpay.models.constants import CANONICAL_SECRET_KEY, SIGN_FIELD


def canonical_string(payload: Mapping[str, str], api_key: str) -> str:
    # Code point order of str keys equals UTF-8 byte order.
    pairs = [
        f"{key}={payload[key]}"
        for key in sorted(payload)
        if key != SIGN_FIELD and payload[key] != ""
    ]
    pairs.append(f"{CANONICAL_SECRET_KEY}={api_key}")
    return "&".join(pairs)


def canonicalize(payload: Mapping[str, str], api_key: str) -> bytes:
    """UTF-8 bytes of :func:`canonical_string`, as fed to the hash."""
    return canonical_string(payload, api_key).encode("utf-8")
