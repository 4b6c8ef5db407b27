"""Random nonce and timestamp helpers for gateway payloads."""

import secrets
import string
import time

NONCE_ALPHABET = string.ascii_letters + string.digits

# The gateway accepts nonce_str values of at most 32 characters.
MAX_NONCE_LENGTH = 32


def generate_nonce(size: int = 16) -> str:
    """Return a random alphanumeric string for nonce_str style fields.

    Example:
        >>> len(generate_nonce(16))
        16
    """
    if not 0 < size <= MAX_NONCE_LENGTH:
        raise ValueError(f"nonce size must be between 1 and {MAX_NONCE_LENGTH}, got {size}")
    return "".join(secrets.choice(NONCE_ALPHABET) for _ in range(size))


def unix_timestamp() -> str:
    """Current Unix time in seconds, as the decimal string the gateway expects."""
    return str(int(time.time()))
