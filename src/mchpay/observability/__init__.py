"""Observability module for mchpay.

Structured logging built on structlog, with payload sanitization so that
signatures and secrets never reach log output.

Example:
    >>> from mchpay.observability import get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> logger.info("mchpay.client.call", url="https://api.example.com/pay/unifiedorder")
"""

from mchpay.observability.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    sanitize_for_logging,
)

__all__ = [
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "sanitize_for_logging",
]
