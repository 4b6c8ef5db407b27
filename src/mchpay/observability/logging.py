"""Structured logging configuration for mchpay.

Configures structlog for structured logging with console output for
development and JSON output for production.

Environment Variables:
    MCHPAY_LOG_FORMAT: "json" for JSON output, "console" for colored output
    MCHPAY_LOG_LEVEL: Log level (DEBUG, INFO, WARNING, ERROR)
    MCHPAY_SERVICE_NAME: Service name included in every log line

Example:
    >>> from mchpay.observability.logging import get_logger, configure_logging
    >>>
    >>> configure_logging(log_format="json", log_level="INFO")
    >>> logger = get_logger("mchpay.client")
    >>> logger.info("mchpay.client.call", url="https://api.example.com/pay/orderquery")
"""

import logging
import os
import sys
from typing import Any

import structlog
from structlog.typing import Processor

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "console"
DEFAULT_SERVICE_NAME = "mchpay"

ENV_LOG_FORMAT = "MCHPAY_LOG_FORMAT"
ENV_LOG_LEVEL = "MCHPAY_LOG_LEVEL"
ENV_SERVICE_NAME = "MCHPAY_SERVICE_NAME"

REDACTED_PLACEHOLDER = "***REDACTED***"

# Key substrings (case-insensitive) whose values never reach the logs.
# "sign" covers sign and paySign: a signature is an oracle for the api key.
_SENSITIVE_KEY_PATTERNS = frozenset({"password", "secret", "key", "sign", "token"})

# Exact keys exempt from redaction although they match a pattern above.
_SAFE_KEYS = frozenset({"sign_type", "signtype"})

_logging_configured = False


def _is_sensitive_key(key: str) -> bool:
    """Return True if the key name indicates sensitive data that should be redacted."""
    lower = key.lower()
    if lower in _SAFE_KEYS:
        return False
    return any(pattern in lower for pattern in _SENSITIVE_KEY_PATTERNS)


def sanitize_for_logging(data: dict[str, Any]) -> dict[str, Any]:
    """Sanitize a payload for safe logging by redacting sensitive field values.

    Keys containing password, secret, key, sign or token (case-insensitive)
    have their values replaced with REDACTED_PLACEHOLDER; ``sign_type`` is kept.
    Nested dicts are sanitized recursively.

    Example:
        >>> sanitize_for_logging({"mch_id": "1900000109", "sign": "3970B01F..."})
        {'mch_id': '1900000109', 'sign': '***REDACTED***'}
    """
    if not data:
        return {}
    result: dict[str, Any] = {}
    for k, v in data.items():
        if _is_sensitive_key(k):
            result[k] = REDACTED_PLACEHOLDER
        elif isinstance(v, dict):
            result[k] = sanitize_for_logging(v)
        else:
            result[k] = v
    return result


def _get_log_level() -> str:
    return os.environ.get(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL).upper()


def _get_log_format() -> str:
    return os.environ.get(ENV_LOG_FORMAT, DEFAULT_LOG_FORMAT).lower()


def _get_service_name() -> str:
    return os.environ.get(ENV_SERVICE_NAME, DEFAULT_SERVICE_NAME)


def _get_shared_processors() -> list[Processor]:
    """Get shared processors for all log formats."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def configure_logging(
    log_format: str | None = None,
    log_level: str | None = None,
    service_name: str | None = None,
    force: bool = False,
) -> None:
    """Configure structured logging for the application.

    Args:
        log_format: Output format - "json" or "console". Defaults to env var or "console"
        log_level: Minimum log level. Defaults to env var or "INFO"
        service_name: Service name for log context. Defaults to env var or "mchpay"
        force: If True, reconfigure even if already configured
    """
    global _logging_configured

    if _logging_configured and not force:
        return

    log_format = log_format or _get_log_format()
    log_level = log_level or _get_log_level()
    service_name = service_name or _get_service_name()

    shared_processors = _get_shared_processors()

    if log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level))

    structlog.contextvars.bind_contextvars(service=service_name)

    _logging_configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger for the given name.

    Configures logging with default settings on first use.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger = logger.bind(mch_id="1900000109")
        >>> logger.info("mchpay.client.call")  # mch_id automatically included
    """
    if not _logging_configured:
        configure_logging()

    return structlog.stdlib.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context variables included in all subsequent logs of this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
