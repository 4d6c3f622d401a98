"""
Structured logging configuration using structlog.

Development gets human-readable console output, every other environment
gets JSON lines. Values stored under sensitive keys (passwords, tokens,
encryption envelopes, decrypted profiles) are masked before rendering.
"""

import logging
import sys
from typing import Any, Dict, Mapping

import structlog
from structlog.types import EventDict, Processor

from app.core.config import settings

REDACTED = "***"

SENSITIVE_KEYS = frozenset(
    {
        "password",
        "password_hash",
        "token",
        "authorization",
        "key",
        "secret",
        "iv",
        "tag",
        "ciphertext",
        "profile",
        "record",
        "plaintext",
    }
)


def _redact(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {
            k: REDACTED if str(k).lower() in SENSITIVE_KEYS else _redact(v)
            for k, v in value.items()
        }
    return value


def redact_sensitive(
    logger: Any, method_name: str, event_dict: EventDict
) -> EventDict:
    """Mask sensitive values, including inside nested dicts."""
    for name in list(event_dict):
        if name.lower() in SENSITIVE_KEYS:
            event_dict[name] = REDACTED
        else:
            event_dict[name] = _redact(event_dict[name])
    return event_dict


def configure_logging() -> None:
    """
    Configure structured logging for the entire application.

    - Development: Human-readable logs with colors
    - Otherwise: JSON structured logs for machine processing
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.INFO,
    )

    processors: list[Processor] = [
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        redact_sensitive,
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
            ]
        ),
    ]

    if settings.is_development:
        processors.extend(
            [
                structlog.dev.set_exc_info,
                structlog.dev.ConsoleRenderer(colors=True),
            ]
        )
    else:
        processors.extend(
            [
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ]
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def add_request_context(request: Any) -> Dict[str, Any]:
    """HTTP request context for log lines. Headers other than UA are skipped."""
    try:
        return {
            "request_id": getattr(request.state, "request_id", None),
            "method": request.method,
            "path": request.url.path,
            "user_agent": request.headers.get("user-agent"),
        }
    except AttributeError:
        return {}
