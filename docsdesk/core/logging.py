"""Structured logging configuration for DocsDesk.

Uses structlog with context management. JSON output in production,
human-readable console output otherwise. Secrets are redacted before rendering.
"""

import logging
import re
from typing import Any

import structlog

from docsdesk.config import Config

REDACTED = "***REDACTED***"

# Substrings that mark a key as sensitive
SECRET_KEYS = (
    "password",
    "pass",
    "user",
    "token",
    "secret",
    "key",
    "authorization",
    "auth",
    "credential",
)

# Keys structlog itself adds; never redacted
_RESERVED_KEYS = frozenset({"event", "level", "timestamp", "logger", "exception", "stack"})

# Authorization header values that leaked into free text
_CREDENTIAL_VALUE = re.compile(r"\b(basic|bearer)\s+\S+", re.IGNORECASE)


def _is_secret(text: str) -> bool:
    lowered = text.lower()
    return any(secret in lowered for secret in SECRET_KEYS)


def redact_secrets(value: Any) -> Any:
    """Return a copy of ``value`` with sensitive entries masked.

    Values under dict keys containing a secret marker are replaced wholesale,
    as are strings carrying an Authorization credential. Lists, tuples and
    nested dicts are walked. Other strings pass through so that tables, URLs
    and status reasons stay readable.
    """
    if value is None:
        return value
    if isinstance(value, str):
        return REDACTED if _CREDENTIAL_VALUE.search(value) else value
    if isinstance(value, dict):
        return {
            key: REDACTED if _is_secret(str(key)) else redact_secrets(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact_secrets(item) for item in value]
    return value


def redact_processor(logger: Any, method_name: str, event_dict: dict) -> dict:
    """structlog processor applying :func:`redact_secrets` to event context."""
    for key in list(event_dict):
        if key in _RESERVED_KEYS:
            continue
        if _is_secret(key):
            event_dict[key] = REDACTED
        else:
            event_dict[key] = redact_secrets(event_dict[key])
    return event_dict


def configure_logging(environment: str = None, level: str = None):
    """Configure structured logging and return a bound logger."""
    environment = environment or Config.environment()
    level_name = (level or Config.log_level()).upper()
    renderer = (
        structlog.processors.JSONRenderer()
        if environment == "production"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            redact_processor,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level_name, logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return structlog.get_logger()


# Global logger instance
logger = configure_logging()


def get_logger():
    """Get the configured logger instance."""
    return logger
