"""Structured logging configuration with structlog.

Production renders one JSON object per line; every other environment
gets a coloured console renderer. Every entry carries the service name,
an ISO 8601 timestamp, its level and, inside a request, the correlation
id. Credential fields are masked before rendering.

Log Entry Format:
    {
        "timestamp": "2026-01-01T00:00:00.000000Z",
        "level": "info",
        "event": "Vote recorded",
        "service": "parliament-session",
        "correlation_id": "uuid",
        "component": "vote_ledger",
        ...additional context
    }

Usage:
    from src.infrastructure.observability import configure_structlog

    configure_structlog(environment="production")
"""

import logging
import os
from typing import Any, cast

import structlog
from structlog.typing import Processor

from src.infrastructure.observability.correlation import correlation_id_processor

# Environment variable for log level (default: INFO)
LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"

SERVICE_NAME_ENV = "SERVICE_NAME"
DEFAULT_SERVICE_NAME = "parliament-session"

# Keys whose values never reach a log sink
REDACTED_KEYS = frozenset({"password", "passwordHash", "password_hash", "secret"})
REDACTED_VALUE = "***"


def _get_log_level() -> int:
    """Get the configured log level from environment.

    Returns:
        The logging level integer (e.g., logging.INFO).
    """
    level_name = os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
    return getattr(logging, level_name, logging.INFO)


def redact_credentials(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor masking credential fields."""
    for key in REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = REDACTED_VALUE
    return event_dict


def _service_name_processor(service_name: str) -> Processor:
    def add_service(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict

    return cast(Processor, add_service)


def configure_structlog(environment: str = "production") -> None:
    """Configure structlog for the application.

    Should be called once at startup, before the first log call.

    Args:
        environment: 'production' for JSON output, anything else for
            console output. Defaults to 'production'.
    """
    service_name = os.getenv(SERVICE_NAME_ENV, DEFAULT_SERVICE_NAME)
    shared_processors: list[Processor] = [
        # Merge context from contextvars (async support)
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        cast(Processor, correlation_id_processor),
        _service_name_processor(service_name),
        cast(Processor, redact_credentials),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if environment == "production":
        final_processor: Processor = structlog.processors.JSONRenderer()
    else:
        final_processor = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [final_processor],
        wrapper_class=structlog.make_filtering_bound_logger(_get_log_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
