"""Correlation ID propagation through a request.

The id is kept in a ContextVar so it survives ``await`` boundaries
inside one request. LoggingMiddleware sets it from the X-Correlation-ID
header (or a fresh UUID4) and echoes it back in the response;
``correlation_id_processor`` stamps it on every log entry.
"""

from contextvars import ContextVar
from typing import Any
from uuid import uuid4

# Empty string means "outside a request"
_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def generate_correlation_id() -> str:
    return str(uuid4())


def get_correlation_id() -> str:
    """Current correlation id, or an empty string outside a request."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    _correlation_id.set(correlation_id)


def correlation_id_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor adding ``correlation_id`` when one is set.

    Args:
        logger: The logger instance (unused, required by structlog).
        method_name: The logging method name (unused, required by structlog).
        event_dict: The event dictionary to modify.

    Returns:
        The event dictionary with correlation_id added.
    """
    correlation_id = get_correlation_id()
    if correlation_id:
        event_dict["correlation_id"] = correlation_id
    return event_dict
