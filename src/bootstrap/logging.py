"""Bootstrap wiring for logging configuration."""

from __future__ import annotations

import os

from src.infrastructure.observability import configure_structlog as _configure_structlog

ENVIRONMENT_ENV = "ENVIRONMENT"
DEFAULT_ENVIRONMENT = "development"


def configure_structlog(environment: str | None = None) -> None:
    """Configure structlog; ENVIRONMENT decides when no value is passed."""
    _configure_structlog(
        environment=environment or os.environ.get(ENVIRONMENT_ENV, DEFAULT_ENVIRONMENT)
    )


__all__ = ["configure_structlog"]
