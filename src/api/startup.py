"""Startup and shutdown hooks for the parliament session API.

This module provides the hooks run by the application lifespan:
1. Load .env and configure structured logging
2. Create the store schema and default system parameters
3. Dispose of the database engine on shutdown

Usage standalone:
    configure_logging()
    await initialize_session()
    ...
    await shutdown_session()
"""

import os

from dotenv import load_dotenv
from structlog import get_logger

from src.bootstrap.database import close_database_engine
from src.bootstrap.logging import configure_structlog
from src.bootstrap.session import get_session_config, initialize_session_store

# Environment variable for environment detection
ENVIRONMENT_VAR = "ENVIRONMENT"
DEFAULT_ENVIRONMENT = "development"

logger = get_logger()


def configure_logging() -> None:
    """Configure structured logging for the application.

    Reads ENVIRONMENT after loading .env:
    - production: JSON output for log aggregation
    - anything else: console output for development
    """
    load_dotenv()
    environment = os.environ.get(ENVIRONMENT_VAR, DEFAULT_ENVIRONMENT)
    configure_structlog(environment)
    logger.info("logging_configured", environment=environment)


async def initialize_session() -> None:
    """Prepare the document store before serving requests.

    Raises:
        StoreError: The store could not be initialized. Startup fails
            rather than serving against a store without parameters.
    """
    config = get_session_config()
    logger.info(
        "session_startup",
        min_supporters=config.min_supporters,
        exempt_affiliation=config.exempt_affiliation,
        webhook_configured=config.tally_webhook_url is not None,
    )
    await initialize_session_store()
    logger.info("session_store_ready")


async def shutdown_session() -> None:
    """Release database connections."""
    await close_database_engine()
    logger.info("session_shutdown_complete")
