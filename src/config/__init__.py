"""Configuration module for the parliament session service.

Available Configurations:
- SessionConfig: Pass rule, redistribution labels, fan-out sizing
"""

from src.config.session_config import (
    DEFAULT_SESSION_CONFIG,
    TEST_SESSION_CONFIG,
    SessionConfig,
)

__all__ = [
    "SessionConfig",
    "DEFAULT_SESSION_CONFIG",
    "TEST_SESSION_CONFIG",
]
