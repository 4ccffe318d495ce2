"""Session rule and fan-out configuration.

This module defines the tunable parameters of the session core with
environment variable overrides, following the same clamp-to-range
pattern for every integer setting.

Environment Variables:
- EXEMPT_AFFILIATION: Affiliation that keeps base strength (default: NEZ)
- INDEPENDENT_LABEL: Label for blank affiliations (default: Independent)
- MIN_SUPPORTERS: For ballots required to pass (default: 2, min: 1, max: 10)
- DEFAULT_ELECTORAL_STRENGTH: Strength given at registration (default: 1, min: 0, max: 1000)
- BROADCAST_QUEUE_SIZE: Buffered events per observer (default: 100, min: 1, max: 10000)
- SEAT_UPDATE_MAX_ATTEMPTS: Compare-and-set attempts per seat change (default: 3, min: 1, max: 10)
- TALLY_WEBHOOK_URL: Outbound tally summary webhook (default: unset, disabled)
- TALLY_WEBHOOK_SECRET: HMAC secret for webhook signatures (default: unset)
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from src.domain.models.member import DEFAULT_ELECTORAL_STRENGTH
from src.domain.services.redistribution import (
    DEFAULT_EXEMPT_AFFILIATION,
    DEFAULT_INDEPENDENT_LABEL,
    DEFAULT_MIN_SUPPORTERS,
)


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


# =============================================================================
# Pass rule
# =============================================================================

MIN_SUPPORTERS_FLOOR = 1
MAX_SUPPORTERS_CEILING = 10

# =============================================================================
# Members
# =============================================================================

MAX_DEFAULT_ELECTORAL_STRENGTH = 1000

# =============================================================================
# Fan-out and concurrency
# =============================================================================

DEFAULT_BROADCAST_QUEUE_SIZE = 100
MIN_BROADCAST_QUEUE_SIZE = 1
MAX_BROADCAST_QUEUE_SIZE = 10_000

DEFAULT_SEAT_UPDATE_MAX_ATTEMPTS = 3
MIN_SEAT_UPDATE_ATTEMPTS = 1
MAX_SEAT_UPDATE_ATTEMPTS = 10


@dataclass(frozen=True)
class SessionConfig:
    """Configuration for the session core.

    Attributes:
        exempt_affiliation: Group whose members neither donate nor receive
            redistributed weight.
        independent_label: Label given to members with a blank affiliation.
        min_supporters: Minimum For ballots, by head count, to pass.
        default_electoral_strength: Base strength assigned at registration.
        broadcast_queue_size: Events buffered per observer before dropping.
        seat_update_max_attempts: Compare-and-set attempts for seat changes.
        tally_webhook_url: Outbound summary webhook, None when disabled.
        tally_webhook_secret: HMAC secret for webhook signatures.
    """

    exempt_affiliation: str = DEFAULT_EXEMPT_AFFILIATION
    independent_label: str = DEFAULT_INDEPENDENT_LABEL
    min_supporters: int = DEFAULT_MIN_SUPPORTERS
    default_electoral_strength: int = DEFAULT_ELECTORAL_STRENGTH
    broadcast_queue_size: int = DEFAULT_BROADCAST_QUEUE_SIZE
    seat_update_max_attempts: int = DEFAULT_SEAT_UPDATE_MAX_ATTEMPTS
    tally_webhook_url: str | None = None
    tally_webhook_secret: str | None = None

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.exempt_affiliation.strip():
            raise ValueError("exempt_affiliation must not be blank")
        if not self.independent_label.strip():
            raise ValueError("independent_label must not be blank")
        if self.exempt_affiliation == self.independent_label:
            raise ValueError("exempt_affiliation and independent_label must differ")
        if not MIN_SUPPORTERS_FLOOR <= self.min_supporters <= MAX_SUPPORTERS_CEILING:
            raise ValueError(
                f"min_supporters must be between {MIN_SUPPORTERS_FLOOR} "
                f"and {MAX_SUPPORTERS_CEILING}, got {self.min_supporters}"
            )
        if not 0 <= self.default_electoral_strength <= MAX_DEFAULT_ELECTORAL_STRENGTH:
            raise ValueError(
                f"default_electoral_strength must be between 0 and "
                f"{MAX_DEFAULT_ELECTORAL_STRENGTH}, got {self.default_electoral_strength}"
            )
        if not (
            MIN_BROADCAST_QUEUE_SIZE
            <= self.broadcast_queue_size
            <= MAX_BROADCAST_QUEUE_SIZE
        ):
            raise ValueError(
                f"broadcast_queue_size must be between {MIN_BROADCAST_QUEUE_SIZE} "
                f"and {MAX_BROADCAST_QUEUE_SIZE}, got {self.broadcast_queue_size}"
            )
        if not (
            MIN_SEAT_UPDATE_ATTEMPTS
            <= self.seat_update_max_attempts
            <= MAX_SEAT_UPDATE_ATTEMPTS
        ):
            raise ValueError(
                f"seat_update_max_attempts must be between {MIN_SEAT_UPDATE_ATTEMPTS} "
                f"and {MAX_SEAT_UPDATE_ATTEMPTS}, got {self.seat_update_max_attempts}"
            )

    @classmethod
    def from_environment(cls) -> SessionConfig:
        """Create config from environment variables with defaults.

        Out-of-range integers are clamped rather than rejected.

        Returns:
            SessionConfig with values from environment or defaults.
        """
        min_supporters = _clamp(
            _get_int_env("MIN_SUPPORTERS", DEFAULT_MIN_SUPPORTERS),
            MIN_SUPPORTERS_FLOOR,
            MAX_SUPPORTERS_CEILING,
        )
        default_strength = _clamp(
            _get_int_env("DEFAULT_ELECTORAL_STRENGTH", DEFAULT_ELECTORAL_STRENGTH),
            0,
            MAX_DEFAULT_ELECTORAL_STRENGTH,
        )
        queue_size = _clamp(
            _get_int_env("BROADCAST_QUEUE_SIZE", DEFAULT_BROADCAST_QUEUE_SIZE),
            MIN_BROADCAST_QUEUE_SIZE,
            MAX_BROADCAST_QUEUE_SIZE,
        )
        max_attempts = _clamp(
            _get_int_env("SEAT_UPDATE_MAX_ATTEMPTS", DEFAULT_SEAT_UPDATE_MAX_ATTEMPTS),
            MIN_SEAT_UPDATE_ATTEMPTS,
            MAX_SEAT_UPDATE_ATTEMPTS,
        )
        webhook_url = os.environ.get("TALLY_WEBHOOK_URL", "").strip() or None
        webhook_secret = os.environ.get("TALLY_WEBHOOK_SECRET", "").strip() or None

        return cls(
            exempt_affiliation=os.environ.get(
                "EXEMPT_AFFILIATION", DEFAULT_EXEMPT_AFFILIATION
            ).strip()
            or DEFAULT_EXEMPT_AFFILIATION,
            independent_label=os.environ.get(
                "INDEPENDENT_LABEL", DEFAULT_INDEPENDENT_LABEL
            ).strip()
            or DEFAULT_INDEPENDENT_LABEL,
            min_supporters=min_supporters,
            default_electoral_strength=default_strength,
            broadcast_queue_size=queue_size,
            seat_update_max_attempts=max_attempts,
            tally_webhook_url=webhook_url,
            tally_webhook_secret=webhook_secret,
        )


# Default production config
DEFAULT_SESSION_CONFIG = SessionConfig()

# Testing config: tiny observer queues so drop behaviour is easy to exercise
TEST_SESSION_CONFIG = SessionConfig(broadcast_queue_size=2)
