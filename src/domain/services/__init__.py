"""Pure domain services (no I/O)."""

from src.domain.services.redistribution import (
    DEFAULT_EXEMPT_AFFILIATION,
    DEFAULT_INDEPENDENT_LABEL,
    DEFAULT_MIN_SUPPORTERS,
    adjusted_strength,
    compute_adjusted_strengths,
    count_ballots,
    proposal_passes,
    round_half_up,
)

__all__: list[str] = [
    "DEFAULT_EXEMPT_AFFILIATION",
    "DEFAULT_INDEPENDENT_LABEL",
    "DEFAULT_MIN_SUPPORTERS",
    "adjusted_strength",
    "compute_adjusted_strengths",
    "count_ballots",
    "proposal_passes",
    "round_half_up",
]
