"""Domain events for the parliament session service.

Session events represent state changes that observers are told about.
All events are immutable and timestamped.
"""

from src.domain.events.session import (
    BREAK_EVENT_TYPE,
    END_BREAK_EVENT_TYPE,
    END_SESSION_EVENT_TYPE,
    FINE_IMPOSED_EVENT_TYPE,
    PROPOSAL_DELETED_EVENT_TYPE,
    PROPOSAL_UPDATE_EVENT_TYPE,
    SEAT_UPDATE_EVENT_TYPE,
    SESSION_EVENT_TYPES,
    VOTING_ENDED_EVENT_TYPE,
    SessionEvent,
)

__all__: list[str] = [
    "BREAK_EVENT_TYPE",
    "END_BREAK_EVENT_TYPE",
    "END_SESSION_EVENT_TYPE",
    "FINE_IMPOSED_EVENT_TYPE",
    "PROPOSAL_DELETED_EVENT_TYPE",
    "PROPOSAL_UPDATE_EVENT_TYPE",
    "SEAT_UPDATE_EVENT_TYPE",
    "SESSION_EVENT_TYPES",
    "VOTING_ENDED_EVENT_TYPE",
    "SessionEvent",
]
