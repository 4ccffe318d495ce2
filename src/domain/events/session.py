"""Session events pushed to connected observers.

Field names inside the payloads are a contract with clients:

    {"type": "seatUpdate", "user": {"id", "username", "seatStatus", "present", ...}}
    {"type": "proposalUpdate", "proposal": {"id", "proposalNumber", "proposalVisual", ...}}

Events are immutable and carry no credential fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any
from uuid import uuid4

from src.domain.models.chamber import Fine
from src.domain.models.member import Member
from src.domain.models.proposal import Proposal
from src.domain.models.tally import TallyReport

SEAT_UPDATE_EVENT_TYPE = "seatUpdate"
PROPOSAL_UPDATE_EVENT_TYPE = "proposalUpdate"
PROPOSAL_DELETED_EVENT_TYPE = "proposalDeleted"
FINE_IMPOSED_EVENT_TYPE = "fineImposed"
BREAK_EVENT_TYPE = "break"
END_BREAK_EVENT_TYPE = "endBreak"
END_SESSION_EVENT_TYPE = "endSession"
VOTING_ENDED_EVENT_TYPE = "votingEnded"

SESSION_EVENT_TYPES: frozenset[str] = frozenset(
    {
        SEAT_UPDATE_EVENT_TYPE,
        PROPOSAL_UPDATE_EVENT_TYPE,
        PROPOSAL_DELETED_EVENT_TYPE,
        FINE_IMPOSED_EVENT_TYPE,
        BREAK_EVENT_TYPE,
        END_BREAK_EVENT_TYPE,
        END_SESSION_EVENT_TYPE,
        VOTING_ENDED_EVENT_TYPE,
    }
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SessionEvent:
    """A state change to fan out to observers.

    Attributes:
        event_type: One of SESSION_EVENT_TYPES.
        payload: Read-only event body (merged into the wire message).
        event_id: Unique id, used as the SSE event id.
        occurred_at: Creation time.
    """

    event_type: str
    payload: MappingProxyType[str, Any]
    event_id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        if self.event_type not in SESSION_EVENT_TYPES:
            raise ValueError(f"Unknown session event type '{self.event_type}'")

    @classmethod
    def create(cls, event_type: str, payload: dict[str, Any]) -> SessionEvent:
        return cls(event_type=event_type, payload=MappingProxyType(dict(payload)))

    def to_message(self) -> dict[str, Any]:
        """Wire shape: the payload with the event type under "type"."""
        message: dict[str, Any] = {"type": self.event_type}
        message.update(self.payload)
        return message


def seat_update_payload(member: Member) -> dict[str, Any]:
    return {"user": member.to_public_dict()}


def proposal_update_payload(proposal: Proposal) -> dict[str, Any]:
    return {"proposal": proposal.to_document()}


def proposal_deleted_payload(proposal: Proposal) -> dict[str, Any]:
    return {
        "proposal": {
            "id": proposal.id,
            "proposalNumber": proposal.proposal_number,
            "proposalVisual": proposal.proposal_visual,
        }
    }


def fine_imposed_payload(fine: Fine) -> dict[str, Any]:
    return {"username": fine.username, "amount": fine.amount, "reason": fine.reason}


def voting_ended_payload(report: TallyReport) -> dict[str, Any]:
    return {
        "meetingNumber": report.meeting_number,
        "nextMeetingNumber": report.next_meeting_number,
        "results": [verdict.to_dict() for verdict in report.verdicts],
    }
