"""Chamber-wide state: system parameters and fine records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

# Document ids of the two scalar parameters in the systemParameters collection
BREAK_STATUS_PARAMETER = "breakStatus"
MEETING_NUMBER_PARAMETER = "meetingNumber"

FIRST_MEETING_NUMBER = 1


@dataclass(frozen=True)
class SystemParameters:
    """Explicit snapshot of the chamber's scalar parameters.

    Attributes:
        break_active: Whether the chair has called a break.
        meeting_number: Current meeting, starting at 1 and advanced
            exactly once per completed end-voting cycle.
    """

    break_active: bool = False
    meeting_number: int = FIRST_MEETING_NUMBER

    def to_dict(self) -> dict[str, Any]:
        return {"breakActive": self.break_active, "meetingNumber": self.meeting_number}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Fine:
    """A fine imposed by the chair.

    Attributes:
        id: Fine identifier.
        username: Fined member.
        amount: Positive amount added to the member's total.
        reason: Non-empty reason.
        issued_by: Username of the chair who imposed it.
        status: Record status, "active" when issued.
        issued_at: Time of imposition.
    """

    id: str
    username: str
    amount: int
    reason: str
    issued_by: str
    status: str = "active"
    issued_at: datetime = field(default_factory=_utc_now)

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "amount": self.amount,
            "reason": self.reason,
            "issuedBy": self.issued_by,
            "status": self.status,
            "timestamp": self.issued_at.isoformat(),
        }

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> Fine:
        return cls(
            id=document["id"],
            username=document["username"],
            amount=int(document["amount"]),
            reason=document["reason"],
            issued_by=document.get("issuedBy", ""),
            status=document.get("status", "active"),
            issued_at=datetime.fromisoformat(document["timestamp"]),
        )
