"""Proposal domain model and display label rendering.

Proposals are numbered per priority class by an atomic counter. Once
``voting_ended`` flips to True it never flips back; the result fields
(``passed``, ``total_for``, ``total_against``) are meaningful only once
``tallied`` is True.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from src.domain.errors import SessionValidationError

# Affiliation label used when the chair does not name one
DEFAULT_PROPOSAL_PARTY = "Chair"

# Counter keys for the two independent numbering sequences
PRIORITY_COUNTER_KEY = "proposalNumber:priority"
NORMAL_COUNTER_KEY = "proposalNumber:normal"


class AssociationType(str, Enum):
    """How a proposal relates to an earlier one."""

    NONE = "none"
    ADDITIVE = "additive"
    COUNTERING = "countering"

    @classmethod
    def parse(cls, value: str | None) -> AssociationType:
        """Parse an association kind; blank and "normal" mean NONE.

        Raises:
            SessionValidationError: If the kind is unknown.
        """
        if value is None:
            return cls.NONE
        normalized = value.strip().lower()
        if normalized in ("", "normal"):
            return cls.NONE
        try:
            return cls(normalized)
        except ValueError:
            raise SessionValidationError(
                f"Invalid association type '{value}'", field="associationType"
            ) from None

    @property
    def separator(self) -> str:
        if self is AssociationType.ADDITIVE:
            return " → "
        if self is AssociationType.COUNTERING:
            return " x "
        return ""


def counter_key(is_priority: bool) -> str:
    """Counter key of the numbering sequence for a priority class."""
    return PRIORITY_COUNTER_KEY if is_priority else NORMAL_COUNTER_KEY


def render_label(
    is_priority: bool,
    number: int,
    association_type: AssociationType,
    associated_label: str = "",
) -> str:
    """Render the human-readable proposal label.

    Examples:
        render_label(True, 3, AssociationType.NONE)            -> "P3"
        render_label(False, 4, AssociationType.ADDITIVE, "P3") -> "4 → P3"
        render_label(False, 5, AssociationType.COUNTERING, "4") -> "5 x 4"
    """
    prefix = "P" if is_priority else ""
    return f"{prefix}{number}{association_type.separator}{associated_label}"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Proposal:
    """A proposal put to the vote by the chair.

    Attributes:
        id: Opaque proposal identifier.
        title: Non-empty title.
        proposal_number: Number within its priority class.
        party: Affiliation label of the proposer.
        is_priority: Priority class flag.
        association_type: Relation to the referenced proposal.
        referenced_proposal: Free-text label of the associated proposal.
        proposal_visual: Rendered display label.
        meeting_number: Meeting in which the proposal was created.
        voting_ended: Irreversible close flag.
        tallied: True once the result fields have been persisted.
        closed_in_meeting: Meeting whose end-voting run closed it.
        passed: Verdict.
        total_for: Weighted total of For votes.
        total_against: Weighted total of Against votes.
        supporters_count: Number of For votes, by head count.
        created_at: Creation time.
    """

    id: str
    title: str
    proposal_number: int
    meeting_number: int
    party: str = DEFAULT_PROPOSAL_PARTY
    is_priority: bool = False
    association_type: AssociationType = AssociationType.NONE
    referenced_proposal: str = ""
    proposal_visual: str = ""
    voting_ended: bool = False
    tallied: bool = False
    closed_in_meeting: int | None = None
    passed: bool = False
    total_for: int = 0
    total_against: int = 0
    supporters_count: int = 0
    created_at: datetime = field(default_factory=_utc_now)

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "proposalNumber": self.proposal_number,
            "meetingNumber": self.meeting_number,
            "party": self.party,
            "isPriority": self.is_priority,
            "associationType": self.association_type.value,
            "referencedProposal": self.referenced_proposal,
            "proposalVisual": self.proposal_visual,
            "votingEnded": self.voting_ended,
            "tallied": self.tallied,
            "closedInMeeting": self.closed_in_meeting,
            "passed": self.passed,
            "totalFor": self.total_for,
            "totalAgainst": self.total_against,
            "supportersCount": self.supporters_count,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> Proposal:
        created_at = document.get("createdAt")
        return cls(
            id=document["id"],
            title=document["title"],
            proposal_number=int(document["proposalNumber"]),
            meeting_number=int(document.get("meetingNumber", 1)),
            party=document.get("party", DEFAULT_PROPOSAL_PARTY),
            is_priority=bool(document.get("isPriority", False)),
            association_type=AssociationType.parse(document.get("associationType")),
            referenced_proposal=document.get("referencedProposal", ""),
            proposal_visual=document.get("proposalVisual", ""),
            voting_ended=bool(document.get("votingEnded", False)),
            tallied=bool(document.get("tallied", False)),
            closed_in_meeting=document.get("closedInMeeting"),
            passed=bool(document.get("passed", False)),
            total_for=int(document.get("totalFor", 0)),
            total_against=int(document.get("totalAgainst", 0)),
            supporters_count=int(document.get("supportersCount", 0)),
            created_at=(
                datetime.fromisoformat(created_at) if created_at else _utc_now()
            ),
        )
