"""Vote ledger models.

Exactly one Vote exists per (proposal, voter). A member who never voted
is treated as Abstain at tally time; no record is ever written for them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from src.domain.errors import SessionValidationError


class VoteChoice(str, Enum):
    """Ballot choices."""

    FOR = "For"
    AGAINST = "Against"
    ABSTAIN = "Abstain"

    @classmethod
    def parse(cls, value: str) -> VoteChoice:
        """Parse a choice case-insensitively.

        Raises:
            SessionValidationError: If the value is not For, Against or Abstain.
        """
        if isinstance(value, str):
            for choice in cls:
                if choice.value.lower() == value.strip().lower():
                    return choice
        raise SessionValidationError(f"Invalid vote choice '{value}'", field="vote")


def vote_document_id(proposal_id: str, voter_id: str) -> str:
    """Deterministic document id enforcing one vote per (proposal, voter)."""
    return f"{proposal_id}:{voter_id}"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Vote:
    """A single ballot on an open proposal.

    Attributes:
        proposal_id: Proposal voted on.
        voter_id: Member who voted.
        voter_username: Username at cast time, for the audit log.
        choice: For, Against or Abstain.
        electoral_strength: Voter's base strength at cast time.
        cast_at: Time of the latest submission.
    """

    proposal_id: str
    voter_id: str
    voter_username: str
    choice: VoteChoice
    electoral_strength: int
    cast_at: datetime = field(default_factory=_utc_now)

    @property
    def id(self) -> str:
        return vote_document_id(self.proposal_id, self.voter_id)

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "proposalId": self.proposal_id,
            "voterId": self.voter_id,
            "username": self.voter_username,
            "vote": self.choice.value,
            "electoralStrength": self.electoral_strength,
            "timestamp": self.cast_at.isoformat(),
        }

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> Vote:
        return cls(
            proposal_id=document["proposalId"],
            voter_id=document["voterId"],
            voter_username=document.get("username", ""),
            choice=VoteChoice.parse(document["vote"]),
            electoral_strength=int(document.get("electoralStrength", 0)),
            cast_at=datetime.fromisoformat(document["timestamp"]),
        )


@dataclass(frozen=True)
class LoggedVote:
    """A vote as it was counted, with the redistribution-adjusted strength."""

    voter_id: str
    username: str
    choice: VoteChoice
    adjusted_strength: int
    cast_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "voterId": self.voter_id,
            "username": self.username,
            "vote": self.choice.value,
            "electoralStrength": self.adjusted_strength,
            "timestamp": self.cast_at.isoformat(),
        }


@dataclass(frozen=True)
class VotingLogEntry:
    """Write-once audit snapshot of a closed proposal's ballots.

    The log id equals the proposal id, so a retried tally cannot write a
    second entry for the same proposal.
    """

    proposal_id: str
    title: str
    meeting_number: int
    votes: tuple[LoggedVote, ...]
    logged_at: datetime = field(default_factory=_utc_now)

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.proposal_id,
            "proposalId": self.proposal_id,
            "title": self.title,
            "meetingNumber": self.meeting_number,
            "votes": [vote.to_dict() for vote in self.votes],
            "timestamp": self.logged_at.isoformat(),
        }

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> VotingLogEntry:
        return cls(
            proposal_id=document["proposalId"],
            title=document.get("title", ""),
            meeting_number=int(document["meetingNumber"]),
            votes=tuple(
                LoggedVote(
                    voter_id=item["voterId"],
                    username=item.get("username", ""),
                    choice=VoteChoice.parse(item["vote"]),
                    adjusted_strength=int(item["electoralStrength"]),
                    cast_at=datetime.fromisoformat(item["timestamp"]),
                )
                for item in document.get("votes", [])
            ),
            logged_at=datetime.fromisoformat(document["timestamp"]),
        )
