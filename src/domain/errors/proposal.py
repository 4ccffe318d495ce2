"""Proposal sequencing and vote ledger errors."""

from __future__ import annotations

from typing import Any

from src.domain.errors.common import ConflictError, NotFoundError


class ProposalNotFoundError(NotFoundError):
    """Raised when no proposal matches the given id."""

    problem_type = "proposal:not-found"
    title = "Proposal Not Found"

    def __init__(self, proposal_id: str) -> None:
        self.proposal_id = proposal_id
        super().__init__(f"Proposal '{proposal_id}' not found")

    def problem_extensions(self) -> dict[str, Any]:
        return {"proposal_id": self.proposal_id}


class VotingClosedError(ConflictError):
    """Raised when voting on, or editing, a proposal whose voting has ended.

    Voting end is irreversible; the vote set used by the tally is frozen.
    """

    problem_type = "proposal:voting-closed"
    title = "Voting Closed"

    def __init__(self, proposal_id: str) -> None:
        self.proposal_id = proposal_id
        super().__init__(f"Voting on proposal '{proposal_id}' has ended")

    def problem_extensions(self) -> dict[str, Any]:
        return {"proposal_id": self.proposal_id}
