"""Operational metrics port for the session services."""

from __future__ import annotations

from typing import Protocol


class SessionMetricsProtocol(Protocol):
    """Protocol for recording session counters."""

    def record_vote_submitted(self, choice: str) -> None:
        """Count an accepted vote submission."""
        ...

    def record_proposal_created(self, is_priority: bool) -> None:
        """Count a created proposal."""
        ...

    def record_tally_run(
        self, outcome: str, proposals_closed: int, meeting_number: int
    ) -> None:
        """Record an end-voting run.

        Args:
            outcome: "completed" or "incomplete".
            proposals_closed: Proposals tallied by this run.
            meeting_number: Current meeting number after the run.
        """
        ...
