"""Redistribution and tally result models.

These are derived per end-voting run and never persisted on members.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class GroupRedistribution:
    """Redistribution outcome for one affiliation group.

    Attributes:
        affiliation: Group label (blank coerced to the independent label).
        sum_present: Total base strength of present members.
        sum_absent: Total base strength of absent members.
        adjusted_total: Sum of adjusted strengths handed to present members.
        exempt: True for the exempt group, which neither donates nor receives.
    """

    affiliation: str
    sum_present: int
    sum_absent: int
    adjusted_total: int
    exempt: bool = False

    @property
    def lost_weight(self) -> int:
        """Absent weight that could not be redistributed (no one present)."""
        if self.exempt or self.sum_present > 0:
            return 0
        return self.sum_absent

    @property
    def rounding_remainder(self) -> int:
        """Adjusted total minus the weight it should conserve."""
        if self.exempt or self.sum_present == 0:
            return 0
        return self.adjusted_total - (self.sum_present + self.sum_absent)

    def to_dict(self) -> dict[str, Any]:
        return {
            "affiliation": self.affiliation,
            "sumPresent": self.sum_present,
            "sumAbsent": self.sum_absent,
            "adjustedTotal": self.adjusted_total,
            "lostWeight": self.lost_weight,
            "exempt": self.exempt,
        }


@dataclass(frozen=True)
class RedistributionResult:
    """Adjusted strengths for every present member.

    Attributes:
        adjusted_strengths: member id -> adjusted strength. Absent members
            are not listed and count as 0.
        groups: Per-group breakdown, sorted by affiliation label.
    """

    adjusted_strengths: Mapping[str, int]
    groups: tuple[GroupRedistribution, ...] = ()

    def strength_of(self, member_id: str) -> int:
        return self.adjusted_strengths.get(member_id, 0)

    @property
    def anomalies(self) -> tuple[GroupRedistribution, ...]:
        """Groups whose absent weight was lost."""
        return tuple(group for group in self.groups if group.lost_weight > 0)


@dataclass(frozen=True)
class BallotCount:
    """Aggregated ballots of one proposal."""

    total_for: int
    total_against: int
    supporters_count: int
    passed: bool


@dataclass(frozen=True)
class ProposalVerdict:
    """Result of tallying a single proposal."""

    proposal_id: str
    proposal_visual: str
    title: str
    passed: bool
    total_for: int
    total_against: int
    supporters_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.proposal_id,
            "proposalVisual": self.proposal_visual,
            "title": self.title,
            "passed": self.passed,
            "totalFor": self.total_for,
            "totalAgainst": self.total_against,
            "supportersCount": self.supporters_count,
        }


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TallyReport:
    """Outcome of a completed end-voting run.

    Attributes:
        meeting_number: Meeting that was closed.
        next_meeting_number: Meeting number after the advance.
        verdicts: One verdict per proposal tallied in this run.
        redistribution: Adjusted strengths used for the run.
        completed_at: Completion time.
    """

    meeting_number: int
    next_meeting_number: int
    verdicts: tuple[ProposalVerdict, ...]
    redistribution: RedistributionResult
    completed_at: datetime = field(default_factory=_utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "meetingNumber": self.meeting_number,
            "nextMeetingNumber": self.next_meeting_number,
            "results": [verdict.to_dict() for verdict in self.verdicts],
            "groups": [group.to_dict() for group in self.redistribution.groups],
            "completedAt": self.completed_at.isoformat(),
        }
