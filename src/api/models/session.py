"""Session API request/response models.

JSON field names are camelCase on the wire (``seatStatus``,
``proposalVisual``, ...) to match the event payloads; Python attributes
stay snake_case and requests accept either form.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from src.domain.models.chamber import Fine, SystemParameters
from src.domain.models.member import Member
from src.domain.models.proposal import Proposal
from src.domain.models.tally import TallyReport
from src.domain.models.vote import Vote, VotingLogEntry

# ISO 8601 with Z suffix
DateTimeWithZ = Annotated[
    datetime,
    PlainSerializer(
        lambda v: v.isoformat().replace("+00:00", "Z") if v else None, return_type=str
    ),
]


class SessionModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Members
# =============================================================================


class CredentialsRequest(SessionModel):
    """Username and password for register and login."""

    username: str = Field(..., description="Unique login name")
    password: str = Field(..., description="Plain-text password")


class MemberResponse(SessionModel):
    """Public member record; credential fields are never included."""

    id: str
    username: str
    role: str
    party_affiliation: str
    electoral_strength: int
    present: bool
    seat_status: str
    fines: int
    status_changed_at: DateTimeWithZ | None = None
    registered_at: DateTimeWithZ

    @classmethod
    def from_member(cls, member: Member) -> MemberResponse:
        return cls(
            id=member.id,
            username=member.username,
            role=member.role.value,
            party_affiliation=member.party_affiliation,
            electoral_strength=member.electoral_strength,
            present=member.present,
            seat_status=member.seat_status.value,
            fines=member.fines,
            status_changed_at=member.status_changed_at,
            registered_at=member.registered_at,
        )


class MemberUpdateItem(SessionModel):
    """One row of a bulk member edit; omitted fields are unchanged."""

    member_id: str
    electoral_strength: int | None = None
    party_affiliation: str | None = None
    role: str | None = None


class MemberUpdateRequest(SessionModel):
    updates: list[MemberUpdateItem] = Field(..., min_length=1)


class MemberListResponse(SessionModel):
    members: list[MemberResponse]


# =============================================================================
# Seats
# =============================================================================


class SeatStatusRequest(SessionModel):
    """Seat status change; ``memberId`` defaults to the caller."""

    status: str = Field(..., description="NEUTRAL, REQUESTING_TO_SPEAK, SPEAKING or OBJECTING")
    member_id: str | None = Field(default=None, description="Target member id")


class EndSessionResponse(SessionModel):
    members_reset: int


# =============================================================================
# Proposals
# =============================================================================


class ProposalCreateRequest(SessionModel):
    title: str
    party: str | None = None
    is_priority: bool = False
    association_type: str | None = Field(
        default=None, description="none, additive or countering"
    )
    referenced_proposal: str | None = Field(
        default=None, description="Display label of the associated proposal"
    )


class ProposalUpdateRequest(SessionModel):
    title: str | None = None
    party: str | None = None


class ProposalResponse(SessionModel):
    id: str
    title: str
    proposal_number: int
    meeting_number: int
    party: str
    is_priority: bool
    association_type: str
    referenced_proposal: str
    proposal_visual: str
    voting_ended: bool
    passed: bool
    total_for: int
    total_against: int
    supporters_count: int
    created_at: DateTimeWithZ

    @classmethod
    def from_proposal(cls, proposal: Proposal) -> ProposalResponse:
        return cls(
            id=proposal.id,
            title=proposal.title,
            proposal_number=proposal.proposal_number,
            meeting_number=proposal.meeting_number,
            party=proposal.party,
            is_priority=proposal.is_priority,
            association_type=proposal.association_type.value,
            referenced_proposal=proposal.referenced_proposal,
            proposal_visual=proposal.proposal_visual,
            voting_ended=proposal.voting_ended,
            passed=proposal.passed,
            total_for=proposal.total_for,
            total_against=proposal.total_against,
            supporters_count=proposal.supporters_count,
            created_at=proposal.created_at,
        )


class ProposalListResponse(SessionModel):
    proposals: list[ProposalResponse]


# =============================================================================
# Votes
# =============================================================================


class VoteRequest(SessionModel):
    vote: str = Field(..., description="For, Against or Abstain")


class VoteResponse(SessionModel):
    proposal_id: str
    voter_id: str
    username: str
    vote: str
    electoral_strength: int
    timestamp: DateTimeWithZ

    @classmethod
    def from_vote(cls, vote: Vote) -> VoteResponse:
        return cls(
            proposal_id=vote.proposal_id,
            voter_id=vote.voter_id,
            username=vote.voter_username,
            vote=vote.choice.value,
            electoral_strength=vote.electoral_strength,
            timestamp=vote.cast_at,
        )


class VoteListResponse(SessionModel):
    votes: list[VoteResponse]


class LoggedVoteResponse(SessionModel):
    voter_id: str
    username: str
    vote: str
    electoral_strength: int = Field(..., description="Adjusted strength counted")
    timestamp: DateTimeWithZ


class VotingLogResponse(SessionModel):
    proposal_id: str
    title: str
    meeting_number: int
    votes: list[LoggedVoteResponse]
    timestamp: DateTimeWithZ

    @classmethod
    def from_entry(cls, entry: VotingLogEntry) -> VotingLogResponse:
        return cls(
            proposal_id=entry.proposal_id,
            title=entry.title,
            meeting_number=entry.meeting_number,
            votes=[
                LoggedVoteResponse(
                    voter_id=vote.voter_id,
                    username=vote.username,
                    vote=vote.choice.value,
                    electoral_strength=vote.adjusted_strength,
                    timestamp=vote.cast_at,
                )
                for vote in entry.votes
            ],
            timestamp=entry.logged_at,
        )


# =============================================================================
# Tally
# =============================================================================


class VerdictResponse(SessionModel):
    id: str
    proposal_visual: str
    title: str
    passed: bool
    total_for: int
    total_against: int
    supporters_count: int


class GroupResponse(SessionModel):
    affiliation: str
    sum_present: int
    sum_absent: int
    adjusted_total: int
    lost_weight: int
    exempt: bool


class TallyReportResponse(SessionModel):
    meeting_number: int
    next_meeting_number: int
    results: list[VerdictResponse]
    groups: list[GroupResponse]
    completed_at: DateTimeWithZ

    @classmethod
    def from_report(cls, report: TallyReport) -> TallyReportResponse:
        return cls(
            meeting_number=report.meeting_number,
            next_meeting_number=report.next_meeting_number,
            results=[
                VerdictResponse(
                    id=verdict.proposal_id,
                    proposal_visual=verdict.proposal_visual,
                    title=verdict.title,
                    passed=verdict.passed,
                    total_for=verdict.total_for,
                    total_against=verdict.total_against,
                    supporters_count=verdict.supporters_count,
                )
                for verdict in report.verdicts
            ],
            groups=[
                GroupResponse(
                    affiliation=group.affiliation,
                    sum_present=group.sum_present,
                    sum_absent=group.sum_absent,
                    adjusted_total=group.adjusted_total,
                    lost_weight=group.lost_weight,
                    exempt=group.exempt,
                )
                for group in report.redistribution.groups
            ],
            completed_at=report.completed_at,
        )


# =============================================================================
# Chamber
# =============================================================================


class SystemParametersResponse(SessionModel):
    break_active: bool
    meeting_number: int

    @classmethod
    def from_parameters(cls, parameters: SystemParameters) -> SystemParametersResponse:
        return cls(
            break_active=parameters.break_active,
            meeting_number=parameters.meeting_number,
        )


class FineRequest(SessionModel):
    username: str
    amount: int
    reason: str


class FineResponse(SessionModel):
    id: str
    username: str
    amount: int
    reason: str
    issued_by: str
    status: str
    timestamp: DateTimeWithZ

    @classmethod
    def from_fine(cls, fine: Fine) -> FineResponse:
        return cls(
            id=fine.id,
            username=fine.username,
            amount=fine.amount,
            reason=fine.reason,
            issued_by=fine.issued_by,
            status=fine.status,
            timestamp=fine.issued_at,
        )


class FineListResponse(SessionModel):
    fines: list[FineResponse]
