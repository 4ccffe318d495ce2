"""Domain models for the parliament session service."""

from src.domain.models.chamber import (
    BREAK_STATUS_PARAMETER,
    FIRST_MEETING_NUMBER,
    MEETING_NUMBER_PARAMETER,
    Fine,
    SystemParameters,
)
from src.domain.models.member import (
    DEFAULT_ELECTORAL_STRENGTH,
    Member,
    MemberRole,
    SeatStatus,
)
from src.domain.models.proposal import (
    AssociationType,
    Proposal,
    counter_key,
    render_label,
)
from src.domain.models.tally import (
    BallotCount,
    GroupRedistribution,
    ProposalVerdict,
    RedistributionResult,
    TallyReport,
)
from src.domain.models.vote import (
    LoggedVote,
    Vote,
    VoteChoice,
    VotingLogEntry,
    vote_document_id,
)

__all__: list[str] = [
    "AssociationType",
    "BallotCount",
    "BREAK_STATUS_PARAMETER",
    "DEFAULT_ELECTORAL_STRENGTH",
    "FIRST_MEETING_NUMBER",
    "Fine",
    "GroupRedistribution",
    "LoggedVote",
    "MEETING_NUMBER_PARAMETER",
    "Member",
    "MemberRole",
    "Proposal",
    "ProposalVerdict",
    "RedistributionResult",
    "SeatStatus",
    "SystemParameters",
    "TallyReport",
    "Vote",
    "VoteChoice",
    "VotingLogEntry",
    "counter_key",
    "render_label",
    "vote_document_id",
]
