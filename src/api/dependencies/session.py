"""Session service dependencies.

Thin wrappers over the bootstrap singletons so routes can be tested
with ``app.dependency_overrides``.
"""

from src.application.services.chamber_service import ChamberService
from src.application.services.member_service import MemberService
from src.application.services.proposal_sequencer_service import (
    ProposalSequencerService,
)
from src.application.services.seat_registry_service import SeatRegistryService
from src.application.services.tally_service import TallyService
from src.application.services.vote_ledger_service import VoteLedgerService
from src.bootstrap import session as session_bootstrap
from src.infrastructure.adapters.broadcast.sse_broadcaster import SSEBroadcaster


def get_member_service() -> MemberService:
    return session_bootstrap.get_member_service()


def get_seat_registry_service() -> SeatRegistryService:
    return session_bootstrap.get_seat_registry_service()


def get_proposal_sequencer_service() -> ProposalSequencerService:
    return session_bootstrap.get_proposal_sequencer_service()


def get_vote_ledger_service() -> VoteLedgerService:
    return session_bootstrap.get_vote_ledger_service()


def get_tally_service() -> TallyService:
    return session_bootstrap.get_tally_service()


def get_chamber_service() -> ChamberService:
    return session_bootstrap.get_chamber_service()


def get_sse_broadcaster() -> SSEBroadcaster:
    return session_bootstrap.get_sse_broadcaster()
