"""Application services - Use case orchestration.

This module contains application services that orchestrate domain
operations and coordinate with infrastructure adapters.

Available services:
- MemberService: Registration, login/logout and chair member edits
- SeatRegistryService: Seat joins, status changes, speaking queue
- ProposalSequencerService: Proposal numbering and lifecycle
- VoteLedgerService: Ballot submission and voting logs
- TallyService: Redistribution tally and meeting advance
- ChamberService: Breaks and fines
- SystemParametersService: Break flag and meeting number
"""

from src.application.services.chamber_service import ChamberService
from src.application.services.member_service import MemberService
from src.application.services.proposal_sequencer_service import (
    ProposalSequencerService,
)
from src.application.services.seat_registry_service import (
    SeatRegistryService,
    check_seat_authority,
)
from src.application.services.system_parameters_service import (
    SystemParametersService,
)
from src.application.services.tally_service import (
    TALLY_OUTCOME_COMPLETED,
    TALLY_OUTCOME_INCOMPLETE,
    TallyService,
)
from src.application.services.vote_ledger_service import VoteLedgerService

__all__: list[str] = [
    "ChamberService",
    "MemberService",
    "ProposalSequencerService",
    "SeatRegistryService",
    "SystemParametersService",
    "TALLY_OUTCOME_COMPLETED",
    "TALLY_OUTCOME_INCOMPLETE",
    "TallyService",
    "VoteLedgerService",
    "check_seat_authority",
]
