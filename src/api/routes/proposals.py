"""Proposal routes.

Proposal numbers are allocated by the server; priority and normal
proposals are numbered independently and neither sequence resets
between meetings.
"""

from fastapi import APIRouter, Depends, Query, Request, status

from src.api.auth.member_auth import CurrentActor
from src.api.dependencies.session import get_proposal_sequencer_service
from src.api.errors import problem_exception
from src.api.models.session import (
    ProposalCreateRequest,
    ProposalListResponse,
    ProposalResponse,
    ProposalUpdateRequest,
)
from src.application.services.proposal_sequencer_service import (
    ProposalSequencerService,
)
from src.domain.exceptions import ParliamentError

router = APIRouter(prefix="/v1/proposals", tags=["proposals"])


@router.post(
    "",
    response_model=ProposalResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a proposal",
)
async def create_proposal(
    body: ProposalCreateRequest,
    actor: CurrentActor,
    request: Request,
    proposals: ProposalSequencerService = Depends(get_proposal_sequencer_service),
) -> ProposalResponse:
    try:
        proposal = await proposals.create_proposal(
            actor,
            title=body.title,
            party=body.party,
            is_priority=body.is_priority,
            association_type=body.association_type,
            referenced_proposal=body.referenced_proposal,
        )
    except ParliamentError as e:
        raise problem_exception(e, request) from None
    return ProposalResponse.from_proposal(proposal)


@router.get("", response_model=ProposalListResponse, summary="List proposals")
async def list_proposals(
    actor: CurrentActor,
    meeting: int | None = Query(
        default=None, ge=1, description="Only proposals of this meeting"
    ),
    proposals: ProposalSequencerService = Depends(get_proposal_sequencer_service),
) -> ProposalListResponse:
    listed = await proposals.list_proposals(meeting_number=meeting)
    return ProposalListResponse(
        proposals=[ProposalResponse.from_proposal(p) for p in listed]
    )


@router.get(
    "/by-number/{label}",
    response_model=ProposalResponse,
    summary="Get a proposal by its label",
)
async def get_proposal_by_label(
    label: str,
    actor: CurrentActor,
    request: Request,
    proposals: ProposalSequencerService = Depends(get_proposal_sequencer_service),
) -> ProposalResponse:
    """Resolve ``P3`` (priority) or ``12`` (normal) to the proposal."""
    try:
        proposal = await proposals.get_proposal_by_label(label)
    except ParliamentError as e:
        raise problem_exception(e, request) from None
    return ProposalResponse.from_proposal(proposal)


@router.get("/{proposal_id}", response_model=ProposalResponse, summary="Get a proposal")
async def get_proposal(
    proposal_id: str,
    actor: CurrentActor,
    request: Request,
    proposals: ProposalSequencerService = Depends(get_proposal_sequencer_service),
) -> ProposalResponse:
    try:
        proposal = await proposals.get_proposal(proposal_id)
    except ParliamentError as e:
        raise problem_exception(e, request) from None
    return ProposalResponse.from_proposal(proposal)


@router.patch(
    "/{proposal_id}",
    response_model=ProposalResponse,
    summary="Edit an open proposal",
)
async def update_proposal(
    proposal_id: str,
    body: ProposalUpdateRequest,
    actor: CurrentActor,
    request: Request,
    proposals: ProposalSequencerService = Depends(get_proposal_sequencer_service),
) -> ProposalResponse:
    try:
        proposal = await proposals.update_proposal(
            actor, proposal_id, title=body.title, party=body.party
        )
    except ParliamentError as e:
        raise problem_exception(e, request) from None
    return ProposalResponse.from_proposal(proposal)


@router.delete(
    "/{proposal_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a proposal and its votes",
)
async def delete_proposal(
    proposal_id: str,
    actor: CurrentActor,
    request: Request,
    proposals: ProposalSequencerService = Depends(get_proposal_sequencer_service),
) -> None:
    try:
        await proposals.delete_proposal(actor, proposal_id)
    except ParliamentError as e:
        raise problem_exception(e, request) from None
