"""Ballot routes nested under a proposal."""

from fastapi import APIRouter, Depends, Request

from src.api.auth.member_auth import CurrentActor
from src.api.dependencies.session import get_vote_ledger_service
from src.api.errors import problem_exception
from src.api.models.session import (
    VoteListResponse,
    VoteRequest,
    VoteResponse,
    VotingLogResponse,
)
from src.application.services.vote_ledger_service import VoteLedgerService
from src.domain.exceptions import ParliamentError

router = APIRouter(prefix="/v1/proposals", tags=["votes"])


@router.post(
    "/{proposal_id}/votes",
    response_model=VoteResponse,
    summary="Cast or change a ballot",
)
async def submit_vote(
    proposal_id: str,
    body: VoteRequest,
    actor: CurrentActor,
    request: Request,
    ledger: VoteLedgerService = Depends(get_vote_ledger_service),
) -> VoteResponse:
    """Record the caller's ballot, replacing any earlier one.

    Returns 409 once voting on the proposal has ended.
    """
    try:
        vote = await ledger.submit_vote(actor, proposal_id, body.vote)
    except ParliamentError as e:
        raise problem_exception(e, request) from None
    return VoteResponse.from_vote(vote)


@router.get(
    "/{proposal_id}/votes",
    response_model=VoteListResponse,
    summary="Ballots cast on a proposal",
)
async def list_votes(
    proposal_id: str,
    actor: CurrentActor,
    request: Request,
    ledger: VoteLedgerService = Depends(get_vote_ledger_service),
) -> VoteListResponse:
    try:
        votes = await ledger.votes_for_proposal(proposal_id)
    except ParliamentError as e:
        raise problem_exception(e, request) from None
    return VoteListResponse(votes=[VoteResponse.from_vote(v) for v in votes])


@router.get(
    "/{proposal_id}/voting-log",
    response_model=VotingLogResponse,
    summary="Voting log with adjusted strengths",
)
async def voting_log(
    proposal_id: str,
    actor: CurrentActor,
    request: Request,
    ledger: VoteLedgerService = Depends(get_vote_ledger_service),
) -> VotingLogResponse:
    """Return the log written when the proposal was tallied."""
    try:
        entry = await ledger.voting_log(proposal_id)
    except ParliamentError as e:
        raise problem_exception(e, request) from None
    return VotingLogResponse.from_entry(entry)
