"""Seat registry routes: joining, status changes and the speaking queue."""

from fastapi import APIRouter, Depends, Request

from src.api.auth.member_auth import CurrentActor
from src.api.dependencies.session import get_seat_registry_service
from src.api.errors import problem_exception
from src.api.models.session import (
    EndSessionResponse,
    MemberListResponse,
    MemberResponse,
    SeatStatusRequest,
)
from src.application.services.seat_registry_service import SeatRegistryService
from src.domain.exceptions import ParliamentError

router = APIRouter(prefix="/v1/seats", tags=["seats"])


@router.post("/join", response_model=MemberResponse, summary="Take a seat")
async def join_seat(
    actor: CurrentActor,
    request: Request,
    seats: SeatRegistryService = Depends(get_seat_registry_service),
) -> MemberResponse:
    """Mark the caller present. 409 if the seat is already occupied."""
    try:
        member = await seats.join_seat(actor)
    except ParliamentError as e:
        raise problem_exception(e, request) from None
    return MemberResponse.from_member(member)


@router.post("/status", response_model=MemberResponse, summary="Change seat status")
async def set_seat_status(
    body: SeatStatusRequest,
    actor: CurrentActor,
    request: Request,
    seats: SeatRegistryService = Depends(get_seat_registry_service),
) -> MemberResponse:
    """Change the caller's status, or any member's status for the chair.

    A non-chair member whose status is OBJECTING cannot change it; only
    the chair can clear an objection.
    """
    target = body.member_id or actor.member_id
    try:
        member = await seats.set_seat_status(actor, target, body.status)
    except ParliamentError as e:
        raise problem_exception(e, request) from None
    return MemberResponse.from_member(member)


@router.get(
    "/queue",
    response_model=MemberListResponse,
    summary="Members waiting to speak or object",
)
async def speaking_queue(
    actor: CurrentActor,
    seats: SeatRegistryService = Depends(get_seat_registry_service),
) -> MemberListResponse:
    queued = await seats.speaking_queue()
    return MemberListResponse(
        members=[MemberResponse.from_member(member) for member in queued]
    )


@router.post(
    "/end-session",
    response_model=EndSessionResponse,
    summary="Vacate every seat",
)
async def end_session(
    actor: CurrentActor,
    request: Request,
    seats: SeatRegistryService = Depends(get_seat_registry_service),
) -> EndSessionResponse:
    try:
        reset = await seats.end_session(actor)
    except ParliamentError as e:
        raise problem_exception(e, request) from None
    return EndSessionResponse(members_reset=reset)
