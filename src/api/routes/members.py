"""Member directory routes."""

from fastapi import APIRouter, Depends, Request

from src.api.auth.member_auth import CurrentActor
from src.api.dependencies.session import get_member_service
from src.api.errors import problem_exception
from src.api.models.session import (
    MemberListResponse,
    MemberResponse,
    MemberUpdateRequest,
)
from src.application.dtos.member import MemberUpdate
from src.application.services.member_service import MemberService
from src.domain.exceptions import ParliamentError

router = APIRouter(prefix="/v1/members", tags=["members"])


@router.get("", response_model=MemberListResponse, summary="List members")
async def list_members(
    actor: CurrentActor,
    members: MemberService = Depends(get_member_service),
) -> MemberListResponse:
    listed = await members.list_members()
    return MemberListResponse(
        members=[MemberResponse.from_member(member) for member in listed]
    )


@router.post(
    "/update",
    response_model=MemberListResponse,
    summary="Bulk edit roles, strengths and affiliations",
)
async def update_members(
    body: MemberUpdateRequest,
    actor: CurrentActor,
    request: Request,
    members: MemberService = Depends(get_member_service),
) -> MemberListResponse:
    """Apply a chair's bulk edit. A single invalid row rejects the batch.

    Returns:
        The updated member records.
    """
    updates = [
        MemberUpdate(
            member_id=item.member_id,
            electoral_strength=item.electoral_strength,
            party_affiliation=item.party_affiliation,
            role=item.role,
        )
        for item in body.updates
    ]
    try:
        updated = await members.update_members(actor, updates)
    except ParliamentError as e:
        raise problem_exception(e, request) from None
    return MemberListResponse(
        members=[MemberResponse.from_member(member) for member in updated]
    )
