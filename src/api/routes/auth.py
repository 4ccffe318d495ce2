"""Authentication routes.

Login returns the member record; its ``id`` is the value clients send
in the X-Member-Id header on subsequent requests.
"""

from fastapi import APIRouter, Depends, Request, status

from src.api.auth.member_auth import CurrentActor
from src.api.dependencies.session import get_member_service
from src.api.errors import problem_exception
from src.api.models.session import CredentialsRequest, MemberResponse
from src.application.services.member_service import MemberService
from src.domain.exceptions import ParliamentError

router = APIRouter(prefix="/v1/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=MemberResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new member",
)
async def register(
    body: CredentialsRequest,
    request: Request,
    members: MemberService = Depends(get_member_service),
) -> MemberResponse:
    """Register an ordinary member. The first chair is created by scripts/seed_chair.py."""
    try:
        member = await members.register(body.username, body.password)
    except ParliamentError as e:
        raise problem_exception(e, request) from None
    return MemberResponse.from_member(member)


@router.post("/login", response_model=MemberResponse, summary="Log in")
async def login(
    body: CredentialsRequest,
    request: Request,
    members: MemberService = Depends(get_member_service),
) -> MemberResponse:
    try:
        member = await members.authenticate(body.username, body.password)
    except ParliamentError as e:
        raise problem_exception(e, request) from None
    return MemberResponse.from_member(member)


@router.post(
    "/logout",
    response_model=MemberResponse,
    summary="Log out and vacate the seat",
)
async def logout(
    actor: CurrentActor,
    request: Request,
    members: MemberService = Depends(get_member_service),
) -> MemberResponse:
    try:
        member = await members.logout(actor.member_id)
    except ParliamentError as e:
        raise problem_exception(e, request) from None
    return MemberResponse.from_member(member)


@router.get("/me", response_model=MemberResponse, summary="Current member")
async def me(
    actor: CurrentActor,
    request: Request,
    members: MemberService = Depends(get_member_service),
) -> MemberResponse:
    try:
        member = await members.get_member(actor.member_id)
    except ParliamentError as e:
        raise problem_exception(e, request) from None
    return MemberResponse.from_member(member)
