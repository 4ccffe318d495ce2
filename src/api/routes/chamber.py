"""Chamber routes: breaks, system parameters and fines."""

from fastapi import APIRouter, Depends, Query, Request, status

from src.api.auth.member_auth import CurrentActor
from src.api.dependencies.session import get_chamber_service
from src.api.errors import problem_exception
from src.api.models.session import (
    FineListResponse,
    FineRequest,
    FineResponse,
    SystemParametersResponse,
)
from src.application.services.chamber_service import ChamberService
from src.domain.exceptions import ParliamentError

router = APIRouter(prefix="/v1/chamber", tags=["chamber"])


@router.get(
    "/parameters",
    response_model=SystemParametersResponse,
    summary="Current meeting number and break flag",
)
async def system_parameters(
    chamber: ChamberService = Depends(get_chamber_service),
) -> SystemParametersResponse:
    parameters = await chamber.system_parameters()
    return SystemParametersResponse.from_parameters(parameters)


@router.post("/break", response_model=SystemParametersResponse, summary="Call a break")
async def call_break(
    actor: CurrentActor,
    request: Request,
    chamber: ChamberService = Depends(get_chamber_service),
) -> SystemParametersResponse:
    try:
        parameters = await chamber.call_break(actor)
    except ParliamentError as e:
        raise problem_exception(e, request) from None
    return SystemParametersResponse.from_parameters(parameters)


@router.post(
    "/end-break", response_model=SystemParametersResponse, summary="End a break"
)
async def end_break(
    actor: CurrentActor,
    request: Request,
    chamber: ChamberService = Depends(get_chamber_service),
) -> SystemParametersResponse:
    try:
        parameters = await chamber.end_break(actor)
    except ParliamentError as e:
        raise problem_exception(e, request) from None
    return SystemParametersResponse.from_parameters(parameters)


@router.post(
    "/fines",
    response_model=FineResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Fine a member",
)
async def impose_fine(
    body: FineRequest,
    actor: CurrentActor,
    request: Request,
    chamber: ChamberService = Depends(get_chamber_service),
) -> FineResponse:
    try:
        fine = await chamber.impose_fine(actor, body.username, body.amount, body.reason)
    except ParliamentError as e:
        raise problem_exception(e, request) from None
    return FineResponse.from_fine(fine)


@router.get("/fines", response_model=FineListResponse, summary="List fines")
async def list_fines(
    actor: CurrentActor,
    username: str | None = Query(default=None, description="Only this member's fines"),
    chamber: ChamberService = Depends(get_chamber_service),
) -> FineListResponse:
    fines = await chamber.list_fines(username=username)
    return FineListResponse(fines=[FineResponse.from_fine(f) for f in fines])
