"""End-of-voting route."""

from fastapi import APIRouter, Depends, Request

from src.api.auth.member_auth import CurrentActor
from src.api.dependencies.session import get_tally_service
from src.api.errors import problem_exception
from src.api.models.session import TallyReportResponse
from src.application.services.tally_service import TallyService
from src.domain.exceptions import ParliamentError

router = APIRouter(prefix="/v1/voting", tags=["voting"])


@router.post(
    "/end",
    response_model=TallyReportResponse,
    summary="Close voting and tally the meeting",
    responses={
        403: {"description": "Caller is not the chair"},
        503: {"description": "Tally incomplete; safe to retry"},
    },
)
async def end_voting(
    actor: CurrentActor,
    request: Request,
    tally: TallyService = Depends(get_tally_service),
) -> TallyReportResponse:
    """Close every open proposal, tally it and advance the meeting.

    A 503 response lists the proposals that failed. Calling the
    endpoint again completes the cycle without advancing the meeting
    twice.
    """
    try:
        report = await tally.end_voting(actor)
    except ParliamentError as e:
        raise problem_exception(e, request) from None
    return TallyReportResponse.from_report(report)
