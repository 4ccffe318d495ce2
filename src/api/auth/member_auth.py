"""Member identity extraction.

Authenticated requests carry the member id returned by login in the
X-Member-Id header. The id is resolved against the member directory on
every request, so role and electoral strength are always current.
"""

from typing import Annotated

import structlog
from fastapi import Depends, Header, HTTPException, Request, status

from src.api.dependencies.session import get_member_service
from src.application.dtos.identity import ActorContext
from src.application.services.member_service import MemberService
from src.domain.errors import AuthenticationError

logger = structlog.get_logger(__name__)

MEMBER_ID_HEADER = "X-Member-Id"


async def get_current_actor(
    request: Request,
    x_member_id: Annotated[
        str | None,
        Header(description="Member id returned by login. Required."),
    ] = None,
    members: MemberService = Depends(get_member_service),
) -> ActorContext:
    """Resolve the calling member from the X-Member-Id header.

    Raises:
        HTTPException 401: Header missing or unknown member id.
    """
    log = logger.bind(component="member_auth")
    request_ip = request.client.host if request.client else "unknown"

    if not x_member_id or not x_member_id.strip():
        log.warning("auth_failed", reason="missing_member_id", request_ip=request_ip)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-Member-Id header is required",
        )

    try:
        return await members.resolve_actor(x_member_id.strip())
    except AuthenticationError:
        log.warning("auth_failed", reason="unknown_member_id", request_ip=request_ip)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown member identity",
        ) from None


CurrentActor = Annotated[ActorContext, Depends(get_current_actor)]
