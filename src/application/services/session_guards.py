"""Shared checks and event delivery for the session services."""

from __future__ import annotations

from typing import TYPE_CHECKING

from structlog import get_logger

from src.domain.errors import PermissionDeniedError, SessionValidationError

if TYPE_CHECKING:
    from src.application.dtos.identity import ActorContext
    from src.application.ports.broadcaster import BroadcasterProtocol
    from src.domain.events.session import SessionEvent

logger = get_logger(__name__)


def require_chair(actor: ActorContext, action: str) -> None:
    """Raise PermissionDeniedError unless the actor is the chair.

    Args:
        actor: Authenticated caller.
        action: Short description used in the error message.
    """
    if not actor.is_chair:
        logger.warning(
            "Chair-only action rejected",
            action=action,
            member_id=actor.member_id,
        )
        raise PermissionDeniedError(f"Only the chair can {action}")


def require_text(value: str | None, field: str) -> str:
    """Return the stripped value, rejecting None and blank strings."""
    if value is None or not value.strip():
        raise SessionValidationError(f"{field} is required", field=field)
    return value.strip()


async def publish_event(
    broadcaster: BroadcasterProtocol | None, event: SessionEvent
) -> None:
    """Publish an event after its state change has been committed.

    Delivery is best effort: a failing broadcaster is logged and never
    undoes or fails the committed operation.
    """
    if broadcaster is None:
        return
    try:
        await broadcaster.publish(event)
    except Exception as exc:
        logger.warning(
            "Session event broadcast failed",
            event_type=event.event_type,
            event_id=event.event_id,
            error=str(exc),
        )
