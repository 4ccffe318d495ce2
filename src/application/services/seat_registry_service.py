"""Seat registry service: attendance and the seat-status state machine.

Authority rules for ``set_seat_status``:

- A non-chair may only change their own status.
- A non-chair whose status is OBJECTING may not change it at all; only
  the chair can clear an objection.

The status check and the write are one compare-and-set on the status
that was observed, so two concurrent requests cannot both pass the
objection check against stale state. A lost race re-reads and re-checks.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from structlog import get_logger

from src.application.ports.document_store import MEMBERS
from src.application.services.session_guards import publish_event, require_chair
from src.config.session_config import DEFAULT_SESSION_CONFIG, SessionConfig
from src.domain.errors import (
    ConcurrentSeatUpdateError,
    MemberNotFoundError,
    PermissionDeniedError,
    SeatAlreadyTakenError,
    SelfObjectionLockError,
)
from src.domain.events.session import (
    END_SESSION_EVENT_TYPE,
    SEAT_UPDATE_EVENT_TYPE,
    SessionEvent,
    seat_update_payload,
)
from src.domain.models.member import Member, SeatStatus

if TYPE_CHECKING:
    from src.application.dtos.identity import ActorContext
    from src.application.ports.broadcaster import BroadcasterProtocol
    from src.application.ports.document_store import DocumentStoreProtocol

logger = get_logger(__name__)

# Queue order: objections are heard before speaking requests
_QUEUE_PRIORITY: dict[SeatStatus, int] = {
    SeatStatus.OBJECTING: 0,
    SeatStatus.REQUESTING_TO_SPEAK: 1,
}


def check_seat_authority(actor: ActorContext, target: Member) -> None:
    """Apply the two authority rules against the observed target state.

    Raises:
        PermissionDeniedError: A non-chair targets another member.
        SelfObjectionLockError: A non-chair tries to leave OBJECTING.
    """
    if actor.is_chair:
        return
    if actor.member_id != target.id:
        raise PermissionDeniedError("Members may only change their own seat status")
    if target.seat_status is SeatStatus.OBJECTING:
        raise SelfObjectionLockError()


class SeatRegistryService:
    """Seat joins, status changes, the speaking queue and session end."""

    def __init__(
        self,
        store: DocumentStoreProtocol,
        broadcaster: BroadcasterProtocol | None,
        config: SessionConfig = DEFAULT_SESSION_CONFIG,
    ) -> None:
        self._store = store
        self._broadcaster = broadcaster
        self._config = config
        self._log = logger.bind(component="seat_registry")

    async def join_seat(self, actor: ActorContext) -> Member:
        """Take a seat: present, status NEUTRAL.

        A non-chair who left while OBJECTING comes back still objecting;
        only the chair can clear an objection.

        Raises:
            MemberNotFoundError: The actor's member record is gone.
            SeatAlreadyTakenError: The actor is already seated.
            ConcurrentSeatUpdateError: The record kept changing underneath.
        """
        log = self._log.bind(member_id=actor.member_id)
        attempts = self._config.seat_update_max_attempts

        for attempt in range(1, attempts + 1):
            document = await self._store.find_one(MEMBERS, {"id": actor.member_id})
            if document is None:
                raise MemberNotFoundError(actor.member_id)
            current = Member.from_document(document)
            if current.present:
                log.info("Join rejected, already seated")
                raise SeatAlreadyTakenError(actor.member_id)

            patch: dict[str, object] = {"present": True}
            if actor.is_chair or current.seat_status is not SeatStatus.OBJECTING:
                patch["seatStatus"] = SeatStatus.NEUTRAL.value
                patch["statusChangedAt"] = datetime.now(timezone.utc).isoformat()

            updated = await self._store.find_one_and_update(
                MEMBERS,
                {
                    "id": actor.member_id,
                    "present": False,
                    "seatStatus": current.seat_status.value,
                },
                patch,
            )
            if updated is not None:
                member = Member.from_document(updated)
                log.info("Member joined seat", seat_status=member.seat_status.value)
                await self._publish_seat(member)
                return member

            log.debug("Member record moved during join, retrying", attempt=attempt)

        log.warning("Seat join gave up", attempts=attempts)
        raise ConcurrentSeatUpdateError(actor.member_id, attempts)

    async def set_seat_status(
        self, actor: ActorContext, target_member_id: str, new_status: str
    ) -> Member:
        """Change a member's seat status.

        Any status change also marks the target present.

        Args:
            actor: Caller performing the change.
            target_member_id: Member whose status changes.
            new_status: One of the four seat states.

        Returns:
            The updated member.

        Raises:
            SessionValidationError: Unknown status value.
            MemberNotFoundError: Unknown target member.
            PermissionDeniedError: Authority rule violated.
            ConcurrentSeatUpdateError: Status kept changing underneath.
        """
        status = SeatStatus.parse(new_status)
        log = self._log.bind(
            actor_id=actor.member_id,
            target_member_id=target_member_id,
            new_status=status.value,
        )
        attempts = self._config.seat_update_max_attempts

        for attempt in range(1, attempts + 1):
            document = await self._store.find_one(MEMBERS, {"id": target_member_id})
            if document is None:
                raise MemberNotFoundError(target_member_id)
            current = Member.from_document(document)

            try:
                check_seat_authority(actor, current)
            except PermissionDeniedError:
                log.warning(
                    "Seat status change rejected",
                    current_status=current.seat_status.value,
                )
                raise

            changed = current.with_seat_status(status)
            updated = await self._store.find_one_and_update(
                MEMBERS,
                {"id": target_member_id, "seatStatus": current.seat_status.value},
                {
                    "seatStatus": changed.seat_status.value,
                    "present": True,
                    "statusChangedAt": changed.status_changed_at.isoformat(),
                },
            )
            if updated is not None:
                member = Member.from_document(updated)
                log.info(
                    "Seat status changed",
                    previous_status=current.seat_status.value,
                )
                await self._publish_seat(member)
                return member

            log.debug("Seat status moved during update, retrying", attempt=attempt)

        log.warning("Seat status update gave up", attempts=attempts)
        raise ConcurrentSeatUpdateError(target_member_id, attempts)

    async def speaking_queue(self) -> list[Member]:
        """Present members waiting for the floor.

        Objections come first, then speaking requests, each in the order
        the status was taken.
        """
        documents = await self._store.find_many(MEMBERS, {"present": True})
        waiting = [
            member
            for member in (Member.from_document(document) for document in documents)
            if member.seat_status in _QUEUE_PRIORITY
        ]
        epoch = datetime.min.replace(tzinfo=timezone.utc)
        return sorted(
            waiting,
            key=lambda member: (
                _QUEUE_PRIORITY[member.seat_status],
                member.status_changed_at or epoch,
            ),
        )

    async def end_session(self, actor: ActorContext) -> int:
        """Empty the chamber: everyone absent and NEUTRAL.

        Returns:
            Number of member records reset.

        Raises:
            PermissionDeniedError: Actor is not the chair.
        """
        require_chair(actor, "end the session")
        reset = await self._store.update_many(
            MEMBERS,
            {},
            {"present": False, "seatStatus": SeatStatus.NEUTRAL.value},
        )
        self._log.info("Session ended", actor_id=actor.member_id, members_reset=reset)
        await publish_event(
            self._broadcaster,
            SessionEvent.create(END_SESSION_EVENT_TYPE, {"membersReset": reset}),
        )
        return reset

    async def _publish_seat(self, member: Member) -> None:
        await publish_event(
            self._broadcaster,
            SessionEvent.create(SEAT_UPDATE_EVENT_TYPE, seat_update_payload(member)),
        )
