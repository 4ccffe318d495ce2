"""Chamber-wide actions: breaks, fines and the parameter snapshot."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING
from uuid import uuid4

from structlog import get_logger

from src.application.ports.document_store import FINES, MEMBERS
from src.application.services.session_guards import (
    publish_event,
    require_chair,
    require_text,
)
from src.domain.errors import MemberNotFoundError, SessionValidationError, StoreError
from src.domain.events.session import (
    BREAK_EVENT_TYPE,
    END_BREAK_EVENT_TYPE,
    FINE_IMPOSED_EVENT_TYPE,
    SessionEvent,
    fine_imposed_payload,
)
from src.domain.models.chamber import Fine, SystemParameters

if TYPE_CHECKING:
    from src.application.dtos.identity import ActorContext
    from src.application.ports.broadcaster import BroadcasterProtocol
    from src.application.ports.document_store import DocumentStoreProtocol
    from src.application.services.system_parameters_service import (
        SystemParametersService,
    )

logger = get_logger(__name__)


class ChamberService:
    """Chair controls over the chamber as a whole."""

    def __init__(
        self,
        store: DocumentStoreProtocol,
        parameters: SystemParametersService,
        broadcaster: BroadcasterProtocol | None,
    ) -> None:
        self._store = store
        self._parameters = parameters
        self._broadcaster = broadcaster
        self._log = logger.bind(component="chamber")

    async def system_parameters(self) -> SystemParameters:
        return await self._parameters.get()

    async def call_break(self, actor: ActorContext) -> SystemParameters:
        """Start a break. Calling it during a break is a no-op write."""
        require_chair(actor, "call a break")
        await self._parameters.set_break_active(True)
        self._log.info("Break called", actor_id=actor.member_id)
        await publish_event(
            self._broadcaster, SessionEvent.create(BREAK_EVENT_TYPE, {})
        )
        return await self._parameters.get()

    async def end_break(self, actor: ActorContext) -> SystemParameters:
        require_chair(actor, "end a break")
        await self._parameters.set_break_active(False)
        self._log.info("Break ended", actor_id=actor.member_id)
        await publish_event(
            self._broadcaster, SessionEvent.create(END_BREAK_EVENT_TYPE, {})
        )
        return await self._parameters.get()

    async def impose_fine(
        self, actor: ActorContext, username: str, amount: int, reason: str
    ) -> Fine:
        """Fine a member and add the amount to their running total.

        Raises:
            PermissionDeniedError: Actor is not the chair.
            SessionValidationError: Non-positive amount or blank reason.
            MemberNotFoundError: Unknown username.
        """
        require_chair(actor, "impose fines")
        username = require_text(username, "username")
        reason = require_text(reason, "reason")
        if amount <= 0:
            raise SessionValidationError("Fine amount must be positive", field="amount")

        member = await self._store.find_one(MEMBERS, {"username": username})
        if member is None:
            raise MemberNotFoundError(username)

        fine = Fine(
            id=str(uuid4()),
            username=username,
            amount=amount,
            reason=reason,
            issued_by=actor.username,
            issued_at=datetime.now(timezone.utc),
        )
        # The record goes first; it is removed again if the total cannot move
        await self._store.insert_one(FINES, fine.to_document())
        try:
            updated = await self._store.increment_field(
                MEMBERS, {"id": member["id"]}, "fines", amount
            )
        except StoreError:
            self._log.warning(
                "Fine total update failed, removing fine record",
                fine_id=fine.id,
                username=username,
            )
            await self._store.delete_one(FINES, {"id": fine.id})
            raise
        if updated is None:
            await self._store.delete_one(FINES, {"id": fine.id})
            raise MemberNotFoundError(username)

        self._log.info(
            "Fine imposed",
            username=username,
            amount=amount,
            total_fines=updated.get("fines"),
            issued_by=actor.username,
        )
        await publish_event(
            self._broadcaster,
            SessionEvent.create(FINE_IMPOSED_EVENT_TYPE, fine_imposed_payload(fine)),
        )
        return fine

    async def list_fines(self, username: str | None = None) -> list[Fine]:
        """Fines newest first, optionally for one member."""
        query = {"username": username} if username else None
        fines = [
            Fine.from_document(document)
            for document in await self._store.find_many(FINES, query)
        ]
        return sorted(fines, key=lambda fine: fine.issued_at, reverse=True)
