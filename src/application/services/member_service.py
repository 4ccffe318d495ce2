"""Member directory service.

Registration, credential checks, logout and the chair's bulk member
edit. Every member starts as a MEMBER with the configured default
electoral strength; only the chair can change role, strength or
affiliation afterwards.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from structlog import get_logger

from src.application.dtos.identity import ActorContext
from src.application.ports.document_store import MEMBERS
from src.application.services.session_guards import (
    publish_event,
    require_chair,
    require_text,
)
from src.config.session_config import DEFAULT_SESSION_CONFIG, SessionConfig
from src.domain.errors import (
    AuthenticationError,
    DuplicateDocumentError,
    DuplicateUsernameError,
    MemberNotFoundError,
    SessionValidationError,
)
from src.domain.events.session import (
    SEAT_UPDATE_EVENT_TYPE,
    SessionEvent,
    seat_update_payload,
)
from src.domain.models.member import Member, MemberRole

if TYPE_CHECKING:
    from src.application.dtos.member import MemberUpdate
    from src.application.ports.broadcaster import BroadcasterProtocol
    from src.application.ports.document_store import DocumentStoreProtocol
    from src.application.ports.password_hasher import PasswordHasherProtocol

logger = get_logger(__name__)


class MemberService:
    """Member registration, authentication and administration.

    Example:
        >>> service = MemberService(store, broadcaster, hasher)
        >>> member = await service.register("ana", "secret")
        >>> member = await service.authenticate("ana", "secret")
    """

    def __init__(
        self,
        store: DocumentStoreProtocol,
        broadcaster: BroadcasterProtocol | None,
        password_hasher: PasswordHasherProtocol,
        config: SessionConfig = DEFAULT_SESSION_CONFIG,
    ) -> None:
        """Initialize the member service.

        Args:
            store: Document store holding the members collection.
            broadcaster: Event fan-out, None to disable events.
            password_hasher: Credential hashing implementation.
            config: Session configuration (default strength).
        """
        self._store = store
        self._broadcaster = broadcaster
        self._hasher = password_hasher
        self._config = config
        self._log = logger.bind(component="member_directory")

    async def register(self, username: str, password: str) -> Member:
        """Register a new member.

        Raises:
            SessionValidationError: Username or password is blank.
            DuplicateUsernameError: Username already exists.
        """
        username = require_text(username, "username")
        password = require_text(password, "password")

        if await self._store.find_one(MEMBERS, {"username": username}) is not None:
            self._log.warning("Registration rejected, username taken", username=username)
            raise DuplicateUsernameError(username)

        member = Member(
            id=str(uuid4()),
            username=username,
            role=MemberRole.MEMBER,
            electoral_strength=self._config.default_electoral_strength,
            password_hash=self._hasher.hash_password(password),
            registered_at=datetime.now(timezone.utc),
        )
        try:
            await self._store.insert_one(MEMBERS, member.to_document())
        except DuplicateDocumentError:
            # Lost a registration race on the unique username
            raise DuplicateUsernameError(username) from None

        self._log.info("Member registered", member_id=member.id, username=username)
        return member

    async def authenticate(self, username: str, password: str) -> Member:
        """Check credentials and return the member.

        Raises:
            SessionValidationError: Username or password is blank.
            AuthenticationError: Unknown username or wrong password.
        """
        username = require_text(username, "username")
        password = require_text(password, "password")

        document = await self._store.find_one(MEMBERS, {"username": username})
        if document is None or not self._hasher.verify_password(
            password, document.get("passwordHash", "")
        ):
            self._log.warning("Login failed", username=username)
            raise AuthenticationError("Invalid username or password")

        self._log.info("Member logged in", member_id=document["id"])
        return Member.from_document(document)

    async def logout(self, member_id: str) -> Member:
        """Leave the chamber; the seat status is kept.

        An objection survives logging out and joining again.

        Raises:
            MemberNotFoundError: Unknown member id.
        """
        updated = await self._store.find_one_and_update(
            MEMBERS,
            {"id": member_id},
            {"present": False},
        )
        if updated is None:
            raise MemberNotFoundError(member_id)

        member = Member.from_document(updated)
        self._log.info("Member logged out", member_id=member_id)
        await publish_event(
            self._broadcaster,
            SessionEvent.create(SEAT_UPDATE_EVENT_TYPE, seat_update_payload(member)),
        )
        return member

    async def get_member(self, member_id: str) -> Member:
        """Raises MemberNotFoundError when the id is unknown."""
        document = await self._store.find_one(MEMBERS, {"id": member_id})
        if document is None:
            raise MemberNotFoundError(member_id)
        return Member.from_document(document)

    async def get_member_by_username(self, username: str) -> Member:
        document = await self._store.find_one(MEMBERS, {"username": username})
        if document is None:
            raise MemberNotFoundError(username)
        return Member.from_document(document)

    async def resolve_actor(self, member_id: str) -> ActorContext:
        """Build the actor context for an authenticated member id.

        Raises:
            AuthenticationError: The id does not belong to any member.
        """
        document = await self._store.find_one(MEMBERS, {"id": member_id})
        if document is None:
            raise AuthenticationError("Unknown member identity")
        return ActorContext.from_member(Member.from_document(document))

    async def list_members(self) -> list[Member]:
        """All members ordered by username."""
        documents = await self._store.find_many(MEMBERS)
        members = [Member.from_document(document) for document in documents]
        return sorted(members, key=lambda member: member.username)

    async def update_members(
        self, actor: ActorContext, updates: list[MemberUpdate]
    ) -> list[Member]:
        """Apply a chair's bulk edit of role, strength and affiliation.

        Every row is validated before anything is written, so a bad row
        rejects the whole batch.

        Raises:
            PermissionDeniedError: Actor is not the chair.
            SessionValidationError: A row holds an invalid value.
            MemberNotFoundError: A row names an unknown member.
        """
        require_chair(actor, "edit members")
        log = self._log.bind(actor_id=actor.member_id, rows=len(updates))

        patches: list[tuple[str, dict[str, Any]]] = []
        for update in updates:
            patch: dict[str, Any] = {}
            if update.electoral_strength is not None:
                if update.electoral_strength < 0:
                    raise SessionValidationError(
                        "Electoral strength cannot be negative",
                        field="electoralStrength",
                    )
                patch["electoralStrength"] = update.electoral_strength
            if update.party_affiliation is not None:
                patch["partyAffiliation"] = update.party_affiliation.strip()
            if update.role is not None:
                patch["role"] = MemberRole.parse(update.role).value
            if await self._store.find_one(MEMBERS, {"id": update.member_id}) is None:
                raise MemberNotFoundError(update.member_id)
            if patch:
                patches.append((update.member_id, patch))

        updated_members: list[Member] = []
        for member_id, patch in patches:
            document = await self._store.find_one_and_update(
                MEMBERS, {"id": member_id}, patch
            )
            if document is None:
                raise MemberNotFoundError(member_id)
            member = Member.from_document(document)
            updated_members.append(member)
            await publish_event(
                self._broadcaster,
                SessionEvent.create(
                    SEAT_UPDATE_EVENT_TYPE, seat_update_payload(member)
                ),
            )

        log.info("Members updated", updated=len(updated_members))
        return updated_members
