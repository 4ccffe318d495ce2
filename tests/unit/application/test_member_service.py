"""Unit tests for MemberService."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from src.application.dtos.identity import ActorContext
from src.application.dtos.member import MemberUpdate
from src.application.ports.document_store import MEMBERS
from src.application.services.member_service import MemberService
from src.config.session_config import SessionConfig
from src.domain.errors import (
    AuthenticationError,
    DuplicateDocumentError,
    DuplicateUsernameError,
    MemberNotFoundError,
    PermissionDeniedError,
    SessionValidationError,
)
from src.domain.models.member import MemberRole, SeatStatus
from src.infrastructure.adapters.security.pbkdf2_password_hasher import (
    Pbkdf2PasswordHasher,
)
from src.infrastructure.stubs import DocumentStoreStub, RecordingBroadcasterStub
from tests.helpers.members import seed_member


class TestRegistration:
    """Tests for register and authenticate."""

    async def test_register_creates_member_with_defaults(
        self, member_service: MemberService, store: DocumentStoreStub
    ) -> None:
        member = await member_service.register("ana", "secret")

        assert member.role is MemberRole.MEMBER
        assert member.electoral_strength == 1
        assert member.present is False
        assert member.seat_status is SeatStatus.NEUTRAL
        stored = store.documents(MEMBERS)[0]
        assert stored["passwordHash"] != "secret"

    async def test_register_uses_configured_default_strength(
        self,
        store: DocumentStoreStub,
        broadcaster: RecordingBroadcasterStub,
        hasher: Pbkdf2PasswordHasher,
    ) -> None:
        service = MemberService(
            store, broadcaster, hasher, SessionConfig(default_electoral_strength=5)
        )

        member = await service.register("ana", "secret")

        assert member.electoral_strength == 5

    @pytest.mark.parametrize(("username", "password"), [("", "x"), ("  ", "x"), ("ana", "")])
    async def test_blank_credentials_are_rejected(
        self,
        member_service: MemberService,
        store: DocumentStoreStub,
        username: str,
        password: str,
    ) -> None:
        with pytest.raises(SessionValidationError):
            await member_service.register(username, password)
        assert store.documents(MEMBERS) == []

    async def test_duplicate_username_is_a_conflict(
        self, member_service: MemberService
    ) -> None:
        await member_service.register("ana", "secret")

        with pytest.raises(DuplicateUsernameError):
            await member_service.register("ana", "other")

    async def test_lost_insert_race_maps_to_duplicate_username(
        self,
        broadcaster: RecordingBroadcasterStub,
        hasher: Pbkdf2PasswordHasher,
    ) -> None:
        store = AsyncMock()
        store.find_one.return_value = None
        store.insert_one.side_effect = DuplicateDocumentError(MEMBERS, "x")
        service = MemberService(store, broadcaster, hasher)

        with pytest.raises(DuplicateUsernameError):
            await service.register("ana", "secret")

    async def test_authenticate_with_correct_password(
        self, member_service: MemberService
    ) -> None:
        registered = await member_service.register("ana", "secret")

        member = await member_service.authenticate("ana", "secret")

        assert member.id == registered.id

    @pytest.mark.parametrize(("username", "password"), [("ana", "wrong"), ("nobody", "secret")])
    async def test_authenticate_failures_are_indistinguishable(
        self, member_service: MemberService, username: str, password: str
    ) -> None:
        await member_service.register("ana", "secret")

        with pytest.raises(AuthenticationError, match="Invalid username or password"):
            await member_service.authenticate(username, password)


class TestLogoutAndLookup:
    """Tests for logout, resolve_actor and listing."""

    async def test_logout_vacates_seat_and_publishes(
        self,
        member_service: MemberService,
        broadcaster: RecordingBroadcasterStub,
        alice: ActorContext,
    ) -> None:
        member = await member_service.logout(alice.member_id)

        assert member.present is False
        assert member.seat_status is SeatStatus.NEUTRAL
        (message,) = broadcaster.messages()
        assert message["type"] == "seatUpdate"
        assert message["user"]["present"] is False

    async def test_logout_keeps_objection(
        self, member_service: MemberService, store: DocumentStoreStub
    ) -> None:
        await seed_member(store, member_id="m", seat_status=SeatStatus.OBJECTING)

        member = await member_service.logout("m")

        assert member.present is False
        assert member.seat_status is SeatStatus.OBJECTING

    async def test_logout_unknown_member(self, member_service: MemberService) -> None:
        with pytest.raises(MemberNotFoundError):
            await member_service.logout("ghost")

    async def test_resolve_actor_reads_current_role(
        self, member_service: MemberService, chair: ActorContext
    ) -> None:
        actor = await member_service.resolve_actor(chair.member_id)

        assert actor.is_chair
        assert actor.username == "chair"

    async def test_resolve_unknown_actor_is_an_authentication_error(
        self, member_service: MemberService
    ) -> None:
        with pytest.raises(AuthenticationError):
            await member_service.resolve_actor("ghost")

    async def test_list_members_sorted_by_username(
        self,
        member_service: MemberService,
        bob: ActorContext,
        alice: ActorContext,
        chair: ActorContext,
    ) -> None:
        members = await member_service.list_members()

        assert [member.username for member in members] == ["alice", "bob", "chair"]


class TestUpdateMembers:
    """Tests for the chair's bulk edit."""

    async def test_chair_updates_strength_affiliation_and_role(
        self,
        member_service: MemberService,
        broadcaster: RecordingBroadcasterStub,
        chair: ActorContext,
        alice: ActorContext,
        bob: ActorContext,
    ) -> None:
        updated = await member_service.update_members(
            chair,
            [
                MemberUpdate(alice.member_id, electoral_strength=12, party_affiliation=" Blue "),
                MemberUpdate(bob.member_id, role="chair"),
            ],
        )

        assert [member.electoral_strength for member in updated] == [12, 1]
        assert updated[0].party_affiliation == "Blue"
        assert updated[1].role is MemberRole.CHAIR
        assert len(broadcaster.of_type("seatUpdate")) == 2

    async def test_member_cannot_update(
        self, member_service: MemberService, alice: ActorContext
    ) -> None:
        with pytest.raises(PermissionDeniedError):
            await member_service.update_members(
                alice, [MemberUpdate(alice.member_id, electoral_strength=100)]
            )

    async def test_invalid_row_rejects_whole_batch(
        self,
        member_service: MemberService,
        store: DocumentStoreStub,
        chair: ActorContext,
        alice: ActorContext,
        bob: ActorContext,
    ) -> None:
        with pytest.raises(SessionValidationError):
            await member_service.update_members(
                chair,
                [
                    MemberUpdate(alice.member_id, electoral_strength=9),
                    MemberUpdate(bob.member_id, electoral_strength=-2),
                ],
            )

        alice_doc = await store.find_one(MEMBERS, {"id": alice.member_id})
        assert alice_doc is not None
        assert alice_doc["electoralStrength"] == 1

    async def test_unknown_member_row_rejects_batch(
        self, member_service: MemberService, chair: ActorContext
    ) -> None:
        with pytest.raises(MemberNotFoundError):
            await member_service.update_members(
                chair, [MemberUpdate("ghost", electoral_strength=3)]
            )
