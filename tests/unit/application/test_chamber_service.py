"""Unit tests for ChamberService and SystemParametersService."""

from __future__ import annotations

from uuid import UUID

import pytest

from src.application.dtos.identity import ActorContext
from src.application.ports.document_store import FINES, MEMBERS, SYSTEM_PARAMETERS
from src.application.services import chamber_service
from src.application.services.chamber_service import ChamberService
from src.application.services.system_parameters_service import (
    SystemParametersService,
)
from src.domain.errors import (
    MemberNotFoundError,
    PermissionDeniedError,
    SessionValidationError,
    StoreError,
)
from src.infrastructure.stubs import DocumentStoreStub, RecordingBroadcasterStub


class TestSystemParameters:
    """Tests for the store-backed parameter record."""

    async def test_defaults_created_on_first_read(
        self, parameters: SystemParametersService, store: DocumentStoreStub
    ) -> None:
        snapshot = await parameters.get()

        assert snapshot.break_active is False
        assert snapshot.meeting_number == 1
        assert len(store.documents(SYSTEM_PARAMETERS)) == 2

    async def test_ensure_initialized_is_idempotent(
        self, parameters: SystemParametersService, store: DocumentStoreStub
    ) -> None:
        await parameters.ensure_initialized()
        await parameters.advance_meeting(1)
        await parameters.ensure_initialized()

        assert (await parameters.get()).meeting_number == 2

    async def test_advance_meeting_is_compare_and_set(
        self, parameters: SystemParametersService
    ) -> None:
        assert await parameters.advance_meeting(1) == 2
        assert await parameters.advance_meeting(1) == 2
        assert (await parameters.get()).meeting_number == 2


class TestBreaks:
    async def test_call_and_end_break(
        self,
        chamber: ChamberService,
        broadcaster: RecordingBroadcasterStub,
        chair: ActorContext,
    ) -> None:
        during = await chamber.call_break(chair)
        after = await chamber.end_break(chair)

        assert during.break_active is True
        assert after.break_active is False
        assert broadcaster.messages() == [{"type": "break"}, {"type": "endBreak"}]

    async def test_member_cannot_call_break(
        self, chamber: ChamberService, alice: ActorContext
    ) -> None:
        with pytest.raises(PermissionDeniedError):
            await chamber.call_break(alice)
        assert (await chamber.system_parameters()).break_active is False


class TestFines:
    """Tests for impose_fine and list_fines."""

    async def test_fine_accumulates_on_member(
        self,
        chamber: ChamberService,
        store: DocumentStoreStub,
        broadcaster: RecordingBroadcasterStub,
        chair: ActorContext,
        alice: ActorContext,
    ) -> None:
        await chamber.impose_fine(chair, "alice", 5, "Late")
        fine = await chamber.impose_fine(chair, "alice", 3, "Phone rang")

        member = await store.find_one(MEMBERS, {"id": alice.member_id})
        assert member is not None
        assert member["fines"] == 8
        assert fine.issued_by == "chair"
        assert len(store.documents(FINES)) == 2
        assert broadcaster.messages()[-1] == {
            "type": "fineImposed",
            "username": "alice",
            "amount": 3,
            "reason": "Phone rang",
        }

    @pytest.mark.parametrize(("amount", "reason"), [(0, "Late"), (-4, "Late"), (5, "  ")])
    async def test_invalid_fine_is_rejected(
        self,
        chamber: ChamberService,
        store: DocumentStoreStub,
        chair: ActorContext,
        alice: ActorContext,
        amount: int,
        reason: str,
    ) -> None:
        with pytest.raises(SessionValidationError):
            await chamber.impose_fine(chair, "alice", amount, reason)
        assert store.documents(FINES) == []

    async def test_fine_unknown_member(
        self, chamber: ChamberService, store: DocumentStoreStub, chair: ActorContext
    ) -> None:
        with pytest.raises(MemberNotFoundError):
            await chamber.impose_fine(chair, "ghost", 5, "Late")
        assert store.documents(FINES) == []

    async def test_failed_fine_insert_leaves_total_unchanged(
        self,
        chamber: ChamberService,
        store: DocumentStoreStub,
        chair: ActorContext,
        alice: ActorContext,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        fine_id = UUID(int=7)
        monkeypatch.setattr(chamber_service, "uuid4", lambda: fine_id)
        store.fail_writes_for(FINES, str(fine_id))

        with pytest.raises(StoreError):
            await chamber.impose_fine(chair, "alice", 5, "Late")

        member = await store.find_one(MEMBERS, {"id": alice.member_id})
        assert member is not None
        assert member["fines"] == 0
        assert store.documents(FINES) == []

    async def test_failed_total_update_removes_fine_record(
        self,
        chamber: ChamberService,
        store: DocumentStoreStub,
        broadcaster: RecordingBroadcasterStub,
        chair: ActorContext,
        alice: ActorContext,
    ) -> None:
        store.fail_writes_for(MEMBERS, alice.member_id)

        with pytest.raises(StoreError):
            await chamber.impose_fine(chair, "alice", 5, "Late")

        store.heal()
        member = await store.find_one(MEMBERS, {"id": alice.member_id})
        assert member is not None
        assert member["fines"] == 0
        assert store.documents(FINES) == []
        assert broadcaster.messages() == []

    async def test_member_cannot_fine(
        self, chamber: ChamberService, alice: ActorContext, bob: ActorContext
    ) -> None:
        with pytest.raises(PermissionDeniedError):
            await chamber.impose_fine(alice, "bob", 5, "Late")

    async def test_list_fines_filters_by_username(
        self,
        chamber: ChamberService,
        chair: ActorContext,
        alice: ActorContext,
        bob: ActorContext,
    ) -> None:
        await chamber.impose_fine(chair, "alice", 1, "Late")
        await chamber.impose_fine(chair, "bob", 2, "Late")
        await chamber.impose_fine(chair, "alice", 3, "Later")

        alice_fines = await chamber.list_fines("alice")

        assert [fine.amount for fine in alice_fines] == [3, 1]
        assert len(await chamber.list_fines()) == 3
