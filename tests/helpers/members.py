"""Member factories for session tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from src.application.dtos.identity import ActorContext
from src.application.ports.document_store import MEMBERS, DocumentStoreProtocol
from src.domain.models.member import Member, MemberRole, SeatStatus

BASE_TIME = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def make_member(
    member_id: str,
    strength: int = 1,
    affiliation: str = "",
    present: bool = True,
    role: MemberRole = MemberRole.MEMBER,
    seat_status: SeatStatus = SeatStatus.NEUTRAL,
    changed_minutes: int = 0,
) -> Member:
    """Build a member without going through registration."""
    return Member(
        id=member_id,
        username=member_id,
        role=role,
        party_affiliation=affiliation,
        electoral_strength=strength,
        present=present,
        seat_status=seat_status,
        status_changed_at=BASE_TIME + timedelta(minutes=changed_minutes),
        registered_at=BASE_TIME,
    )


async def seed_member(store: DocumentStoreProtocol, **kwargs: Any) -> ActorContext:
    """Insert a member document and return its actor context."""
    member = make_member(**kwargs)
    await store.insert_one(MEMBERS, member.to_document())
    return ActorContext.from_member(member)
