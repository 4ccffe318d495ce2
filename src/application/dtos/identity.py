"""Authenticated caller identity passed into every session operation."""

from __future__ import annotations

from dataclasses import dataclass

from src.domain.models.member import Member, MemberRole


@dataclass(frozen=True)
class ActorContext:
    """Who is performing an action.

    Attributes:
        member_id: Authenticated member id.
        username: Authenticated username.
        role: MEMBER or CHAIR.
        electoral_strength: Base electoral strength at request time.
    """

    member_id: str
    username: str
    role: MemberRole
    electoral_strength: int

    @property
    def is_chair(self) -> bool:
        return self.role == MemberRole.CHAIR

    @classmethod
    def from_member(cls, member: Member) -> ActorContext:
        return cls(
            member_id=member.id,
            username=member.username,
            role=member.role,
            electoral_strength=member.electoral_strength,
        )
