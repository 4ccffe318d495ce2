"""Member domain model: identity, role, affiliation and seat state.

A member is created at registration and mutated by login/logout, seat
actions, chair edits and fines. Members are never deleted in normal
operation.

Seat status state machine:
    NEUTRAL <-> REQUESTING_TO_SPEAK <-> SPEAKING, any -> OBJECTING.
    Every state is reachable from every other through the generic
    status operation; the restrictions are on WHO may drive a change,
    not on the edge itself (see SeatRegistryService).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from src.domain.errors import SessionValidationError

# Strength given to members at registration
DEFAULT_ELECTORAL_STRENGTH = 1


class MemberRole(str, Enum):
    """Roles recognised by the two-role authority check."""

    MEMBER = "MEMBER"
    CHAIR = "CHAIR"

    @classmethod
    def parse(cls, value: str) -> MemberRole:
        """Parse a role name case-insensitively.

        Raises:
            SessionValidationError: If the value is not a known role.
        """
        try:
            return cls(value.strip().upper())
        except (ValueError, AttributeError):
            raise SessionValidationError(
                f"Invalid role '{value}'", field="role"
            ) from None


class SeatStatus(str, Enum):
    """Floor-procedure state of a seated member."""

    NEUTRAL = "NEUTRAL"
    REQUESTING_TO_SPEAK = "REQUESTING_TO_SPEAK"
    SPEAKING = "SPEAKING"
    OBJECTING = "OBJECTING"

    @classmethod
    def parse(cls, value: str) -> SeatStatus:
        """Parse a seat status name.

        Raises:
            SessionValidationError: If the value is not one of the four states.
        """
        try:
            return cls(value.strip().upper())
        except (ValueError, AttributeError):
            raise SessionValidationError(
                f"Invalid seat status '{value}'", field="seatStatus"
            ) from None


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


@dataclass(frozen=True)
class Member:
    """A member of the chamber.

    Attributes:
        id: Opaque member identifier.
        username: Unique login name.
        role: MEMBER or CHAIR.
        party_affiliation: Affiliation label; empty means Independent.
        electoral_strength: Base voting weight, never negative.
        present: Whether the member is currently attending.
        seat_status: Current floor-procedure state.
        fines: Accumulated fine total.
        password_hash: Salted credential hash, never exposed.
        status_changed_at: Time of the last seat status change.
        registered_at: Registration time.
    """

    id: str
    username: str
    role: MemberRole = MemberRole.MEMBER
    party_affiliation: str = ""
    electoral_strength: int = DEFAULT_ELECTORAL_STRENGTH
    present: bool = False
    seat_status: SeatStatus = SeatStatus.NEUTRAL
    fines: int = 0
    password_hash: str = ""
    status_changed_at: datetime | None = None
    registered_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self) -> None:
        if self.electoral_strength < 0:
            raise SessionValidationError(
                "Electoral strength cannot be negative", field="electoralStrength"
            )
        if self.fines < 0:
            raise SessionValidationError("Fines cannot be negative", field="fines")

    @property
    def is_chair(self) -> bool:
        return self.role == MemberRole.CHAIR

    def affiliation_group(self, independent_label: str) -> str:
        """Affiliation label with blanks coerced to the independent label."""
        label = self.party_affiliation.strip()
        return label if label else independent_label

    def with_seat_status(self, status: SeatStatus) -> Member:
        """Copy with a new status; any status change implies attendance."""
        return replace(
            self, seat_status=status, present=True, status_changed_at=_utc_now()
        )

    def to_document(self) -> dict[str, Any]:
        """Serialize for the document store (includes the credential hash)."""
        return {
            "id": self.id,
            "username": self.username,
            "passwordHash": self.password_hash,
            "role": self.role.value,
            "partyAffiliation": self.party_affiliation,
            "electoralStrength": self.electoral_strength,
            "present": self.present,
            "seatStatus": self.seat_status.value,
            "fines": self.fines,
            "statusChangedAt": (
                self.status_changed_at.isoformat() if self.status_changed_at else None
            ),
            "registeredAt": self.registered_at.isoformat(),
        }

    def to_public_dict(self) -> dict[str, Any]:
        """Serialize for clients and events, credential fields stripped."""
        document = self.to_document()
        del document["passwordHash"]
        return document

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> Member:
        """Rebuild a member from its stored document."""
        registered_at = _parse_timestamp(document.get("registeredAt"))
        return cls(
            id=document["id"],
            username=document["username"],
            role=MemberRole(document.get("role", MemberRole.MEMBER.value)),
            party_affiliation=document.get("partyAffiliation") or "",
            electoral_strength=int(
                document.get("electoralStrength", DEFAULT_ELECTORAL_STRENGTH)
            ),
            present=bool(document.get("present", False)),
            seat_status=SeatStatus(
                document.get("seatStatus", SeatStatus.NEUTRAL.value)
            ),
            fines=int(document.get("fines", 0)),
            password_hash=document.get("passwordHash", ""),
            status_changed_at=_parse_timestamp(document.get("statusChangedAt")),
            registered_at=registered_at or _utc_now(),
        )
