"""Member directory and seat registry errors."""

from __future__ import annotations

from typing import Any

from src.domain.errors.common import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)


class MemberNotFoundError(NotFoundError):
    """Raised when no member matches the given id or username."""

    problem_type = "member:not-found"
    title = "Member Not Found"

    def __init__(self, member_ref: str) -> None:
        self.member_ref = member_ref
        super().__init__(f"Member '{member_ref}' not found")


class DuplicateUsernameError(ConflictError):
    """Raised when registering a username that is already taken."""

    problem_type = "member:duplicate-username"
    title = "Username Taken"

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"Username '{username}' already exists")


class SeatAlreadyTakenError(ConflictError):
    """Raised when a member who is already seated tries to join again."""

    problem_type = "seat:already-seated"
    title = "Already Seated"

    def __init__(self, member_id: str) -> None:
        self.member_id = member_id
        super().__init__("Member is already in a seat")


class SelfObjectionLockError(PermissionDeniedError):
    """Raised when a member tries to change their own objecting status.

    Only the chair can clear an objection.
    """

    problem_type = "seat:objection-locked"
    title = "Objection Locked"

    def __init__(self) -> None:
        super().__init__("Only the chair can clear an objection")


class ConcurrentSeatUpdateError(ConflictError):
    """Raised when a seat status kept changing under a compare-and-set.

    Attributes:
        member_id: Target member.
        attempts: Number of compare-and-set attempts made.
    """

    problem_type = "seat:concurrent-update"
    title = "Concurrent Seat Update"

    def __init__(self, member_id: str, attempts: int) -> None:
        self.member_id = member_id
        self.attempts = attempts
        super().__init__(
            f"Seat status of member {member_id} changed concurrently "
            f"{attempts} time(s); retry the request"
        )

    def problem_extensions(self) -> dict[str, Any]:
        return {"attempts": self.attempts}
