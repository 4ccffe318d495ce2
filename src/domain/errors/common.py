"""Error categories shared by every session component.

Each category fixes the HTTP status of its subclasses:

- SessionValidationError: empty or malformed input, rejected before any write (400)
- AuthenticationError: missing identity or bad credentials (401)
- PermissionDeniedError: role or ownership check failed (403)
- NotFoundError: unknown member or proposal (404)
- ConflictError: state does not allow the operation (409)
"""

from __future__ import annotations

from typing import Any

from src.domain.exceptions import ParliamentError


class SessionValidationError(ParliamentError):
    """Raised when a request field is empty or holds an invalid value.

    Attributes:
        field: Name of the offending field, when known.
    """

    status_code = 400
    problem_type = "validation"
    title = "Invalid Request"

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)

    def problem_extensions(self) -> dict[str, Any]:
        return {"field": self.field} if self.field else {}


class AuthenticationError(ParliamentError):
    """Raised when the caller cannot be identified."""

    status_code = 401
    problem_type = "authentication"
    title = "Not Authenticated"


class PermissionDeniedError(ParliamentError):
    """Raised when the actor's role does not allow the operation.

    The message never includes data about the target member beyond what
    the caller already supplied.
    """

    status_code = 403
    problem_type = "permission-denied"
    title = "Permission Denied"


class NotFoundError(ParliamentError):
    """Raised when a referenced entity does not exist."""

    status_code = 404
    problem_type = "not-found"
    title = "Not Found"


class ConflictError(ParliamentError):
    """Raised when the current state forbids the requested change."""

    status_code = 409
    problem_type = "conflict"
    title = "Conflict"
