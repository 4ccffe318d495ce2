"""Domain errors for the parliament session service.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from ParliamentError.
"""

from src.domain.errors.common import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    SessionValidationError,
)
from src.domain.errors.member import (
    ConcurrentSeatUpdateError,
    DuplicateUsernameError,
    MemberNotFoundError,
    SeatAlreadyTakenError,
    SelfObjectionLockError,
)
from src.domain.errors.proposal import ProposalNotFoundError, VotingClosedError
from src.domain.errors.store import (
    DuplicateDocumentError,
    StoreError,
    TallyIncompleteError,
)

__all__: list[str] = [
    "AuthenticationError",
    "ConcurrentSeatUpdateError",
    "ConflictError",
    "DuplicateDocumentError",
    "DuplicateUsernameError",
    "MemberNotFoundError",
    "NotFoundError",
    "PermissionDeniedError",
    "ProposalNotFoundError",
    "SeatAlreadyTakenError",
    "SelfObjectionLockError",
    "SessionValidationError",
    "StoreError",
    "TallyIncompleteError",
    "VotingClosedError",
]
