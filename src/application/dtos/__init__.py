"""Application DTOs (Data Transfer Objects).

These DTOs carry data across the application boundary. They are
distinct from domain models (immutable business objects) and API models
(Pydantic models for serialization).
"""

from src.application.dtos.identity import ActorContext
from src.application.dtos.member import MemberUpdate

__all__ = [
    "ActorContext",
    "MemberUpdate",
]
