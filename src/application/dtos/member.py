"""Member directory request objects."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class MemberUpdate:
    """One row of a chair's bulk member edit.

    Fields left as None are not changed.
    """

    member_id: str
    electoral_strength: int | None = None
    party_affiliation: str | None = None
    role: str | None = None
