"""Credential hashing port."""

from __future__ import annotations

from typing import Protocol


class PasswordHasherProtocol(Protocol):
    """Protocol for salted one-way password hashing."""

    def hash_password(self, password: str) -> str:
        """Return an encoded salted hash of ``password``."""
        ...

    def verify_password(self, password: str, encoded: str) -> bool:
        """Check ``password`` against an encoded hash in constant time."""
        ...
