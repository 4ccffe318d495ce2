"""Credential adapters."""

from src.infrastructure.adapters.security.pbkdf2_password_hasher import (
    Pbkdf2PasswordHasher,
)

__all__: list[str] = ["Pbkdf2PasswordHasher"]
