"""Unit tests for Pbkdf2PasswordHasher."""

from __future__ import annotations

import pytest

from src.infrastructure.adapters.security.pbkdf2_password_hasher import (
    Pbkdf2PasswordHasher,
)


class TestPbkdf2PasswordHasher:
    def test_verify_round_trip(self, hasher: Pbkdf2PasswordHasher) -> None:
        encoded = hasher.hash_password("secret")

        assert encoded.startswith("pbkdf2_sha256$1000$")
        assert hasher.verify_password("secret", encoded)
        assert not hasher.verify_password("Secret", encoded)

    def test_salts_differ(self, hasher: Pbkdf2PasswordHasher) -> None:
        assert hasher.hash_password("secret") != hasher.hash_password("secret")

    def test_iteration_count_travels_with_hash(self) -> None:
        encoded = Pbkdf2PasswordHasher(iterations=500).hash_password("secret")

        assert Pbkdf2PasswordHasher(iterations=2_000).verify_password("secret", encoded)

    @pytest.mark.parametrize("encoded", ["", "plain", "md5$1$aa$bb", "pbkdf2_sha256$x$aa$bb"])
    def test_malformed_hash_never_verifies(
        self, hasher: Pbkdf2PasswordHasher, encoded: str
    ) -> None:
        assert hasher.verify_password("secret", encoded) is False

    def test_iterations_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            Pbkdf2PasswordHasher(iterations=0)
