"""PBKDF2-SHA256 password hasher.

Encoded form: ``pbkdf2_sha256$<iterations>$<salt hex>$<digest hex>``.
The iteration count travels with the hash, so raising it later does not
invalidate existing credentials.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets

ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 260_000
SALT_BYTES = 16


class Pbkdf2PasswordHasher:
    """PasswordHasherProtocol implementation using hashlib.pbkdf2_hmac."""

    def __init__(self, iterations: int = DEFAULT_ITERATIONS) -> None:
        if iterations < 1:
            raise ValueError("iterations must be positive")
        self._iterations = iterations

    def hash_password(self, password: str) -> str:
        salt = secrets.token_bytes(SALT_BYTES)
        digest = hashlib.pbkdf2_hmac(
            "sha256", password.encode("utf-8"), salt, self._iterations
        )
        return f"{ALGORITHM}${self._iterations}${salt.hex()}${digest.hex()}"

    def verify_password(self, password: str, encoded: str) -> bool:
        try:
            algorithm, iterations, salt_hex, digest_hex = encoded.split("$")
            salt = bytes.fromhex(salt_hex)
            expected = bytes.fromhex(digest_hex)
            rounds = int(iterations)
        except ValueError:
            return False
        if algorithm != ALGORITHM:
            return False

        actual = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, rounds)
        return hmac.compare_digest(actual, expected)
