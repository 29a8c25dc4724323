"""Password hashing with a tunable PBKDF2 work factor."""

from __future__ import annotations

import base64
import hashlib
import hmac
import os

HASH_ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 310_000
SALT_BYTES = 16


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("utf-8").rstrip("=")


def _b64url_decode(value: str) -> bytes:
    padding = "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode((value + padding).encode("utf-8"))


class PasswordHasher:
    """Salted one-way password hashing.

    Hashes are self-describing (``pbkdf2_sha256$<rounds>$<salt>$<digest>``),
    so raising ``iterations`` later still verifies hashes stored with the old
    work factor.
    """

    def __init__(self, iterations: int = DEFAULT_ITERATIONS) -> None:
        if iterations < 1:
            raise ValueError("iterations must be positive")
        self._iterations = iterations
        # Verified against when no account exists, so unknown emails cost the
        # same CPU time as wrong passwords.
        self._dummy_hash = self.hash(_b64url_encode(os.urandom(SALT_BYTES)))

    @property
    def iterations(self) -> int:
        return self._iterations

    def hash(self, password: str) -> str:
        """Hash ``password`` with a fresh random salt."""
        salt = os.urandom(SALT_BYTES)
        derived = self._derive(password, salt, self._iterations)
        return (
            f"{HASH_ALGORITHM}${self._iterations}$"
            f"{_b64url_encode(salt)}${_b64url_encode(derived)}"
        )

    def verify(self, password: str, stored_hash: str) -> bool:
        """Return whether ``password`` matches ``stored_hash``.

        Malformed hashes never match.
        """
        try:
            algo, rounds_raw, salt_b64, digest_b64 = stored_hash.split("$", 3)
            rounds = int(rounds_raw)
            salt = _b64url_decode(salt_b64)
            expected = _b64url_decode(digest_b64)
        except (ValueError, TypeError, AttributeError):
            return False
        if algo != HASH_ALGORITHM or rounds < 1:
            return False

        derived = self._derive(password, salt, rounds)
        return hmac.compare_digest(derived, expected)

    def burn(self, password: str) -> None:
        """Spend one verification's worth of work without a real hash."""
        self.verify(password, self._dummy_hash)

    @staticmethod
    def _derive(password: str, salt: bytes, rounds: int) -> bytes:
        return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, rounds)
