from __future__ import annotations

import pytest

from workout_tracker.core.security import PasswordHasher


def test_hash_is_salted_and_verifies() -> None:
    hasher = PasswordHasher(iterations=1000)

    first = hasher.hash("Str0ng!Pass")
    second = hasher.hash("Str0ng!Pass")

    assert first != second
    assert first.startswith("pbkdf2_sha256$1000$")
    assert "Str0ng!Pass" not in first
    assert hasher.verify("Str0ng!Pass", first)
    assert not hasher.verify("Str0ng!Pas", first)


def test_verify_honours_work_factor_stored_in_hash() -> None:
    old = PasswordHasher(iterations=500).hash("Str0ng!Pass")

    assert PasswordHasher(iterations=2000).verify("Str0ng!Pass", old)


@pytest.mark.parametrize(
    "stored",
    ["", "plain-text", "md5$1$abc$def", "pbkdf2_sha256$zero$abc$def", "pbkdf2_sha256$0$abc$def"],
)
def test_verify_rejects_malformed_hashes(stored: str) -> None:
    assert PasswordHasher(iterations=1000).verify("Str0ng!Pass", stored) is False


def test_burn_never_raises() -> None:
    PasswordHasher(iterations=1000).burn("whatever")


def test_rejects_non_positive_iterations() -> None:
    with pytest.raises(ValueError):
        PasswordHasher(iterations=0)
