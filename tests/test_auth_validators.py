from __future__ import annotations

import pytest

from workout_tracker.auth.validators import (
    validate_email,
    validate_password,
    validate_required,
    validate_username,
)
from workout_tracker.core.errors import ValidationError


@pytest.mark.parametrize("username", ["abc", "abc12", "Runner2024", "a" * 20])
def test_validate_username_accepts_alphanumeric_within_bounds(username: str) -> None:
    validate_username(username)


@pytest.mark.parametrize(
    "username",
    ["ab", "a" * 21, "this_is_too_long_username_21", "abc-123", "john doe", "jöhn"],
)
def test_validate_username_rejects_bad_values(username: str) -> None:
    with pytest.raises(ValidationError):
        validate_username(username)


@pytest.mark.parametrize(
    ("password", "message"),
    [
        ("Sh0rt!", "between 8 and 25"),
        ("Aa1!" * 7, "between 8 and 25"),
        ("lower0!case", "upper-case"),
        ("UPPER0!CASE", "lower-case"),
        ("NoDigits!!", "digit"),
        ("NoSpecial11", "special character"),
    ],
)
def test_validate_password_reports_first_missing_rule(password: str, message: str) -> None:
    with pytest.raises(ValidationError) as exc:
        validate_password(password)

    assert message in exc.value.message


def test_validate_email_normalizes_case_and_whitespace() -> None:
    assert validate_email("  Jane.Doe@Example.COM ") == "jane.doe@example.com"


@pytest.mark.parametrize("email", ["no-at-sign", "@example.com", "jane@", "ja ne@example.com"])
def test_validate_email_rejects_malformed(email: str) -> None:
    with pytest.raises(ValidationError):
        validate_email(email)


def test_validate_required_strips_and_rejects_blank() -> None:
    assert validate_required("  Jane ", "First name") == "Jane"
    with pytest.raises(ValidationError) as exc:
        validate_required("   ", "First name")

    assert exc.value.message == "First name is required."


@pytest.mark.parametrize("password", ["Abcdef1!", "Str0ng!Pass"])
def test_validate_password_accepts_examples(password: str) -> None:
    validate_password(password)


def test_validate_password_rejects_missing_classes_example() -> None:
    with pytest.raises(ValidationError):
        validate_password("abcdefg1")
