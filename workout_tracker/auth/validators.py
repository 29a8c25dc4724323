"""Pure input checks run before signup touches the credential store."""

from __future__ import annotations

import re

from workout_tracker.core.errors import ValidationError

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 20
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 25

_USERNAME_RE = re.compile(r"[A-Za-z0-9]+")


def validate_username(username: str) -> None:
    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        raise ValidationError(
            f"Username must be between {USERNAME_MIN_LENGTH} and "
            f"{USERNAME_MAX_LENGTH} characters."
        )
    if not _USERNAME_RE.fullmatch(username):
        raise ValidationError("Username may only contain letters and digits.")


def validate_password(password: str) -> None:
    """Check length and the four required character classes.

    Each class is reported on its own so the caller knows what to fix.
    """
    if not PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH:
        raise ValidationError(
            f"Password must be between {PASSWORD_MIN_LENGTH} and "
            f"{PASSWORD_MAX_LENGTH} characters."
        )
    if not any(ch.isascii() and ch.isupper() for ch in password):
        raise ValidationError("Password must contain an upper-case letter.")
    if not any(ch.isascii() and ch.islower() for ch in password):
        raise ValidationError("Password must contain a lower-case letter.")
    if not any(ch.isascii() and ch.isdigit() for ch in password):
        raise ValidationError("Password must contain a digit.")
    if all(ch.isascii() and ch.isalnum() for ch in password):
        raise ValidationError("Password must contain a special character.")


def validate_email(email: str) -> str:
    """Return the normalized (trimmed, lower-cased) email."""
    normalized = email.strip().lower()
    local, sep, domain = normalized.partition("@")
    if not sep or not local or not domain or " " in normalized:
        raise ValidationError("Email address is not valid.")
    return normalized


def validate_required(value: str | None, field_name: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"{field_name} is required.")
    return cleaned
