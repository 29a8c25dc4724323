from __future__ import annotations

import pytest

from workout_tracker.api.errors import api_error_from_domain, to_error_payload
from workout_tracker.core.errors import (
    ConflictError,
    InvalidTokenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
    WorkoutTrackerError,
)


def test_to_error_payload_preserves_structured_detail() -> None:
    payload = to_error_payload(
        {"error_code": "AUTH_TOKEN_INVALID", "message": "Invalid"},
        401,
    )

    assert payload == {"error_code": "AUTH_TOKEN_INVALID", "message": "Invalid"}


def test_to_error_payload_normalizes_plain_string() -> None:
    payload = to_error_payload("boom", 500)

    assert payload == {"error_code": "HTTP_500", "message": "boom"}


@pytest.mark.parametrize(
    ("exc", "status_code", "error_code"),
    [
        (ValidationError("bad"), 400, "VALIDATION_ERROR"),
        (ConflictError("dup"), 409, "ACCOUNT_CONFLICT"),
        (UnauthorizedError("not yours"), 403, "RESOURCE_NOT_OWNED"),
        (NotFoundError("gone"), 404, "RESOURCE_NOT_FOUND"),
        (InvalidTokenError("forged"), 401, "AUTH_TOKEN_INVALID"),
    ],
)
def test_domain_errors_map_to_status_and_code(
    exc: WorkoutTrackerError, status_code: int, error_code: str
) -> None:
    api_error = api_error_from_domain(exc)

    assert api_error.status_code == status_code
    assert api_error.detail == {"error_code": error_code, "message": exc.message}


def test_unmapped_domain_error_is_internal_without_leaking_message() -> None:
    api_error = api_error_from_domain(WorkoutTrackerError("db password is hunter2"))

    assert api_error.status_code == 500
    assert api_error.detail["message"] == "Internal server error"
