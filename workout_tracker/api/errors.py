"""Shared API error types and helpers."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from fastapi import HTTPException

from workout_tracker.core.errors import (
    ConflictError,
    InvalidTokenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
    WorkoutTrackerError,
)


class ApiErrorCode(StrEnum):
    """Machine-readable API error codes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    ACCOUNT_CONFLICT = "ACCOUNT_CONFLICT"
    AUTH_MISSING_TOKEN = "AUTH_MISSING_TOKEN"
    AUTH_INVALID_CREDENTIALS = "AUTH_INVALID_CREDENTIALS"
    AUTH_REFRESH_REJECTED = "AUTH_REFRESH_REJECTED"
    AUTH_TOKEN_INVALID = "AUTH_TOKEN_INVALID"
    RESOURCE_NOT_OWNED = "RESOURCE_NOT_OWNED"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    REQUEST_TOO_LARGE = "REQUEST_TOO_LARGE"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class ApiError(HTTPException):
    """HTTP exception carrying stable API error envelope."""

    def __init__(
        self, *, status_code: int, error_code: ApiErrorCode, message: str
    ) -> None:
        super().__init__(
            status_code=status_code,
            detail={"error_code": str(error_code), "message": message},
        )


# Most specific classes first; lookup walks the exception's MRO.
DOMAIN_ERROR_STATUS: dict[type[WorkoutTrackerError], tuple[int, ApiErrorCode]] = {
    ValidationError: (400, ApiErrorCode.VALIDATION_ERROR),
    ConflictError: (409, ApiErrorCode.ACCOUNT_CONFLICT),
    UnauthorizedError: (403, ApiErrorCode.RESOURCE_NOT_OWNED),
    NotFoundError: (404, ApiErrorCode.RESOURCE_NOT_FOUND),
    InvalidTokenError: (401, ApiErrorCode.AUTH_TOKEN_INVALID),
}


def api_error_from_domain(exc: WorkoutTrackerError) -> ApiError:
    """Translate a domain failure into its HTTP status and error code."""
    for cls in type(exc).__mro__:
        mapped = DOMAIN_ERROR_STATUS.get(cls)  # type: ignore[arg-type]
        if mapped is not None:
            status_code, error_code = mapped
            return ApiError(
                status_code=status_code, error_code=error_code, message=exc.message
            )
    return ApiError(
        status_code=500,
        error_code=ApiErrorCode.INTERNAL_SERVER_ERROR,
        message="Internal server error",
    )


def to_error_payload(detail: Any, status_code: int) -> dict[str, str]:
    """Normalize HTTP exception detail into stable error payload."""
    if isinstance(detail, dict):
        error_code = str(detail.get("error_code") or f"HTTP_{status_code}")
        message = str(detail.get("message") or detail.get("detail") or "HTTP error")
        return {"error_code": error_code, "message": message}
    return {
        "error_code": f"HTTP_{status_code}",
        "message": str(detail or "HTTP error"),
    }
