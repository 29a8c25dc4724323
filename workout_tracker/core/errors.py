"""Domain error taxonomy shared by the auth and scheduling services."""

from __future__ import annotations


class WorkoutTrackerError(Exception):
    """Base class for failures that the API boundary maps to a response."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(WorkoutTrackerError):
    """Malformed input rejected before any store access."""


class ConflictError(WorkoutTrackerError):
    """Resource already exists (duplicate account email)."""


class UnauthorizedError(WorkoutTrackerError):
    """Requester does not own the resource it tries to act on."""


class NotFoundError(WorkoutTrackerError):
    """Referenced entity is absent or soft-deleted."""


class InvalidTokenError(WorkoutTrackerError):
    """Token signature, algorithm or claim structure is invalid."""


class ConfigError(RuntimeError):
    """Required configuration is missing or malformed at startup."""
