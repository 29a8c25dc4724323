"""Public API response contracts."""

from workout_tracker.api.contracts.models import (
    ApiErrorResponse,
    AuthMeResponse,
    AuthSessionResponse,
    ExerciseListResponse,
    HealthResponse,
    LogoutResponse,
    ScheduleResponse,
    SignUpResponse,
    UpcomingSchedulesResponse,
    WorkoutListResponse,
    WorkoutReportsResponse,
    WorkoutResponse,
)

__all__ = [
    "ApiErrorResponse",
    "AuthMeResponse",
    "AuthSessionResponse",
    "ExerciseListResponse",
    "HealthResponse",
    "LogoutResponse",
    "ScheduleResponse",
    "SignUpResponse",
    "UpcomingSchedulesResponse",
    "WorkoutListResponse",
    "WorkoutReportsResponse",
    "WorkoutResponse",
]
