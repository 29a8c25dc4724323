"""Pydantic API response models used in OpenAPI contracts."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from workout_tracker.auth.models import AccountProfile
from workout_tracker.workouts.models import (
    Exercise,
    ScheduledWorkout,
    UpcomingSchedule,
    Workout,
    WorkoutReport,
)


class ApiErrorResponse(BaseModel):
    """Stable error envelope for API responses."""

    error_code: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error message")


class HealthResponse(BaseModel):
    status: Literal["ok"]


class AuthSessionResponse(BaseModel):
    """Access/refresh token pair returned by login and refresh."""

    access_token: str
    refresh_token: str
    token_type: str
    expires_in: int


class SignUpResponse(BaseModel):
    user: AccountProfile


class AuthMeResponse(BaseModel):
    user: AccountProfile


class LogoutResponse(BaseModel):
    status: Literal["ok"]


class WorkoutResponse(BaseModel):
    workout: Workout


class WorkoutListResponse(BaseModel):
    items: list[Workout]


class ExerciseListResponse(BaseModel):
    items: list[Exercise]


class ScheduleResponse(BaseModel):
    schedule: ScheduledWorkout


class UpcomingSchedulesResponse(BaseModel):
    items: list[UpcomingSchedule]


class WorkoutReportsResponse(BaseModel):
    items: list[WorkoutReport]
