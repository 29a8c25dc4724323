"""Pydantic models for workouts, schedules and exercise reference data."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator

from workout_tracker.core.clock import ensure_utc


class WorkoutState(StrEnum):
    """Lifecycle tag of a workout; deletion never removes the row."""

    ACTIVE = "active"
    DELETED = "deleted"


class ScheduleStatus(StrEnum):
    """Known schedule statuses.

    The stored status is an open string; these are the values the service
    itself produces or queries for.
    """

    PENDING = "Pending"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class WorkoutExercise(BaseModel):
    """One exercise line of a workout."""

    exercise_id: int
    sets: int = 0
    repetitions: int = 0
    weight: float = 0.0


class WorkoutExerciseInput(BaseModel):
    """Exercise line as submitted by a client; omitted numbers mean zero."""

    exercise_id: int
    sets: int | None = Field(default=None, ge=0)
    repetitions: int | None = Field(default=None, ge=0)
    weight: float | None = Field(default=None, ge=0)

    def to_line(self) -> WorkoutExercise:
        return WorkoutExercise(
            exercise_id=self.exercise_id,
            sets=self.sets or 0,
            repetitions=self.repetitions or 0,
            weight=float(self.weight or 0),
        )


class Workout(BaseModel):
    workout_id: str
    user_id: str
    name: str
    comment: str | None = None
    created_at: datetime
    last_updated_at: datetime | None = None
    state: WorkoutState = WorkoutState.ACTIVE
    deleted_at: datetime | None = None
    exercises: list[WorkoutExercise] = Field(default_factory=list)

    @property
    def is_deleted(self) -> bool:
        return self.state == WorkoutState.DELETED


class WorkoutSchedule(BaseModel):
    schedule_id: str
    workout_id: str
    scheduled_date: datetime
    status: str


class ScheduledWorkout(BaseModel):
    """Newly created schedule with the workout's exercise lines at that moment."""

    schedule_id: str
    workout_id: str
    scheduled_date: datetime
    status: str
    exercises: list[WorkoutExercise]


class UpcomingSchedule(BaseModel):
    schedule_id: str
    workout_id: str
    scheduled_date: datetime
    status: str
    workout: Workout


class Exercise(BaseModel):
    """Exercise reference data."""

    exercise_id: int
    name: str
    description: str | None = None
    category: str
    created_at: datetime | None = None


class ReportExerciseLine(BaseModel):
    exercise_id: int
    exercise_name: str
    category: str
    sets: int
    repetitions: int
    weight: float


class WorkoutReport(BaseModel):
    workout_id: str
    name: str
    comment: str | None = None
    created_at: datetime
    exercises: list[ReportExerciseLine]


class WorkoutWriteRequest(BaseModel):
    """Body for creating or replacing a workout."""

    name: str = Field(min_length=1)
    comment: str | None = None
    exercises: list[WorkoutExerciseInput] = Field(default_factory=list)


class ScheduleRequest(BaseModel):
    workout_id: str = Field(min_length=1)
    scheduled_date: datetime

    @field_validator("scheduled_date")
    @classmethod
    def scheduled_date_as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class ScheduleStatusRequest(BaseModel):
    status: str
