"""Workout ownership rules and schedule lifecycle."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Protocol

from workout_tracker.core.clock import Clock, ensure_utc, utc_now
from workout_tracker.core.errors import NotFoundError, UnauthorizedError, ValidationError
from workout_tracker.workouts.models import (
    Exercise,
    ReportExerciseLine,
    ScheduledWorkout,
    ScheduleStatus,
    UpcomingSchedule,
    Workout,
    WorkoutExercise,
    WorkoutExerciseInput,
    WorkoutReport,
    WorkoutSchedule,
    WorkoutState,
)

LOGGER = logging.getLogger(__name__)


class WorkoutRepositoryProtocol(Protocol):
    """Workout store operations used by the workout service."""

    def add(self, workout: Workout) -> Workout:
        """Persist a new workout with its exercise lines."""

    def update(self, workout: Workout) -> Workout:
        """Overwrite a workout and replace its exercise lines."""

    def soft_delete(self, workout_id: str, deleted_at: datetime) -> None:
        """Tag a workout as deleted."""

    def get_by_id(self, workout_id: str, *, include_deleted: bool = False) -> Workout | None:
        """Return a workout, or ``None``; deleted ones only when asked."""

    def list_by_owner(self, user_id: str) -> list[Workout]:
        """Return active workouts owned by ``user_id``."""

    def add_schedule(self, schedule: WorkoutSchedule) -> WorkoutSchedule:
        """Persist a new schedule."""

    def upcoming_schedules(self, user_id: str, now: datetime) -> list[UpcomingSchedule]:
        """Return pending future schedules on active workouts, soonest first."""

    def completed_workouts(self, user_id: str) -> list[Workout]:
        """Return active workouts with a completed schedule, newest first."""

    def update_schedule_status(self, schedule_id: str, user_id: str, status: str) -> bool:
        """Set a schedule's status if ``user_id`` owns its active workout."""

    def all_exercise_ref_data(self) -> list[Exercise]:
        """Return exercise reference data."""


class WorkoutService:
    """Application service enforcing workout ownership and soft deletion."""

    def __init__(
        self, *, repo: WorkoutRepositoryProtocol, clock: Clock = utc_now
    ) -> None:
        self._repo = repo
        self._clock = clock

    def create_workout(
        self,
        owner_id: str,
        name: str,
        comment: str | None,
        exercises: list[WorkoutExerciseInput],
    ) -> Workout:
        workout = Workout(
            workout_id=uuid.uuid4().hex,
            user_id=owner_id,
            name=self._clean_name(name),
            comment=comment,
            created_at=self._clock(),
            state=WorkoutState.ACTIVE,
            exercises=self._exercise_lines(exercises),
        )
        created = self._repo.add(workout)
        LOGGER.info(
            "workout_created",
            extra={"user_id": owner_id, "workout_id": created.workout_id},
        )
        return created

    def get_workout(self, requester_id: str, workout_id: str) -> Workout:
        return self._load_owned(requester_id, workout_id)

    def list_workouts(self, user_id: str) -> list[Workout]:
        return self._repo.list_by_owner(user_id)

    def update_workout(
        self,
        requester_id: str,
        workout_id: str,
        name: str,
        comment: str | None,
        exercises: list[WorkoutExerciseInput],
    ) -> Workout:
        """Replace name, comment and the full exercise list of an owned workout.

        ``created_at`` is kept; ``last_updated_at`` is stamped now.
        """
        existing = self._load_owned(requester_id, workout_id)
        updated = existing.model_copy(
            update={
                "name": self._clean_name(name),
                "comment": comment,
                "last_updated_at": self._clock(),
                "exercises": self._exercise_lines(exercises),
            }
        )
        result = self._repo.update(updated)
        LOGGER.info(
            "workout_updated",
            extra={"user_id": requester_id, "workout_id": workout_id},
        )
        return result

    def delete_workout(self, requester_id: str, workout_id: str) -> None:
        """Soft-delete an owned workout. Deleting twice is a no-op."""
        workout = self._repo.get_by_id(workout_id, include_deleted=True)
        if workout is None:
            raise NotFoundError(f"Workout {workout_id} not found.")
        self._assert_owner(workout, requester_id)
        if workout.is_deleted:
            return
        self._repo.soft_delete(workout_id, self._clock())
        LOGGER.info(
            "workout_deleted",
            extra={"user_id": requester_id, "workout_id": workout_id},
        )

    def schedule_workout(
        self, requester_id: str, workout_id: str, scheduled_date: datetime
    ) -> ScheduledWorkout:
        """Create a pending schedule and return it with an exercise snapshot."""
        workout = self._load_owned(requester_id, workout_id)
        schedule = self._repo.add_schedule(
            WorkoutSchedule(
                schedule_id=uuid.uuid4().hex,
                workout_id=workout.workout_id,
                scheduled_date=ensure_utc(scheduled_date),
                status=ScheduleStatus.PENDING.value,
            )
        )
        LOGGER.info(
            "workout_scheduled",
            extra={
                "user_id": requester_id,
                "workout_id": workout_id,
                "schedule_id": schedule.schedule_id,
            },
        )
        return ScheduledWorkout(
            schedule_id=schedule.schedule_id,
            workout_id=schedule.workout_id,
            scheduled_date=schedule.scheduled_date,
            status=schedule.status,
            exercises=[line.model_copy() for line in workout.exercises],
        )

    def list_upcoming_schedules(self, user_id: str) -> list[UpcomingSchedule]:
        return self._repo.upcoming_schedules(user_id, self._clock())

    def update_schedule_status(
        self, schedule_id: str, requester_id: str, new_status: str
    ) -> None:
        """Overwrite a schedule's status.

        Any non-blank status is accepted from any current status.
        """
        status = (new_status or "").strip()
        if not status:
            raise ValidationError("Status must not be empty.")
        if not self._repo.update_schedule_status(schedule_id, requester_id, status):
            raise NotFoundError(f"Workout schedule {schedule_id} not found.")
        LOGGER.info(
            "schedule_status_updated",
            extra={"user_id": requester_id, "schedule_id": schedule_id},
        )

    def generate_completed_report(self, user_id: str) -> list[WorkoutReport]:
        """Workouts with at least one completed schedule, with exercise names joined in."""
        reference = {item.exercise_id: item for item in self._repo.all_exercise_ref_data()}
        reports: list[WorkoutReport] = []
        for workout in self._repo.completed_workouts(user_id):
            lines = []
            for line in workout.exercises:
                exercise = reference.get(line.exercise_id)
                lines.append(
                    ReportExerciseLine(
                        exercise_id=line.exercise_id,
                        exercise_name=exercise.name if exercise else "",
                        category=exercise.category if exercise else "",
                        sets=line.sets,
                        repetitions=line.repetitions,
                        weight=line.weight,
                    )
                )
            reports.append(
                WorkoutReport(
                    workout_id=workout.workout_id,
                    name=workout.name,
                    comment=workout.comment,
                    created_at=workout.created_at,
                    exercises=lines,
                )
            )
        return reports

    def list_exercises(self) -> list[Exercise]:
        return self._repo.all_exercise_ref_data()

    def _load_owned(self, requester_id: str, workout_id: str) -> Workout:
        workout = self._repo.get_by_id(workout_id)
        if workout is None:
            raise NotFoundError(f"Workout {workout_id} not found.")
        self._assert_owner(workout, requester_id)
        return workout

    @staticmethod
    def _assert_owner(workout: Workout, requester_id: str) -> None:
        if workout.user_id != requester_id:
            LOGGER.warning(
                "workout_ownership_rejected",
                extra={"user_id": requester_id, "workout_id": workout.workout_id},
            )
            raise UnauthorizedError("You can only modify your own workouts.")

    @staticmethod
    def _clean_name(name: str) -> str:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationError("Workout name is required.")
        return cleaned

    def _exercise_lines(
        self, exercises: list[WorkoutExerciseInput]
    ) -> list[WorkoutExercise]:
        """Convert submitted lines, rejecting ids missing from reference data."""
        if not exercises:
            return []
        known = {item.exercise_id for item in self._repo.all_exercise_ref_data()}
        unknown = sorted({line.exercise_id for line in exercises} - known)
        if unknown:
            raise ValidationError(
                "Unknown exercise id(s): " + ", ".join(str(item) for item in unknown)
            )
        return [line.to_line() for line in exercises]
