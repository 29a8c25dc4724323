"""FastAPI router for workout, schedule and report endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request

from workout_tracker.api.contracts import (
    ApiErrorResponse,
    ExerciseListResponse,
    ScheduleResponse,
    UpcomingSchedulesResponse,
    WorkoutListResponse,
    WorkoutReportsResponse,
    WorkoutResponse,
)
from workout_tracker.auth.router import current_user
from workout_tracker.workouts.models import (
    ScheduleRequest,
    ScheduleStatusRequest,
    WorkoutWriteRequest,
)
from workout_tracker.workouts.service import WorkoutService

_OWNED_RESOURCE_ERRORS = {
    401: {"model": ApiErrorResponse},
    403: {"model": ApiErrorResponse},
    404: {"model": ApiErrorResponse},
}


class WorkoutRouter:
    """Factory wrapper that builds the workouts API router from a service."""

    def __init__(self, service: WorkoutService) -> None:
        self._service = service

    def build(self) -> APIRouter:
        """Create and return configured workouts router.

        Fixed paths are registered before ``/api/workouts/{workout_id}`` so
        they are not captured as identifiers.
        """
        router = APIRouter(tags=["workouts"])

        @router.get("/api/workouts", response_model=WorkoutListResponse)
        def list_workouts(request: Request) -> WorkoutListResponse:
            """List the caller's active workouts, newest first."""
            user = current_user(request)
            return WorkoutListResponse(items=self._service.list_workouts(user.user_id))

        @router.post(
            "/api/workouts",
            response_model=WorkoutResponse,
            status_code=201,
            responses={400: {"model": ApiErrorResponse}, 401: {"model": ApiErrorResponse}},
        )
        def create_workout(req: WorkoutWriteRequest, request: Request) -> WorkoutResponse:
            user = current_user(request)
            workout = self._service.create_workout(
                user.user_id, req.name, req.comment, req.exercises
            )
            return WorkoutResponse(workout=workout)

        @router.get("/api/workouts/exercises", response_model=ExerciseListResponse)
        def list_exercises() -> ExerciseListResponse:
            """Exercise reference data."""
            return ExerciseListResponse(items=self._service.list_exercises())

        @router.get("/api/workouts/reports", response_model=WorkoutReportsResponse)
        def completed_reports(request: Request) -> WorkoutReportsResponse:
            """Workouts the caller has completed at least once."""
            user = current_user(request)
            return WorkoutReportsResponse(
                items=self._service.generate_completed_report(user.user_id)
            )

        @router.post(
            "/api/workouts/schedules",
            response_model=ScheduleResponse,
            status_code=201,
            responses=_OWNED_RESOURCE_ERRORS,
        )
        def schedule_workout(req: ScheduleRequest, request: Request) -> ScheduleResponse:
            user = current_user(request)
            schedule = self._service.schedule_workout(
                user.user_id, req.workout_id, req.scheduled_date
            )
            return ScheduleResponse(schedule=schedule)

        @router.get(
            "/api/workouts/schedules/upcoming",
            response_model=UpcomingSchedulesResponse,
        )
        def upcoming_schedules(request: Request) -> UpcomingSchedulesResponse:
            """Pending schedules from now on, soonest first."""
            user = current_user(request)
            return UpcomingSchedulesResponse(
                items=self._service.list_upcoming_schedules(user.user_id)
            )

        @router.patch(
            "/api/workouts/schedules/{schedule_id}/status",
            status_code=204,
            responses={400: {"model": ApiErrorResponse}, **_OWNED_RESOURCE_ERRORS},
        )
        def update_schedule_status(
            schedule_id: str, req: ScheduleStatusRequest, request: Request
        ) -> None:
            user = current_user(request)
            self._service.update_schedule_status(schedule_id, user.user_id, req.status)

        @router.get(
            "/api/workouts/{workout_id}",
            response_model=WorkoutResponse,
            responses=_OWNED_RESOURCE_ERRORS,
        )
        def get_workout(workout_id: str, request: Request) -> WorkoutResponse:
            user = current_user(request)
            return WorkoutResponse(
                workout=self._service.get_workout(user.user_id, workout_id)
            )

        @router.put(
            "/api/workouts/{workout_id}",
            response_model=WorkoutResponse,
            responses={400: {"model": ApiErrorResponse}, **_OWNED_RESOURCE_ERRORS},
        )
        def update_workout(
            workout_id: str, req: WorkoutWriteRequest, request: Request
        ) -> WorkoutResponse:
            """Replace name, comment and the whole exercise list."""
            user = current_user(request)
            workout = self._service.update_workout(
                user.user_id, workout_id, req.name, req.comment, req.exercises
            )
            return WorkoutResponse(workout=workout)

        @router.delete(
            "/api/workouts/{workout_id}",
            status_code=204,
            responses=_OWNED_RESOURCE_ERRORS,
        )
        def delete_workout(workout_id: str, request: Request) -> None:
            user = current_user(request)
            self._service.delete_workout(user.user_id, workout_id)

        return router


def create_workout_router(service: WorkoutService) -> APIRouter:
    """Create workouts router using provided application service."""
    return WorkoutRouter(service=service).build()
