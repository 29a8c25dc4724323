from __future__ import annotations

import asyncio
from datetime import timedelta
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tests.factories import (
    STRONG_PASSWORD,
    app_root,
    build_config,
    claims_for,
    make_request,
    route,
)
from workout_tracker.api.errors import ApiError
from workout_tracker.application import create_app
from workout_tracker.auth.models import LoginRequest, RefreshRequest, SignUpRequest
from workout_tracker.core.clock import utc_now
from workout_tracker.core.errors import ConflictError, NotFoundError, UnauthorizedError
from workout_tracker.workouts.models import (
    ScheduleRequest,
    ScheduleStatusRequest,
    WorkoutExerciseInput,
    WorkoutWriteRequest,
)


def _app(tmp_path: Path) -> FastAPI:
    return create_app(build_config(), app_root=app_root(tmp_path))


def _signup_and_login(app: FastAPI, email: str = "jane@test.local"):
    signup = route(app, "/api/auth/signup", "POST")
    login = route(app, "/api/auth/login", "POST")
    created = signup(
        req=SignUpRequest(
            username="jane",
            first_name="Jane",
            email=email,
            password=STRONG_PASSWORD,
        )
    )
    session = login(req=LoginRequest(email=email, password=STRONG_PASSWORD))
    return created.user, session


def test_health_endpoint_contract_function(tmp_path: Path) -> None:
    health = route(_app(tmp_path), "/api/health", "GET")

    assert health().model_dump() == {"status": "ok"}


def test_signup_login_me_and_refresh_flow(tmp_path: Path) -> None:
    app = _app(tmp_path)
    user, session = _signup_and_login(app)
    me = route(app, "/api/auth/me", "GET")
    refresh = route(app, "/api/auth/refresh", "POST")

    profile = me(request=make_request("/api/auth/me", user=claims_for(user.user_id)))
    rotated = refresh(
        req=RefreshRequest(
            access_token=session.access_token, refresh_token=session.refresh_token
        )
    )

    assert profile.user.email == "jane@test.local"
    assert rotated.refresh_token != session.refresh_token
    with pytest.raises(ApiError) as exc:
        refresh(
            req=RefreshRequest(
                access_token=session.access_token, refresh_token=session.refresh_token
            )
        )
    assert exc.value.status_code == 401
    assert exc.value.detail["error_code"] == "AUTH_REFRESH_REJECTED"


def test_signup_duplicate_email_propagates_conflict(tmp_path: Path) -> None:
    app = _app(tmp_path)
    _signup_and_login(app)

    with pytest.raises(ConflictError):
        _signup_and_login(app)


def test_login_with_wrong_password_is_401(tmp_path: Path) -> None:
    app = _app(tmp_path)
    _signup_and_login(app)
    login = route(app, "/api/auth/login", "POST")

    with pytest.raises(ApiError) as exc:
        login(req=LoginRequest(email="jane@test.local", password="Wr0ng!Pass"))

    assert exc.value.status_code == 401
    assert exc.value.detail["error_code"] == "AUTH_INVALID_CREDENTIALS"


def test_logout_blocks_further_refresh(tmp_path: Path) -> None:
    app = _app(tmp_path)
    user, session = _signup_and_login(app)
    logout = route(app, "/api/auth/logout", "POST")
    refresh = route(app, "/api/auth/refresh", "POST")

    payload = logout(request=make_request("/api/auth/logout", "POST", user=claims_for(user.user_id)))

    assert payload.model_dump() == {"status": "ok"}
    with pytest.raises(ApiError):
        refresh(
            req=RefreshRequest(
                access_token=session.access_token, refresh_token=session.refresh_token
            )
        )


def test_protected_endpoint_without_claims_is_401(tmp_path: Path) -> None:
    list_workouts = route(_app(tmp_path), "/api/workouts", "GET")

    with pytest.raises(ApiError) as exc:
        list_workouts(request=make_request("/api/workouts"))

    assert exc.value.status_code == 401


def test_workout_crud_schedule_and_report_endpoints(tmp_path: Path) -> None:
    app = _app(tmp_path)
    owner = make_request("/api/workouts", user=claims_for("u1"))
    create = route(app, "/api/workouts", "POST")
    get_one = route(app, "/api/workouts/{workout_id}", "GET")
    update = route(app, "/api/workouts/{workout_id}", "PUT")
    schedule = route(app, "/api/workouts/schedules", "POST")
    upcoming = route(app, "/api/workouts/schedules/upcoming", "GET")
    set_status = route(app, "/api/workouts/schedules/{schedule_id}/status", "PATCH")
    reports = route(app, "/api/workouts/reports", "GET")

    created = create(
        req=WorkoutWriteRequest(
            name="Leg day",
            exercises=[WorkoutExerciseInput(exercise_id=2, sets=5, repetitions=5)],
        ),
        request=owner,
    ).workout
    update(
        workout_id=created.workout_id,
        req=WorkoutWriteRequest(
            name="Leg day+", exercises=[WorkoutExerciseInput(exercise_id=3)]
        ),
        request=owner,
    )
    fetched = get_one(workout_id=created.workout_id, request=owner).workout
    scheduled = schedule(
        req=ScheduleRequest(
            workout_id=created.workout_id,
            scheduled_date=utc_now() + timedelta(days=1),
        ),
        request=owner,
    ).schedule
    pending = upcoming(request=owner).items
    set_status(
        schedule_id=scheduled.schedule_id,
        req=ScheduleStatusRequest(status="Completed"),
        request=owner,
    )
    completed = reports(request=owner).items

    assert fetched.name == "Leg day+"
    assert [line.exercise_id for line in fetched.exercises] == [3]
    assert [item.schedule_id for item in pending] == [scheduled.schedule_id]
    assert [item.workout_id for item in completed] == [created.workout_id]
    assert completed[0].exercises[0].exercise_name == "Deadlift"
    assert upcoming(request=owner).items == []


def test_workout_endpoints_enforce_ownership(tmp_path: Path) -> None:
    app = _app(tmp_path)
    create = route(app, "/api/workouts", "POST")
    delete = route(app, "/api/workouts/{workout_id}", "DELETE")
    get_one = route(app, "/api/workouts/{workout_id}", "GET")
    created = create(
        req=WorkoutWriteRequest(name="Mine"),
        request=make_request("/api/workouts", user=claims_for("u1")),
    ).workout
    stranger = make_request("/api/workouts", user=claims_for("u2"))
    owner = make_request("/api/workouts", user=claims_for("u1"))

    with pytest.raises(UnauthorizedError):
        delete(workout_id=created.workout_id, request=stranger)

    delete(workout_id=created.workout_id, request=owner)
    delete(workout_id=created.workout_id, request=owner)
    with pytest.raises(NotFoundError):
        get_one(workout_id=created.workout_id, request=owner)


def test_exercise_reference_endpoint(tmp_path: Path) -> None:
    list_exercises = route(_app(tmp_path), "/api/workouts/exercises", "GET")

    items = list_exercises().items

    assert len(items) == 8


def test_openapi_contains_error_contracts(tmp_path: Path) -> None:
    schema = _app(tmp_path).openapi()

    login = schema["paths"]["/api/auth/login"]["post"]
    assert login["responses"]["401"]["content"]["application/json"]["schema"][
        "$ref"
    ].endswith("ApiErrorResponse")

    get_workout = schema["paths"]["/api/workouts/{workout_id}"]["get"]
    assert get_workout["responses"]["403"]["content"]["application/json"]["schema"][
        "$ref"
    ].endswith("ApiErrorResponse")
    assert get_workout["responses"]["200"]["content"]["application/json"]["schema"][
        "$ref"
    ].endswith("WorkoutResponse")


def test_cors_preflight_on_protected_path_is_answered_before_auth(tmp_path: Path) -> None:
    app = _app(tmp_path)
    assert app.user_middleware[0].cls is CORSMiddleware

    request = make_request(
        "/api/workouts",
        "OPTIONS",
        headers=[
            (b"origin", b"http://localhost:3000"),
            (b"access-control-request-method", b"GET"),
        ],
    )
    messages: list[dict] = []

    async def receive() -> dict:
        return {"type": "http.request", "body": b"", "more_body": False}

    async def send(message: dict) -> None:
        messages.append(message)

    asyncio.run(app.build_middleware_stack()(request.scope, receive, send))

    start = messages[0]
    headers = dict(start["headers"])
    assert start["status"] == 200
    assert headers[b"access-control-allow-origin"] == b"http://localhost:3000"
