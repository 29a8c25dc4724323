"""FastAPI application factory wiring storage, services and routers."""

from __future__ import annotations

import logging
from datetime import timedelta
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from workout_tracker.api.contracts import HealthResponse
from workout_tracker.api.http_setup import (
    register_exception_handlers,
    register_http_middleware,
)
from workout_tracker.auth.middleware import create_auth_middleware
from workout_tracker.auth.repository import AccountRepository
from workout_tracker.auth.router import create_auth_router
from workout_tracker.auth.service import AuthService
from workout_tracker.auth.tokens import TokenEngine
from workout_tracker.core.config import AppConfig
from workout_tracker.core.security import PasswordHasher
from workout_tracker.core.storage import open_mongo, resolve_sqlite_path
from workout_tracker.workouts.repository import WorkoutRepository
from workout_tracker.workouts.router import create_workout_router
from workout_tracker.workouts.service import WorkoutService

LOGGER = logging.getLogger(__name__)

APP_ROOT = Path(__file__).resolve().parent.parent


def _build_repositories(
    config: AppConfig, app_root: Path
) -> tuple[AccountRepository, WorkoutRepository, object | None]:
    if config.storage.use_mongo:
        client, db = open_mongo(config.storage)
        LOGGER.info("storage_backend: mongodb")
        return (
            AccountRepository(mongo_db=db),
            WorkoutRepository(mongo_db=db),
            client,
        )
    database_path = resolve_sqlite_path(app_root, config.storage)
    LOGGER.info("storage_backend: sqlite")
    return (
        AccountRepository(database_path=database_path),
        WorkoutRepository(database_path=database_path),
        None,
    )


def create_app(config: AppConfig, *, app_root: Path = APP_ROOT) -> FastAPI:
    """Build the API application for ``config``.

    Relative SQLite paths resolve against ``app_root``.
    """
    app = FastAPI(title="Workout Tracker API", version="1.0.0")

    account_repo, workout_repo, mongo_client = _build_repositories(config, app_root)
    tokens = TokenEngine(
        secret_key=config.auth.secret_key,
        issuer=config.auth.issuer,
        access_token_ttl=timedelta(seconds=config.auth.access_token_ttl_seconds),
    )
    auth_service = AuthService(
        repo=account_repo,
        tokens=tokens,
        hasher=PasswordHasher(iterations=config.auth.password_hash_iterations),
        refresh_token_ttl=timedelta(seconds=config.auth.refresh_token_ttl_seconds),
    )
    workout_service = WorkoutService(repo=workout_repo)

    # Registered first so request logging and security headers wrap it.
    app.middleware("http")(create_auth_middleware(auth_service))
    register_http_middleware(app, config=config, logger=LOGGER)
    # Added last so it runs outermost and answers preflights before auth.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.security.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )
    register_exception_handlers(app, logger=LOGGER)

    @app.get("/api/health", response_model=HealthResponse, tags=["health"])
    def health() -> HealthResponse:
        return HealthResponse(status="ok")

    app.include_router(create_auth_router(auth_service))
    app.include_router(create_workout_router(workout_service))

    @app.on_event("shutdown")
    def close_storage() -> None:
        account_repo.close()
        workout_repo.close()
        if mongo_client is not None:
            mongo_client.close()  # type: ignore[attr-defined]

    app.state.auth_service = auth_service
    app.state.workout_service = workout_service
    return app
