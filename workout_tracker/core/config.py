"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

from workout_tracker.core.errors import ConfigError


@dataclass(frozen=True)
class AuthConfig:
    """Authentication-related configuration."""

    secret_key: str
    access_token_ttl_seconds: int = 30 * 60
    refresh_token_ttl_seconds: int = 7 * 24 * 60 * 60
    issuer: str = "workout-tracker"
    password_hash_iterations: int = 310_000


@dataclass(frozen=True)
class StorageConfig:
    """Persistence backend configuration."""

    sqlite_path: str
    mongodb_uri: str = ""
    mongodb_db: str = "workout_tracker"

    @property
    def use_mongo(self) -> bool:
        return bool(self.mongodb_uri)


@dataclass(frozen=True)
class LoggingConfig:
    """Structured logging configuration."""

    level: str


@dataclass(frozen=True)
class SecurityConfig:
    """API perimeter security settings."""

    cors_allowed_origins: list[str]
    request_max_bytes: int


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer") from exc
    if value <= 0:
        raise ConfigError(f"{name} must be positive")
    return value


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration."""

    auth: AuthConfig
    storage: StorageConfig
    logging: LoggingConfig
    security: SecurityConfig

    @staticmethod
    def from_env() -> "AppConfig":
        """Build app config from process environment.

        Raises ``ConfigError`` when the signing secret is absent so the
        process fails at startup instead of on the first login.
        """
        secret_key = os.getenv("AUTH_SECRET_KEY", "").strip()
        if not secret_key:
            raise ConfigError("AUTH_SECRET_KEY is missing")

        issuer = os.getenv("AUTH_ISSUER", "").strip() or "workout-tracker"
        sqlite_path = (
            os.getenv("STORAGE_SQLITE_PATH", "").strip() or "runtime/workout_tracker.db"
        )
        mongodb_db = os.getenv("MONGODB_DB", "").strip() or "workout_tracker"
        log_level = os.getenv("LOG_LEVEL", "INFO").strip() or "INFO"
        cors_allowed_origins = [
            origin.strip()
            for origin in os.getenv(
                "CORS_ALLOWED_ORIGINS",
                "http://localhost:3000,http://127.0.0.1:3000",
            ).split(",")
            if origin.strip()
        ]

        return AppConfig(
            auth=AuthConfig(
                secret_key=secret_key,
                access_token_ttl_seconds=_int_env(
                    "AUTH_ACCESS_TOKEN_TTL_SECONDS", 30 * 60
                ),
                refresh_token_ttl_seconds=_int_env(
                    "AUTH_REFRESH_TOKEN_TTL_SECONDS", 7 * 24 * 60 * 60
                ),
                issuer=issuer,
                password_hash_iterations=_int_env(
                    "AUTH_PASSWORD_HASH_ITERATIONS", 310_000
                ),
            ),
            storage=StorageConfig(
                sqlite_path=sqlite_path,
                mongodb_uri=os.getenv("MONGODB_URI", "").strip(),
                mongodb_db=mongodb_db,
            ),
            logging=LoggingConfig(level=log_level),
            security=SecurityConfig(
                cors_allowed_origins=cors_allowed_origins,
                request_max_bytes=_int_env("REQUEST_MAX_BYTES", 1024 * 1024),
            ),
        )
