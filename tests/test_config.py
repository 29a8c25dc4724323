from __future__ import annotations

from pathlib import Path

import pytest

from workout_tracker.core.config import AppConfig, StorageConfig
from workout_tracker.core.errors import ConfigError
from workout_tracker.core.storage import resolve_sqlite_path

_ENV_NAMES = [
    "AUTH_SECRET_KEY",
    "AUTH_ACCESS_TOKEN_TTL_SECONDS",
    "AUTH_REFRESH_TOKEN_TTL_SECONDS",
    "AUTH_ISSUER",
    "AUTH_PASSWORD_HASH_ITERATIONS",
    "STORAGE_SQLITE_PATH",
    "MONGODB_URI",
    "MONGODB_DB",
    "LOG_LEVEL",
    "CORS_ALLOWED_ORIGINS",
    "REQUEST_MAX_BYTES",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_from_env_requires_signing_secret() -> None:
    with pytest.raises(ConfigError):
        AppConfig.from_env()


def test_from_env_applies_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AUTH_SECRET_KEY", "s" * 40)

    config = AppConfig.from_env()

    assert config.auth.access_token_ttl_seconds == 1800
    assert config.auth.refresh_token_ttl_seconds == 604800
    assert config.auth.issuer == "workout-tracker"
    assert config.storage.sqlite_path == "runtime/workout_tracker.db"
    assert config.storage.use_mongo is False
    assert config.security.request_max_bytes == 1024 * 1024


def test_from_env_reads_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AUTH_SECRET_KEY", "s" * 40)
    monkeypatch.setenv("AUTH_ACCESS_TOKEN_TTL_SECONDS", "60")
    monkeypatch.setenv("MONGODB_URI", "mongodb://localhost:27017")
    monkeypatch.setenv("CORS_ALLOWED_ORIGINS", "https://a.example, https://b.example")

    config = AppConfig.from_env()

    assert config.auth.access_token_ttl_seconds == 60
    assert config.storage.use_mongo is True
    assert config.security.cors_allowed_origins == ["https://a.example", "https://b.example"]


@pytest.mark.parametrize("value", ["soon", "0", "-5"])
def test_from_env_rejects_bad_integers(monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("AUTH_SECRET_KEY", "s" * 40)
    monkeypatch.setenv("AUTH_REFRESH_TOKEN_TTL_SECONDS", value)

    with pytest.raises(ConfigError):
        AppConfig.from_env()


def test_resolve_sqlite_path_is_relative_to_app_root(tmp_path: Path) -> None:
    relative = resolve_sqlite_path(tmp_path, StorageConfig(sqlite_path="runtime/x.db"))
    absolute = resolve_sqlite_path(tmp_path, StorageConfig(sqlite_path=str(tmp_path / "y.db")))

    assert relative == (tmp_path / "runtime" / "x.db").resolve()
    assert absolute == (tmp_path / "y.db").resolve()
