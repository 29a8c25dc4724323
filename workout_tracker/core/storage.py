"""Connection factories for the SQLite and MongoDB backends."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any

import pymongo

from workout_tracker.core.config import StorageConfig
from workout_tracker.core.migrations import apply_migrations
from workout_tracker.core.mongo_migrations import apply_mongo_migrations


def open_sqlite(database_path: Path) -> sqlite3.Connection:
    """Migrate and open a connection shareable across request threads.

    Callers serialize access with their own lock.
    """
    apply_migrations(database_path)
    connection = sqlite3.connect(str(database_path), check_same_thread=False)
    connection.row_factory = sqlite3.Row
    return connection


def open_mongo(config: StorageConfig) -> tuple[Any, Any]:
    """Connect, ping and migrate MongoDB; return ``(client, database)``.

    Connection failures propagate so a misconfigured store stops startup.
    """
    client: Any = pymongo.MongoClient(
        config.mongodb_uri, serverSelectionTimeoutMS=3000, tz_aware=True
    )
    try:
        client.admin.command("ping")
        db = client[config.mongodb_db]
        apply_mongo_migrations(db)
    except Exception:
        client.close()
        raise
    return client, db


def resolve_sqlite_path(app_root: Path, config: StorageConfig) -> Path:
    path = Path(config.sqlite_path)
    if not path.is_absolute():
        path = app_root / path
    return path.resolve()
