from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any

from workout_tracker.core.migrations import apply_migrations
from workout_tracker.core.mongo_migrations import SEED_EXERCISES, apply_mongo_migrations


def test_apply_migrations_creates_tables_once(tmp_path: Path) -> None:
    db_path = tmp_path / "nested" / "state.db"

    first = apply_migrations(db_path)
    second = apply_migrations(db_path)

    assert first == ["0001_accounts.sql", "0002_workouts.sql", "0003_seed_exercises.sql"]
    assert second == []
    connection = sqlite3.connect(str(db_path))
    try:
        tables = {
            row[0]
            for row in connection.execute(
                "SELECT name FROM sqlite_master WHERE type='table'"
            ).fetchall()
        }
        assert {
            "schema_migrations",
            "accounts",
            "exercises",
            "workouts",
            "workout_exercises",
            "workout_schedules",
        } <= tables
        assert connection.execute("SELECT COUNT(*) FROM exercises").fetchone()[0] == 8
    finally:
        connection.close()


class _Collection:
    def __init__(self) -> None:
        self.indexes: list[Any] = []
        self.docs: list[dict[str, Any]] = []

    def create_index(self, keys: Any, **kwargs: Any) -> None:
        self.indexes.append((keys, kwargs))

    def find_one(self, flt: dict[str, Any]) -> dict[str, Any] | None:
        return next(
            (doc for doc in self.docs if all(doc.get(k) == v for k, v in flt.items())),
            None,
        )

    def insert_one(self, doc: dict[str, Any]) -> None:
        self.docs.append(dict(doc))

    def update_one(self, flt: dict[str, Any], update: dict[str, Any], upsert: bool = False) -> None:
        doc = self.find_one(flt)
        if doc is None:
            if not upsert:
                return
            doc = dict(flt)
            doc.update(update.get("$setOnInsert", {}))
            self.docs.append(doc)
        doc.update(update.get("$set", {}))


class _Db(dict):
    def __missing__(self, name: str) -> _Collection:
        collection = _Collection()
        self[name] = collection
        return collection


def test_apply_mongo_migrations_is_idempotent() -> None:
    db = _Db()

    first = apply_mongo_migrations(db)
    second = apply_mongo_migrations(db)

    assert first == ["0001_account_indexes", "0002_workout_indexes", "0003_seed_exercises"]
    assert second == []
    assert db["accounts"].indexes
    assert len(db["exercises"].docs) == len(SEED_EXERCISES) == 8
