"""Versioned MongoDB migrations for the document store backend."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from workout_tracker.core.logging import CORRELATION_ID_CTX

LOGGER = logging.getLogger(__name__)

MigrationFn = Callable[[Any], None]

SEED_EXERCISES: list[dict[str, Any]] = [
    {"exercise_id": 1, "name": "Bench Press", "description": "Barbell press lying on a flat bench", "category": "Strength"},
    {"exercise_id": 2, "name": "Back Squat", "description": "Barbell squat with the bar across the upper back", "category": "Strength"},
    {"exercise_id": 3, "name": "Deadlift", "description": "Conventional barbell deadlift", "category": "Strength"},
    {"exercise_id": 4, "name": "Pull-up", "description": "Bodyweight vertical pull", "category": "Strength"},
    {"exercise_id": 5, "name": "Running", "description": "Steady-state outdoor or treadmill run", "category": "Cardio"},
    {"exercise_id": 6, "name": "Cycling", "description": "Stationary or road cycling", "category": "Cardio"},
    {"exercise_id": 7, "name": "Plank", "description": "Isometric core hold", "category": "Core"},
    {"exercise_id": 8, "name": "Hamstring Stretch", "description": "Seated hamstring stretch", "category": "Flexibility"},
]


def _migration_0001_account_indexes(db: Any) -> None:
    db["accounts"].create_index("user_id", unique=True)
    db["accounts"].create_index("email", unique=True)


def _migration_0002_workout_indexes(db: Any) -> None:
    db["workouts"].create_index("workout_id", unique=True)
    db["workouts"].create_index([("user_id", 1), ("state", 1)])
    db["workout_schedules"].create_index("schedule_id", unique=True)
    db["workout_schedules"].create_index(
        [("workout_id", 1), ("status", 1), ("scheduled_date", 1)]
    )
    db["exercises"].create_index("exercise_id", unique=True)


def _migration_0003_seed_exercises(db: Any) -> None:
    created_at = datetime(2025, 1, 1, tzinfo=timezone.utc)
    for row in SEED_EXERCISES:
        db["exercises"].update_one(
            {"exercise_id": row["exercise_id"]},
            {"$setOnInsert": {**row, "created_at": created_at}},
            upsert=True,
        )


MIGRATIONS: list[tuple[str, MigrationFn]] = [
    ("0001_account_indexes", _migration_0001_account_indexes),
    ("0002_workout_indexes", _migration_0002_workout_indexes),
    ("0003_seed_exercises", _migration_0003_seed_exercises),
]


def apply_mongo_migrations(db: Any) -> list[str]:
    """Apply pending migrations to ``db`` and return the ids applied."""
    migration_collection = db["schema_migrations"]
    migration_collection.create_index("migration_id", unique=True)

    applied: list[str] = []
    for migration_id, migration_fn in MIGRATIONS:
        if migration_collection.find_one({"migration_id": migration_id}):
            continue
        migration_fn(db)
        migration_collection.insert_one(
            {
                "migration_id": migration_id,
                "applied_at": datetime.now(timezone.utc),
                "correlation_id": CORRELATION_ID_CTX.get(),
            }
        )
        applied.append(migration_id)

    if applied:
        LOGGER.info("mongo_migrations_applied: %s", ", ".join(applied))
    return applied
