"""Repository for workouts, their exercise lines, schedules and exercise data."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path
from threading import Lock
from typing import Any, Iterable

from workout_tracker.core.clock import from_storage, to_storage
from workout_tracker.core.storage import open_sqlite
from workout_tracker.workouts.models import (
    Exercise,
    ScheduleStatus,
    UpcomingSchedule,
    Workout,
    WorkoutExercise,
    WorkoutSchedule,
    WorkoutState,
)

_WORKOUT_COLUMNS = (
    "workout_id, user_id, name, comment, created_at, last_updated_at, state, deleted_at"
)


def _workout_doc(workout: Workout) -> dict[str, Any]:
    doc = workout.model_dump()
    doc["state"] = workout.state.value
    return doc


class WorkoutRepository:
    """Workout store backed by MongoDB when a database is given, SQLite otherwise."""

    def __init__(
        self, *, database_path: Path | None = None, mongo_db: Any = None
    ) -> None:
        self._lock = Lock()
        self._connection: sqlite3.Connection | None = None
        self._mongo_workouts = None
        self._mongo_schedules = None
        self._mongo_exercises = None

        if mongo_db is not None:
            self._mongo_workouts = mongo_db["workouts"]
            self._mongo_schedules = mongo_db["workout_schedules"]
            self._mongo_exercises = mongo_db["exercises"]
        elif database_path is not None:
            self._connection = open_sqlite(database_path)
        else:
            raise ValueError("WorkoutRepository needs database_path or mongo_db")

    def _sqlite(self) -> sqlite3.Connection:
        assert self._connection is not None
        return self._connection

    # SQLite row helpers ---------------------------------------------------

    @staticmethod
    def _workout_from_row(
        row: sqlite3.Row, exercises: list[WorkoutExercise]
    ) -> Workout:
        return Workout(
            workout_id=row["workout_id"],
            user_id=row["user_id"],
            name=row["name"],
            comment=row["comment"],
            created_at=from_storage(row["created_at"]),
            last_updated_at=from_storage(row["last_updated_at"]),
            state=WorkoutState(row["state"]),
            deleted_at=from_storage(row["deleted_at"]),
            exercises=exercises,
        )

    def _load_lines(
        self, connection: sqlite3.Connection, workout_ids: Iterable[str]
    ) -> dict[str, list[WorkoutExercise]]:
        ids = list(dict.fromkeys(workout_ids))
        lines: dict[str, list[WorkoutExercise]] = {workout_id: [] for workout_id in ids}
        if not ids:
            return lines
        placeholders = ", ".join("?" for _ in ids)
        rows = connection.execute(
            f"""
            SELECT workout_id, exercise_id, sets, repetitions, weight
            FROM workout_exercises
            WHERE workout_id IN ({placeholders})
            ORDER BY workout_id, position
            """,
            ids,
        ).fetchall()
        for row in rows:
            lines[row["workout_id"]].append(
                WorkoutExercise(
                    exercise_id=row["exercise_id"],
                    sets=row["sets"],
                    repetitions=row["repetitions"],
                    weight=row["weight"],
                )
            )
        return lines

    def _workouts_from_rows(
        self, connection: sqlite3.Connection, rows: list[sqlite3.Row]
    ) -> list[Workout]:
        lines = self._load_lines(connection, (row["workout_id"] for row in rows))
        return [self._workout_from_row(row, lines[row["workout_id"]]) for row in rows]

    @staticmethod
    def _insert_lines(
        connection: sqlite3.Connection, workout_id: str, exercises: list[WorkoutExercise]
    ) -> None:
        connection.executemany(
            """
            INSERT INTO workout_exercises(workout_id, exercise_id, position, sets, repetitions, weight)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            [
                (workout_id, line.exercise_id, position, line.sets, line.repetitions, line.weight)
                for position, line in enumerate(exercises)
            ],
        )

    # Workouts ---------------------------------------------------------------

    def add(self, workout: Workout) -> Workout:
        if self._mongo_workouts is not None:
            self._mongo_workouts.insert_one(_workout_doc(workout))
            return workout

        with self._lock, self._sqlite() as connection:
            connection.execute(
                f"INSERT INTO workouts({_WORKOUT_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    workout.workout_id,
                    workout.user_id,
                    workout.name,
                    workout.comment,
                    to_storage(workout.created_at),
                    to_storage(workout.last_updated_at),
                    workout.state.value,
                    to_storage(workout.deleted_at),
                ),
            )
            self._insert_lines(connection, workout.workout_id, workout.exercises)
        return workout

    def update(self, workout: Workout) -> Workout:
        """Overwrite workout fields and replace its exercise lines wholesale."""
        if self._mongo_workouts is not None:
            doc = _workout_doc(workout)
            doc.pop("workout_id")
            doc.pop("created_at")
            self._mongo_workouts.update_one(
                {"workout_id": workout.workout_id}, {"$set": doc}
            )
            return workout

        with self._lock, self._sqlite() as connection:
            connection.execute(
                """
                UPDATE workouts SET name = ?, comment = ?, last_updated_at = ?, state = ?, deleted_at = ?
                WHERE workout_id = ?
                """,
                (
                    workout.name,
                    workout.comment,
                    to_storage(workout.last_updated_at),
                    workout.state.value,
                    to_storage(workout.deleted_at),
                    workout.workout_id,
                ),
            )
            connection.execute(
                "DELETE FROM workout_exercises WHERE workout_id = ?",
                (workout.workout_id,),
            )
            self._insert_lines(connection, workout.workout_id, workout.exercises)
        return workout

    def soft_delete(self, workout_id: str, deleted_at: datetime) -> None:
        """Tag an active workout as deleted; already-deleted rows are untouched."""
        if self._mongo_workouts is not None:
            self._mongo_workouts.update_one(
                {"workout_id": workout_id, "state": WorkoutState.ACTIVE.value},
                {"$set": {"state": WorkoutState.DELETED.value, "deleted_at": deleted_at}},
            )
            return

        with self._lock, self._sqlite() as connection:
            connection.execute(
                "UPDATE workouts SET state = ?, deleted_at = ? WHERE workout_id = ? AND state = ?",
                (
                    WorkoutState.DELETED.value,
                    to_storage(deleted_at),
                    workout_id,
                    WorkoutState.ACTIVE.value,
                ),
            )

    def get_by_id(self, workout_id: str, *, include_deleted: bool = False) -> Workout | None:
        """Return the workout, hiding soft-deleted ones unless asked not to."""
        if self._mongo_workouts is not None:
            query: dict[str, Any] = {"workout_id": workout_id}
            if not include_deleted:
                query["state"] = WorkoutState.ACTIVE.value
            doc = self._mongo_workouts.find_one(query, {"_id": 0})
            return Workout.model_validate(doc) if doc else None

        sql = f"SELECT {_WORKOUT_COLUMNS} FROM workouts WHERE workout_id = ?"
        params: list[Any] = [workout_id]
        if not include_deleted:
            sql += " AND state = ?"
            params.append(WorkoutState.ACTIVE.value)
        with self._lock:
            connection = self._sqlite()
            row = connection.execute(sql, params).fetchone()
            if row is None:
                return None
            return self._workouts_from_rows(connection, [row])[0]

    def list_by_owner(self, user_id: str) -> list[Workout]:
        """Active workouts of ``user_id``, newest first."""
        if self._mongo_workouts is not None:
            cursor = self._mongo_workouts.find(
                {"user_id": user_id, "state": WorkoutState.ACTIVE.value}, {"_id": 0}
            ).sort("created_at", -1)
            return [Workout.model_validate(doc) for doc in cursor]

        with self._lock:
            connection = self._sqlite()
            rows = connection.execute(
                f"""
                SELECT {_WORKOUT_COLUMNS} FROM workouts
                WHERE user_id = ? AND state = ?
                ORDER BY created_at DESC
                """,
                (user_id, WorkoutState.ACTIVE.value),
            ).fetchall()
            return self._workouts_from_rows(connection, rows)

    def completed_workouts(self, user_id: str) -> list[Workout]:
        """Active workouts of ``user_id`` with a completed schedule, newest first."""
        if self._mongo_workouts is not None:
            owned = self.list_by_owner(user_id)
            completed_ids = set(
                self._mongo_schedules.distinct(
                    "workout_id",
                    {
                        "workout_id": {"$in": [w.workout_id for w in owned]},
                        "status": ScheduleStatus.COMPLETED.value,
                    },
                )
            )
            return [w for w in owned if w.workout_id in completed_ids]

        with self._lock:
            connection = self._sqlite()
            rows = connection.execute(
                f"""
                SELECT {_WORKOUT_COLUMNS} FROM workouts w
                WHERE w.user_id = ? AND w.state = ?
                  AND EXISTS (
                    SELECT 1 FROM workout_schedules s
                    WHERE s.workout_id = w.workout_id AND s.status = ?
                  )
                ORDER BY w.created_at DESC
                """,
                (user_id, WorkoutState.ACTIVE.value, ScheduleStatus.COMPLETED.value),
            ).fetchall()
            return self._workouts_from_rows(connection, rows)

    # Schedules --------------------------------------------------------------

    def add_schedule(self, schedule: WorkoutSchedule) -> WorkoutSchedule:
        if self._mongo_schedules is not None:
            self._mongo_schedules.insert_one(schedule.model_dump())
            return schedule

        with self._lock, self._sqlite() as connection:
            connection.execute(
                """
                INSERT INTO workout_schedules(schedule_id, workout_id, scheduled_date, status)
                VALUES (?, ?, ?, ?)
                """,
                (
                    schedule.schedule_id,
                    schedule.workout_id,
                    to_storage(schedule.scheduled_date),
                    schedule.status,
                ),
            )
        return schedule

    def upcoming_schedules(self, user_id: str, now: datetime) -> list[UpcomingSchedule]:
        """Pending schedules at or after ``now`` on active workouts, soonest first."""
        if self._mongo_schedules is not None:
            workouts = {w.workout_id: w for w in self.list_by_owner(user_id)}
            cursor = self._mongo_schedules.find(
                {
                    "workout_id": {"$in": list(workouts)},
                    "status": ScheduleStatus.PENDING.value,
                    "scheduled_date": {"$gte": now},
                },
                {"_id": 0},
            ).sort("scheduled_date", 1)
            return [
                UpcomingSchedule(**doc, workout=workouts[doc["workout_id"]])
                for doc in cursor
            ]

        with self._lock:
            connection = self._sqlite()
            rows = connection.execute(
                """
                SELECT s.schedule_id, s.workout_id, s.scheduled_date, s.status
                FROM workout_schedules s
                JOIN workouts w ON w.workout_id = s.workout_id
                WHERE w.user_id = ? AND w.state = ? AND s.status = ? AND s.scheduled_date >= ?
                ORDER BY s.scheduled_date ASC
                """,
                (
                    user_id,
                    WorkoutState.ACTIVE.value,
                    ScheduleStatus.PENDING.value,
                    to_storage(now),
                ),
            ).fetchall()
            workout_ids = list(dict.fromkeys(row["workout_id"] for row in rows))
            workouts: dict[str, Workout] = {}
            if workout_ids:
                placeholders = ", ".join("?" for _ in workout_ids)
                workout_rows = connection.execute(
                    f"SELECT {_WORKOUT_COLUMNS} FROM workouts WHERE workout_id IN ({placeholders})",
                    workout_ids,
                ).fetchall()
                workouts = {
                    w.workout_id: w
                    for w in self._workouts_from_rows(connection, workout_rows)
                }

        return [
            UpcomingSchedule(
                schedule_id=row["schedule_id"],
                workout_id=row["workout_id"],
                scheduled_date=from_storage(row["scheduled_date"]),
                status=row["status"],
                workout=workouts[row["workout_id"]],
            )
            for row in rows
        ]

    def update_schedule_status(self, schedule_id: str, user_id: str, status: str) -> bool:
        """Set the status of a schedule on an active workout owned by ``user_id``.

        Returns ``False`` when no such schedule exists for that owner.
        """
        if self._mongo_schedules is not None:
            owned = self._mongo_workouts.distinct(
                "workout_id", {"user_id": user_id, "state": WorkoutState.ACTIVE.value}
            )
            result = self._mongo_schedules.update_one(
                {"schedule_id": schedule_id, "workout_id": {"$in": owned}},
                {"$set": {"status": status}},
            )
            return result.matched_count == 1

        with self._lock, self._sqlite() as connection:
            cursor = connection.execute(
                """
                UPDATE workout_schedules SET status = ?
                WHERE schedule_id = ? AND workout_id IN (
                  SELECT workout_id FROM workouts WHERE user_id = ? AND state = ?
                )
                """,
                (status, schedule_id, user_id, WorkoutState.ACTIVE.value),
            )
            return cursor.rowcount == 1

    # Reference data ---------------------------------------------------------

    def all_exercise_ref_data(self) -> list[Exercise]:
        if self._mongo_exercises is not None:
            cursor = self._mongo_exercises.find({}, {"_id": 0}).sort("exercise_id", 1)
            return [Exercise.model_validate(doc) for doc in cursor]

        with self._lock:
            rows = self._sqlite().execute(
                """
                SELECT exercise_id, name, description, category, created_at
                FROM exercises ORDER BY exercise_id
                """
            ).fetchall()
        return [
            Exercise(
                exercise_id=row["exercise_id"],
                name=row["name"],
                description=row["description"],
                category=row["category"],
                created_at=from_storage(row["created_at"]),
            )
            for row in rows
        ]

    def upsert_exercise(self, exercise: Exercise) -> None:
        """Insert or replace one reference-data row (used by the seeding script)."""
        if self._mongo_exercises is not None:
            self._mongo_exercises.update_one(
                {"exercise_id": exercise.exercise_id},
                {"$set": exercise.model_dump()},
                upsert=True,
            )
            return

        with self._lock, self._sqlite() as connection:
            connection.execute(
                """
                INSERT INTO exercises(exercise_id, name, description, category, created_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(exercise_id) DO UPDATE SET
                  name = excluded.name,
                  description = excluded.description,
                  category = excluded.category
                """,
                (
                    exercise.exercise_id,
                    exercise.name,
                    exercise.description,
                    exercise.category,
                    to_storage(exercise.created_at),
                ),
            )

    def close(self) -> None:
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None
