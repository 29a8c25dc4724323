#!/usr/bin/env python3
"""One-shot exercise reference data load from a JSON file into the store."""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError

from workout_tracker.core.config import StorageConfig
from workout_tracker.core.storage import open_mongo, resolve_sqlite_path
from workout_tracker.workouts.models import Exercise
from workout_tracker.workouts.repository import WorkoutRepository

DEFAULT_EXERCISES_FILE = Path("runtime") / "exercises.json"
DEFAULT_SQLITE_PATH = "runtime/workout_tracker.db"
DEFAULT_DB_NAME = "workout_tracker"
MAX_PREVIEW_ITEMS = 10


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Check and load exercise reference data into the workout store."
    )
    parser.add_argument(
        "--exercises-file",
        type=Path,
        default=DEFAULT_EXERCISES_FILE,
        help="Path to a JSON list of exercises.",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only print a source/target diff and do not write.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate and print the load plan without writing.",
    )
    return parser.parse_args(argv)


def load_source_exercises(exercises_file: Path) -> tuple[dict[int, Exercise], int]:
    """Validate source rows; later rows win on a repeated ``exercise_id``."""
    if not exercises_file.exists():
        return {}, 0
    payload = json.loads(exercises_file.read_text(encoding="utf-8"))
    if not isinstance(payload, list):
        raise ValueError(
            f"Expected list in {exercises_file}, got {type(payload).__name__}"
        )
    exercises: dict[int, Exercise] = {}
    invalid_count = 0
    for row in payload:
        try:
            exercise = Exercise.model_validate(row)
        except ValidationError:
            invalid_count += 1
            continue
        exercises[exercise.exercise_id] = exercise
    return exercises, invalid_count


def storage_config_from_env() -> StorageConfig:
    return StorageConfig(
        sqlite_path=os.getenv("STORAGE_SQLITE_PATH", "").strip() or DEFAULT_SQLITE_PATH,
        mongodb_uri=os.getenv("MONGODB_URI", "").strip(),
        mongodb_db=os.getenv("MONGODB_DB", "").strip() or DEFAULT_DB_NAME,
    )


def open_target(config: StorageConfig, app_root: Path) -> tuple[WorkoutRepository, Any]:
    """Open the configured store; return the repository and a Mongo client if any."""
    if config.use_mongo:
        client, db = open_mongo(config)
        return WorkoutRepository(mongo_db=db), client
    return (
        WorkoutRepository(database_path=resolve_sqlite_path(app_root, config)),
        None,
    )


def seed_exercises(
    source: dict[int, Exercise], repo: WorkoutRepository, *, dry_run: bool
) -> tuple[int, int]:
    """Upsert every source exercise; return ``(processed, new)`` counts."""
    existing_ids = {item.exercise_id for item in repo.all_exercise_ref_data()}
    new_count = len(set(source) - existing_ids)
    if dry_run:
        return len(source), new_count
    for exercise in source.values():
        repo.upsert_exercise(exercise)
    return len(source), new_count


def _print_check_report(
    exercises_file: Path,
    invalid_count: int,
    source: dict[int, Exercise],
    target_ids: set[int],
) -> None:
    missing_in_target = sorted(set(source) - target_ids)
    extra_in_target = sorted(target_ids - set(source))

    print(f"Source file: {exercises_file}")
    print(f"Source valid exercises: {len(source)}")
    print(f"Source invalid rows skipped: {invalid_count}")
    print(f"Target exercises total: {len(target_ids)}")
    print(f"Missing in target: {len(missing_in_target)}")
    if missing_in_target:
        preview = ", ".join(str(item) for item in missing_in_target[:MAX_PREVIEW_ITEMS])
        print(f"Missing preview: {preview}")
    print(f"Extra in target: {len(extra_in_target)}")


def main(argv: list[str] | None = None, *, app_root: Path | None = None) -> int:
    """Execute check or load flow."""
    load_dotenv()
    args = _parse_args(argv)
    root = app_root or Path.cwd()

    repo = None
    mongo_client = None
    try:
        source, invalid_count = load_source_exercises(args.exercises_file)
        repo, mongo_client = open_target(storage_config_from_env(), root)

        if args.check:
            target_ids = {item.exercise_id for item in repo.all_exercise_ref_data()}
            _print_check_report(args.exercises_file, invalid_count, source, target_ids)
            return 0

        processed, new_count = seed_exercises(source, repo, dry_run=args.dry_run)
        print(f"Source valid exercises: {len(source)}")
        print(f"Source invalid rows skipped: {invalid_count}")
        print(f"Processed exercises: {processed}")
        print(f"New exercises: {new_count}")
        print(f"Mode: {'dry-run' if args.dry_run else 'write'}")
        return 0
    except Exception as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    finally:
        if repo is not None:
            repo.close()
        if mongo_client is not None:
            mongo_client.close()


if __name__ == "__main__":
    raise SystemExit(main())
