from __future__ import annotations

import importlib.util
import json
from pathlib import Path

import pytest

from workout_tracker.workouts.repository import WorkoutRepository

_SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "seed_exercises_once.py"


def _load_script():
    module_spec = importlib.util.spec_from_file_location("seed_exercises_once", _SCRIPT)
    assert module_spec is not None and module_spec.loader is not None
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


@pytest.fixture
def seed_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.delenv("MONGODB_URI", raising=False)
    monkeypatch.setenv("STORAGE_SQLITE_PATH", str(tmp_path / "state.db"))
    source = tmp_path / "exercises.json"
    source.write_text(
        json.dumps(
            [
                {"exercise_id": 1, "name": "Flat Bench", "category": "Strength"},
                {"exercise_id": 42, "name": "Rowing", "category": "Cardio"},
                {"name": "No id"},
            ]
        ),
        encoding="utf-8",
    )
    return source


def test_seed_dry_run_does_not_write(seed_env: Path, tmp_path: Path) -> None:
    script = _load_script()

    code = script.main(["--exercises-file", str(seed_env), "--dry-run"], app_root=tmp_path)

    repo = WorkoutRepository(database_path=tmp_path / "state.db")
    ids = [item.exercise_id for item in repo.all_exercise_ref_data()]
    repo.close()
    assert code == 0
    assert 42 not in ids


def test_seed_writes_and_skips_invalid_rows(
    seed_env: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    script = _load_script()

    code = script.main(["--exercises-file", str(seed_env)], app_root=tmp_path)

    repo = WorkoutRepository(database_path=tmp_path / "state.db")
    exercises = {item.exercise_id: item for item in repo.all_exercise_ref_data()}
    repo.close()
    output = capsys.readouterr().out
    assert code == 0
    assert exercises[1].name == "Flat Bench"
    assert exercises[42].name == "Rowing"
    assert "Source invalid rows skipped: 1" in output
    assert "New exercises: 1" in output
