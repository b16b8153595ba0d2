# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskpulse.cli.bootstrap import create_initial_state
from taskpulse.core.state import AppState
from taskpulse.tasks.task_store import TaskStore

from .fakes import FakeClock, RecordingPresenter


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskpulse-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        sound_enabled=False,
        sounds_dir=tmp_path / "sounds",
        tick_interval_seconds=0.01,
        retention_days=14,
    )


@pytest.fixture()
def task_store(tmp_path: Path) -> TaskStore:
    return TaskStore(tmp_path / "tasks.sqlite3")


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def presenter() -> RecordingPresenter:
    return RecordingPresenter()


@pytest.fixture()
def state(settings: SimpleNamespace, presenter: RecordingPresenter, clock: FakeClock) -> AppState:
    """
    AppState wired through the real composition root.

    NOTE: the SQLite TaskStore is real; sound is disabled so nothing touches audio.
    """
    return create_initial_state(settings=settings, presenter=presenter, clock=clock)
