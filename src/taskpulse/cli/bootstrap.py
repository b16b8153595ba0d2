# src/taskpulse/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the task store, sound notifier and reminder engine into AppState.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..config import get_settings
from ..core.ports import ReminderPresenter
from ..core.state import AppState
from ..notify.sound import SoundNotifier
from ..tasks.reminder_engine import ReminderEngine
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(
    *,
    settings=None,
    presenter: ReminderPresenter | None = None,
    clock: Callable[[], datetime] = datetime.now,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    task_store = TaskStore(settings.tasks_db_path, retention_days=settings.retention_days)
    notifier = SoundNotifier(enabled=settings.sound_enabled, sounds_dir=settings.sounds_dir)
    engine = ReminderEngine(task_store, notifier, presenter, clock=clock)

    return AppState(
        settings=settings,
        task_store=task_store,
        notifier=notifier,
        engine=engine,
    )
