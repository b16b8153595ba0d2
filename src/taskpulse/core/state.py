# src/taskpulse/core/state.py

from __future__ import annotations

from dataclasses import dataclass

from ..notify.sound import SoundNotifier
from ..tasks.reminder_engine import ReminderEngine
from ..tasks.task_store import TaskStore


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    task_store: TaskStore
    notifier: SoundNotifier
    engine: ReminderEngine

    # /delete asks for confirmation first; holds the id awaiting "yes".
    pending_delete_id: int | None = None
