# src/taskpulse/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The reminder engine depends on Protocols instead of concrete implementations.
This keeps storage/audio/UI swappable and makes testing easier.
"""

from typing import Any, Protocol

from ..tasks.task_models import Priority, Task, TaskStatus


class TaskRepo(Protocol):
    def list_tasks(self, *, now_ts: float | None = None) -> list[Task]: ...
    def get_task(self, task_id: int) -> Task | None: ...

    def create_task(
            self,
            *,
            title: str,
            start_minute: int,
            end_minute: int,
            priority: Priority | str = ...,
            status: TaskStatus | str = ...,
            now_ts: float | None = None,
    ) -> Task: ...

    def update_task(self, task_id: int, **changes: Any) -> Task | None: ...
    def delete_task(self, task_id: int) -> None: ...


class NotificationSink(Protocol):
    """
    Best-effort audio cues.

    Implementations must never raise to the caller and must not block the tick:
    - play_alarm: priority-specific sound, then the default alarm as a single fallback
    - play_warning: warning sound, no fallback
    """

    def play_alarm(self, priority: Priority | str) -> None: ...
    def play_warning(self) -> None: ...


class ReminderPresenter(Protocol):
    """UI side: how the engine surfaces prompts to the user."""

    def show_warning(self, task: Task, remaining_minutes: int) -> None: ...
    def show_completion_prompt(self, task: Task) -> None: ...
