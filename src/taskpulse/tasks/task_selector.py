# src/taskpulse/tasks/task_selector.py

from __future__ import annotations

from collections.abc import Iterable

from .task_models import INACTIVE_STATUSES, Task


def is_activatable(task: Task, *, now_minutes: int, now_ts: float) -> bool:
    """True if `task` may be the current task at this instant."""
    if task.completed:
        return False
    if task.status in INACTIVE_STATUSES:
        return False
    if task.snoozed_until is not None and task.snoozed_until > now_ts:
        return False
    return task.start_minute <= now_minutes <= task.end_minute


def select_current_task(
    tasks: Iterable[Task], *, now_minutes: int, now_ts: float
) -> Task | None:
    """
    Pick the single current task.

    First match in iteration order wins (the store yields insertion order), so
    overlapping windows resolve to the task that was added first, regardless of
    priority.
    """
    for task in tasks:
        if is_activatable(task, now_minutes=now_minutes, now_ts=now_ts):
            return task
    return None
