# src/taskpulse/tasks/task_api.py

from __future__ import annotations

import logging
import time
from datetime import datetime

from ..core.ports import TaskRepo
from .task_models import Priority, Task, TaskStatus
from .time_utils import LAST_MINUTE, from_minutes, minute_of_day, to_minutes

logger = logging.getLogger(__name__)

SNOOZE_PRESETS: tuple[int, ...] = (5, 10, 15, 30)


def add_task_from_strings(
    repo: TaskRepo,
    *,
    title: str,
    start: str,
    end: str,
    priority: Priority | str = Priority.HIGH,
    status: TaskStatus | str = TaskStatus.IN_PROGRESS,
) -> Task:
    """
    Convenience helper: create a task from "HH:MM" strings.
    Raises FormatError for malformed times, ValueError for bad fields.
    """
    return repo.create_task(
        title=title,
        start_minute=to_minutes(start),
        end_minute=to_minutes(end),
        priority=priority,
        status=status,
    )


def edit_task(
    repo: TaskRepo,
    task_id: int,
    *,
    title: str | None = None,
    start: str | None = None,
    end: str | None = None,
    priority: Priority | str | None = None,
    status: TaskStatus | str | None = None,
) -> Task | None:
    """Update only the given fields. Times are "HH:MM" strings."""
    changes: dict[str, object] = {}
    if title is not None:
        changes["title"] = title
    if start is not None:
        changes["start_minute"] = to_minutes(start)
    if end is not None:
        changes["end_minute"] = to_minutes(end)
    if priority is not None:
        changes["priority"] = priority
    if status is not None:
        changes["status"] = status

    if not changes:
        return repo.get_task(task_id)
    return repo.update_task(task_id, **changes)


def complete_task(
    repo: TaskRepo, task_id: int, completed: bool, *, now_ts: float | None = None
) -> Task | None:
    """
    Record the answer to "Did you complete ...?".

    Yes -> completed, completed_at stamped, status=completed
    No  -> not completed, completed_at cleared, status=in-progress
    """
    if completed:
        now = time.time() if now_ts is None else float(now_ts)
        task = repo.update_task(
            task_id, completed=True, completed_at=now, status=TaskStatus.COMPLETED
        )
    else:
        task = repo.update_task(
            task_id, completed=False, completed_at=None, status=TaskStatus.IN_PROGRESS
        )

    if task is None:
        logger.warning("complete_task: task %s not found", task_id)
    else:
        logger.info("Task %s marked completed=%s", task_id, completed)
    return task


def snooze_task(
    repo: TaskRepo, task_id: int, minutes: int, *, now: datetime | None = None
) -> Task | None:
    """
    Move the task window to [now, now + minutes].

    The previous duration is discarded. Windows never wrap past midnight, so a
    snooze that would end after 23:59 raises ValueError and leaves the task untouched.
    """
    if int(minutes) <= 0:
        raise ValueError("snooze minutes must be positive")

    if now is None:
        now = datetime.now()

    start = minute_of_day(now)
    end = start + int(minutes)
    if end > LAST_MINUTE:
        left = LAST_MINUTE - start
        logger.info("Snooze for task %s rejected: +%s min passes midnight", task_id, minutes)
        if left <= 0:
            raise ValueError("cannot snooze past midnight: the day is over")
        raise ValueError(f"cannot snooze past midnight: at most {left} minute(s) left today")

    task = repo.update_task(task_id, start_minute=start, end_minute=end, snoozed_until=None)
    if task is None:
        logger.warning("snooze_task: task %s not found", task_id)
    else:
        logger.info(
            "Task %s snoozed: window %s-%s", task_id, from_minutes(start), from_minutes(end)
        )
    return task
