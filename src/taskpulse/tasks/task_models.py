# src/taskpulse/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class Priority(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def from_db(cls, raw: str | None) -> Priority:
        if not raw:
            return cls.MEDIUM
        try:
            return cls(raw)
        except ValueError:
            return cls.MEDIUM


class TaskStatus(StrEnum):
    """
    User-facing task status.

    Notes:
    - CANCELLED and ON_HOLD tasks are never selected as the current task.
    - COMPLETED mirrors the `completed` flag when set through the completion flow,
      but the flag (not the status) is what the selector and stats look at.
    """

    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ON_HOLD = "on-hold"

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.NOT_STARTED
        try:
            return cls(raw)
        except ValueError:
            return cls.NOT_STARTED


INACTIVE_STATUSES = frozenset({TaskStatus.CANCELLED, TaskStatus.ON_HOLD})


@dataclass(slots=True)
class Task:
    id: int
    title: str

    # minute-of-day, 0..1439
    start_minute: int
    end_minute: int

    priority: Priority
    status: TaskStatus
    completed: bool

    created_at: float
    updated_at: float
    completed_at: float | None = None
    snoozed_until: float | None = None


@dataclass(slots=True, frozen=True)
class TaskStats:
    total: int
    completed_count: int
    completion_rate: float
    tasks_by_priority: dict[str, int] = field(default_factory=dict)
