# src/taskpulse/tasks/reminder_engine.py

from __future__ import annotations

"""
Reminder engine.

A small polling state machine that, on every tick:
- lists tasks from the store (which also evicts expired ones),
- selects the current task,
- computes remaining time and the warning threshold,
- fires the warning and the end-of-window alarm at most once per activation.

An activation is keyed by (task id, start minute, end minute), so a task that gets
snoozed or rescheduled starts over in ARMED and can warn again.

The engine never marks a task completed by itself: at the end of the window it
raises a completion prompt and waits for resolve_completion() or snooze().
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from ..core.ports import NotificationSink, ReminderPresenter, TaskRepo
from .task_api import complete_task, snooze_task
from .task_models import Task
from .task_selector import select_current_task
from .time_utils import (
    format_remaining,
    minute_of_day,
    progress_percent,
    remaining_minutes,
    task_duration,
    warning_threshold,
)

logger = logging.getLogger(__name__)

ActivationKey = tuple[int, int, int]


class ActivationPhase(str, Enum):
    ARMED = "armed"
    WARNED = "warned"
    DUE = "due"  # alarm fired, completion prompt waiting for a decision
    RESOLVED = "resolved"


def activation_key(task: Task | None) -> ActivationKey | None:
    if task is None:
        return None
    return (task.id, task.start_minute, task.end_minute)


@dataclass(slots=True, frozen=True)
class TickOutcome:
    """Snapshot of one evaluation, for display and for tests."""

    task: Task | None
    remaining_minutes: int
    remaining_text: str
    progress: float
    phase: ActivationPhase
    warned: bool = False
    alarmed: bool = False


class ReminderEngine:
    def __init__(
        self,
        task_store: TaskRepo,
        notifier: NotificationSink,
        presenter: ReminderPresenter | None = None,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._store = task_store
        self._notifier = notifier
        self._presenter = presenter
        self._clock = clock

        self._key: ActivationKey | None = None
        self._phase = ActivationPhase.ARMED
        self._pending: Task | None = None
        self._warning_visible = False

    @property
    def phase(self) -> ActivationPhase:
        return self._phase

    @property
    def pending_task(self) -> Task | None:
        """Task whose completion prompt is waiting for an answer."""
        return self._pending

    @property
    def warning_visible(self) -> bool:
        return self._warning_visible

    # ---- evaluation ----

    def tick(self, now: datetime | None = None) -> TickOutcome:
        if now is None:
            now = self._clock()
        now_min = minute_of_day(now)

        tasks = self._store.list_tasks(now_ts=now.timestamp())
        current = select_current_task(tasks, now_minutes=now_min, now_ts=now.timestamp())

        key = activation_key(current)
        if key != self._key:
            logger.debug("Activation changed %s -> %s", self._key, key)
            self._key = key
            self._phase = ActivationPhase.ARMED
            self._warning_visible = False

        if current is None:
            return TickOutcome(
                task=None,
                remaining_minutes=0,
                remaining_text=format_remaining(0),
                progress=0.0,
                phase=self._phase,
            )

        remaining = remaining_minutes(now_min, current.end_minute)
        threshold = warning_threshold(task_duration(current.start_minute, current.end_minute))
        warned = False
        alarmed = False

        if self._phase is ActivationPhase.ARMED and 0 < remaining <= threshold:
            self._phase = ActivationPhase.WARNED
            self._warning_visible = True
            warned = True
            logger.info(
                "Task %s warning: %s min left (threshold=%s)", current.id, remaining, threshold
            )
            self._safe_call("play_warning", self._notifier.play_warning)
            if self._presenter is not None:
                self._safe_call("show_warning", self._presenter.show_warning, current, remaining)

        if (
            remaining == 0
            and not current.completed
            and self._phase in (ActivationPhase.ARMED, ActivationPhase.WARNED)
        ):
            self._phase = ActivationPhase.DUE
            self._warning_visible = False
            if self._pending is not None and self._pending.id != current.id:
                logger.info("Completion prompt for task %s superseded by task %s", self._pending.id, current.id)
            self._pending = current
            alarmed = True
            logger.info("Task %s window ended, asking for completion", current.id)
            self._safe_call("play_alarm", self._notifier.play_alarm, current.priority)
            if self._presenter is not None:
                self._safe_call("show_completion_prompt", self._presenter.show_completion_prompt, current)

        return TickOutcome(
            task=current,
            remaining_minutes=remaining,
            remaining_text=format_remaining(remaining),
            progress=progress_percent(now_min, current.start_minute, current.end_minute),
            phase=self._phase,
            warned=warned,
            alarmed=alarmed,
        )

    @staticmethod
    def _safe_call(what: str, fn: Callable[..., Any], *args: Any) -> None:
        # Audio/UI failures must never stall the state machine.
        try:
            fn(*args)
        except Exception:
            logger.exception("%s failed", what)

    # ---- user decisions ----

    def dismiss_warning(self) -> None:
        """Hide the warning. The activation stays WARNED, so it does not fire again."""
        self._warning_visible = False

    def _target_id(self, task_id: int | None) -> int | None:
        if task_id is not None:
            return int(task_id)
        return self._pending.id if self._pending is not None else None

    def _settle(self, task_id: int) -> None:
        if self._pending is not None and self._pending.id == task_id:
            self._pending = None
        if self._key is not None and self._key[0] == task_id:
            self._phase = ActivationPhase.RESOLVED
            self._warning_visible = False

    def resolve_completion(
        self, completed: bool, *, task_id: int | None = None, now_ts: float | None = None
    ) -> Task | None:
        """
        Answer the completion prompt (or mark any task by id).

        A "no" answer still resolves the prompt; the task goes back to in-progress.
        """
        target = self._target_id(task_id)
        if target is None:
            return None
        was_pending = self._pending is not None and self._pending.id == target
        task = complete_task(self._store, target, completed, now_ts=now_ts)
        # "No" on a task that was never prompted leaves its activation running.
        if completed or was_pending:
            self._settle(target)
        return task

    def snooze(
        self, minutes: int, *, task_id: int | None = None, now: datetime | None = None
    ) -> Task | None:
        """
        Reset the task window to [now, now + minutes] and re-arm on the next tick.

        A snooze that would pass midnight raises ValueError; the prompt stays pending.
        """
        target = self._target_id(task_id)
        if target is None:
            return None
        if now is None:
            now = self._clock()
        task = snooze_task(self._store, target, minutes, now=now)
        self._settle(target)
        if self._key is not None and self._key[0] == target:
            # Force a fresh activation even if the new window equals the old one.
            self._key = None
        return task


async def run_reminder_engine(
        engine: ReminderEngine,
        *,
        interval_seconds: float = 1.0,
) -> None:
    """
    Simple polling loop.

    Every interval_seconds: engine.tick(). Each tick re-reads the wall clock, so
    skipped or delayed ticks (system sleep) are harmless. A failing tick is logged
    and the loop carries on.

    To stop the engine, cancel the coroutine/task.
    """
    sleep_s = max(0.05, float(interval_seconds))
    logger.info("Reminder engine started (interval=%ss)", sleep_s)

    while True:
        try:
            engine.tick()
        except Exception:
            logger.exception("reminder tick failed")

        await asyncio.sleep(sleep_s)
