# src/taskpulse/tasks/task_store.py

from __future__ import annotations

import contextlib
import dataclasses
import logging
import sqlite3
import time
from pathlib import Path
from typing import Any

from .task_models import Priority, Task, TaskStatus
from .time_utils import LAST_MINUTE

logger = logging.getLogger(__name__)

DEFAULT_RETENTION_DAYS = 14

_UPDATABLE_FIELDS = frozenset(
    {
        "title",
        "start_minute",
        "end_minute",
        "priority",
        "status",
        "completed",
        "completed_at",
        "snoozed_until",
    }
)


class TaskStore:
    """
    SQLite task store.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Ordering:
    - ids come from AUTOINCREMENT, so "ORDER BY id" is insertion order

    Retention:
    - list_tasks() deletes rows whose created_at is older than the retention window

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(
        self,
        db_path: str | Path = "tasks.sqlite3",
        *,
        retention_days: int = DEFAULT_RETENTION_DAYS,
    ) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._retention_s = max(1, int(retention_days)) * 86400.0
        self._ensure_schema()
        logger.info(
            "TaskStore ready db=%s total=%s retention_days=%s",
            self._db_path,
            self.count_tasks(),
            retention_days,
        )

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT NOT NULL,
                    start_minute INTEGER NOT NULL,
                    end_minute INTEGER NOT NULL,
                    priority TEXT NOT NULL DEFAULT 'medium',
                    status TEXT NOT NULL DEFAULT 'not-started',
                    completed INTEGER NOT NULL DEFAULT 0,
                    created_at REAL NOT NULL,
                    updated_at REAL NOT NULL,
                    completed_at REAL,
                    snoozed_until REAL
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("TaskStore migration: added column %s", name)

            add_col("updated_at", "REAL NOT NULL DEFAULT 0")
            add_col("completed_at", "REAL")
            add_col("snoozed_until", "REAL")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_created ON tasks(created_at)")

            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        return Task(
            id=int(row["id"]),
            title=str(row["title"] or ""),
            start_minute=int(row["start_minute"]),
            end_minute=int(row["end_minute"]),
            priority=Priority.from_db(row["priority"]),
            status=TaskStatus.from_db(row["status"]),
            completed=bool(row["completed"]),
            created_at=float(row["created_at"] or 0.0),
            updated_at=float(row["updated_at"] or 0.0),
            completed_at=float(row["completed_at"]) if row["completed_at"] is not None else None,
            snoozed_until=float(row["snoozed_until"]) if row["snoozed_until"] is not None else None,
        )

    @staticmethod
    def _validate(task: Task) -> None:
        if not task.title or not task.title.strip():
            raise ValueError("title is required")
        for name in ("start_minute", "end_minute"):
            value = getattr(task, name)
            if not isinstance(value, int) or not 0 <= value <= LAST_MINUTE:
                raise ValueError(f"{name} must be a minute-of-day in 0..{LAST_MINUTE}, got {value!r}")

    # ---- public API ----

    def count_tasks(self) -> int:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM tasks")
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()

    def create_task(
        self,
        *,
        title: str,
        start_minute: int,
        end_minute: int,
        priority: Priority | str = Priority.HIGH,
        status: TaskStatus | str = TaskStatus.IN_PROGRESS,
        now_ts: float | None = None,
    ) -> Task:
        """Insert a new task. `completed` always starts False."""
        now = time.time() if now_ts is None else float(now_ts)
        task = Task(
            id=0,
            title=(title or "").strip(),
            start_minute=start_minute,
            end_minute=end_minute,
            priority=Priority(priority),
            status=TaskStatus(status),
            completed=False,
            created_at=now,
            updated_at=now,
        )
        self._validate(task)

        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO tasks(
                    title, start_minute, end_minute, priority, status,
                    completed, created_at, updated_at, completed_at, snoozed_until
                )
                VALUES (?, ?, ?, ?, ?, 0, ?, ?, NULL, NULL)
                """,
                (
                    task.title,
                    task.start_minute,
                    task.end_minute,
                    task.priority.value,
                    task.status.value,
                    now,
                    now,
                ),
            )
            conn.commit()
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for tasks insert")
            task.id = int(rowid)
            logger.debug(
                "Task added id=%s title=%r window=%s-%s priority=%s",
                task.id,
                task.title,
                task.start_minute,
                task.end_minute,
                task.priority.value,
            )
            return task
        finally:
            conn.close()

    def list_tasks(self, *, now_ts: float | None = None) -> list[Task]:
        """
        Return all retained tasks in insertion order.

        Side effect: rows created more than the retention window before now_ts are deleted.
        """
        now = time.time() if now_ts is None else float(now_ts)
        cutoff = now - self._retention_s

        conn = self._get_conn()
        try:
            cur = conn.cursor()
            # Called every tick: only take the write lock when something actually expired.
            cur.execute("SELECT 1 FROM tasks WHERE created_at < ? LIMIT 1", (cutoff,))
            if cur.fetchone() is not None:
                cur.execute("DELETE FROM tasks WHERE created_at < ?", (cutoff,))
                logger.info("Evicted %s task(s) older than the retention window", cur.rowcount)
                conn.commit()

            cur.execute("SELECT * FROM tasks ORDER BY id ASC")
            return [self._row_to_task(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def get_task(self, task_id: int) -> Task | None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("SELECT * FROM tasks WHERE id = ?", (int(task_id),))
            row = cur.fetchone()
            return self._row_to_task(row) if row else None
        finally:
            conn.close()

    def update_task(self, task_id: int, **changes: Any) -> Task | None:
        """
        Partial field merge. Returns the updated task, or None if the id is unknown.

        The completed/completed_at pair is kept consistent:
        - completed=True without completed_at stamps the current time
        - completed=False always clears completed_at
        """
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown task field(s): {', '.join(sorted(unknown))}")

        current = self.get_task(task_id)
        if current is None:
            logger.debug("update_task: no task id=%s", task_id)
            return None

        if "priority" in changes:
            changes["priority"] = Priority(changes["priority"])
        if "status" in changes:
            changes["status"] = TaskStatus(changes["status"])
        if "title" in changes:
            changes["title"] = (changes["title"] or "").strip()

        now = time.time()
        merged = dataclasses.replace(current, **changes, updated_at=now)
        merged.completed = bool(merged.completed)
        if merged.completed and merged.completed_at is None:
            merged.completed_at = now
        elif not merged.completed:
            merged.completed_at = None
        self._validate(merged)

        conn = self._get_conn()
        try:
            conn.execute(
                """
                UPDATE tasks
                SET title = ?,
                    start_minute = ?,
                    end_minute = ?,
                    priority = ?,
                    status = ?,
                    completed = ?,
                    updated_at = ?,
                    completed_at = ?,
                    snoozed_until = ?
                WHERE id = ?
                """,
                (
                    merged.title,
                    merged.start_minute,
                    merged.end_minute,
                    merged.priority.value,
                    merged.status.value,
                    1 if merged.completed else 0,
                    merged.updated_at,
                    merged.completed_at,
                    merged.snoozed_until,
                    int(task_id),
                ),
            )
            conn.commit()
        finally:
            conn.close()

        logger.debug("Task updated id=%s fields=%s", task_id, sorted(changes))
        return merged

    def delete_task(self, task_id: int) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute("DELETE FROM tasks WHERE id = ?", (int(task_id),))
            conn.commit()
            if cur.rowcount:
                logger.debug("Task deleted id=%s", task_id)
        finally:
            conn.close()
