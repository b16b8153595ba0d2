# tests/test_task_store.py

from __future__ import annotations

import time
from pathlib import Path

import pytest

from taskpulse.tasks.task_models import Priority, TaskStatus
from taskpulse.tasks.task_store import TaskStore

DAY = 86400.0


def test_create_list_update_delete(task_store: TaskStore) -> None:
    t1 = task_store.create_task(title="Write report", start_minute=540, end_minute=600)
    t2 = task_store.create_task(
        title="Gym", start_minute=1080, end_minute=1140, priority="low", status="not-started"
    )
    assert t1.id > 0 and t2.id > t1.id
    assert t1.completed is False and t1.completed_at is None
    assert t2.priority is Priority.LOW
    assert t2.status is TaskStatus.NOT_STARTED

    tasks = task_store.list_tasks()
    assert [t.id for t in tasks] == [t1.id, t2.id]

    updated = task_store.update_task(t1.id, title="Write final report", end_minute=630)
    assert updated is not None
    assert updated.title == "Write final report"
    assert updated.end_minute == 630
    assert updated.start_minute == 540  # untouched fields survive the merge

    again = task_store.get_task(t1.id)
    assert again is not None and again.title == "Write final report"

    task_store.delete_task(t1.id)
    assert [t.id for t in task_store.list_tasks()] == [t2.id]


def test_completed_at_follows_completed_flag(task_store: TaskStore) -> None:
    t = task_store.create_task(title="Call mom", start_minute=600, end_minute=615)

    done = task_store.update_task(t.id, completed=True)
    assert done is not None
    assert done.completed is True
    assert done.completed_at is not None

    undone = task_store.update_task(t.id, completed=False, completed_at=123.0)
    assert undone is not None
    assert undone.completed is False
    assert undone.completed_at is None

    stored = task_store.get_task(t.id)
    assert stored is not None and stored.completed_at is None


def test_missing_id_is_not_an_error(task_store: TaskStore) -> None:
    assert task_store.update_task(999, title="ghost") is None
    task_store.delete_task(999)
    assert task_store.get_task(999) is None


def test_eviction_after_retention_window(task_store: TaskStore) -> None:
    now = time.time()
    old = task_store.create_task(title="Old", start_minute=0, end_minute=10, now_ts=now - 15 * DAY)
    recent = task_store.create_task(title="Recent", start_minute=0, end_minute=10, now_ts=now - 13 * DAY)

    ids = [t.id for t in task_store.list_tasks(now_ts=now)]
    assert old.id not in ids
    assert recent.id in ids
    # eviction is permanent, not just a filtered view
    assert task_store.get_task(old.id) is None


def test_listing_only_writes_when_something_expired(task_store: TaskStore, monkeypatch) -> None:
    statements: list[str] = []
    open_conn = task_store._get_conn

    def traced_conn():
        conn = open_conn()
        conn.set_trace_callback(statements.append)
        return conn

    monkeypatch.setattr(task_store, "_get_conn", traced_conn)
    now = time.time()
    task_store.create_task(title="Fresh", start_minute=0, end_minute=10, now_ts=now)

    statements.clear()
    for _ in range(3):
        assert [t.title for t in task_store.list_tasks(now_ts=now)] == ["Fresh"]
    assert not any(s.lstrip().upper().startswith("DELETE") for s in statements)

    task_store.create_task(title="Stale", start_minute=0, end_minute=10, now_ts=now - 15 * DAY)
    statements.clear()
    assert [t.title for t in task_store.list_tasks(now_ts=now)] == ["Fresh"]
    assert any(s.lstrip().upper().startswith("DELETE") for s in statements)


def test_retention_days_is_configurable(tmp_path: Path) -> None:
    store = TaskStore(tmp_path / "short.sqlite3", retention_days=1)
    now = time.time()
    t = store.create_task(title="Yesterday-ish", start_minute=0, end_minute=10, now_ts=now - 2 * DAY)
    assert store.list_tasks(now_ts=now) == []
    assert store.get_task(t.id) is None


def test_validation(task_store: TaskStore) -> None:
    with pytest.raises(ValueError):
        task_store.create_task(title="   ", start_minute=0, end_minute=10)
    with pytest.raises(ValueError):
        task_store.create_task(title="x", start_minute=0, end_minute=1440)
    with pytest.raises(ValueError):
        task_store.create_task(title="x", start_minute=0, end_minute=10, priority="urgent")

    t = task_store.create_task(title="x", start_minute=0, end_minute=10)
    with pytest.raises(ValueError):
        task_store.update_task(t.id, colour="red")
    with pytest.raises(ValueError):
        task_store.update_task(t.id, status="sleeping")


def test_data_survives_reopen(tmp_path: Path) -> None:
    db = tmp_path / "tasks.sqlite3"
    t = TaskStore(db).create_task(title="Persist me", start_minute=60, end_minute=90, priority="medium")

    reopened = TaskStore(db).get_task(t.id)
    assert reopened is not None
    assert reopened.title == "Persist me"
    assert reopened.priority is Priority.MEDIUM
