# src/taskpulse/tasks/task_stats.py

from __future__ import annotations

from collections.abc import Iterable

from .task_models import Priority, Task, TaskStats


def compute_stats(tasks: Iterable[Task]) -> TaskStats:
    items = list(tasks)
    total = len(items)
    completed_count = sum(1 for t in items if t.completed)

    by_priority = {p.value: 0 for p in Priority}
    for t in items:
        key = str(t.priority)
        if key in by_priority:
            by_priority[key] += 1

    return TaskStats(
        total=total,
        completed_count=completed_count,
        completion_rate=(completed_count / total * 100.0) if total else 0.0,
        tasks_by_priority=by_priority,
    )


def format_stats(stats: TaskStats) -> str:
    by = stats.tasks_by_priority
    return (
        "Task statistics:\n"
        f"  Completion rate: {stats.completion_rate:.1f}%\n"
        f"  By priority: high={by.get('high', 0)} medium={by.get('medium', 0)} low={by.get('low', 0)}\n"
        f"  Total: {stats.total} ({stats.completed_count} completed)"
    )
