# tests/test_commands.py

from __future__ import annotations

from taskpulse.cli.commands import CommandRegistry, registry
from taskpulse.core.state import AppState
from taskpulse.tasks.task_models import Priority, TaskStatus

from .fakes import FakeClock, at


def test_command_registry_routes_names_and_aliases(state: AppState) -> None:
    reg = CommandRegistry()
    seen: list[list[str]] = []

    def echo(state, args):
        seen.append(args)
        return "echo"

    reg.register("echo", echo, "repeat", aliases=["e"])

    assert reg.handle(state, "/echo a b") == "echo"
    assert reg.handle(state, "/E c") == "echo"
    assert seen == [["a", "b"], ["c"]]
    assert "/echo - repeat" in reg.build_help()
    assert "/e -" not in reg.build_help()


def test_command_registry_unknown_and_non_command(state: AppState) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")


def test_add_and_list(state: AppState) -> None:
    reply = registry.handle(state, "/add 09:00 09:30 low not-started Write the weekly report")
    assert reply is not None and reply.startswith("Added #")

    tasks = state.task_store.list_tasks()
    assert len(tasks) == 1
    t = tasks[0]
    assert t.title == "Write the weekly report"
    assert t.priority is Priority.LOW
    assert t.status is TaskStatus.NOT_STARTED

    listing = registry.handle(state, "/list") or ""
    assert "09:00-09:30" in listing
    assert "Write the weekly report" in listing


def test_add_rejects_bad_time(state: AppState) -> None:
    reply = registry.handle(state, "/add 9am 10:00 Something") or ""
    assert reply.startswith("Bad time")
    assert state.task_store.list_tasks() == []


def test_edit_accepts_multiword_title(state: AppState) -> None:
    registry.handle(state, "/add 09:00 09:30 Old")
    t = state.task_store.list_tasks()[0]

    reply = registry.handle(state, f"/edit {t.id} title=New shiny title end=10:15") or ""
    assert reply.startswith("Updated")
    updated = state.task_store.get_task(t.id)
    assert updated is not None
    assert updated.title == "New shiny title"
    assert updated.end_minute == 615


def test_delete_requires_confirmation(state: AppState) -> None:
    registry.handle(state, "/add 09:00 09:30 Doomed")
    t = state.task_store.list_tasks()[0]

    ask = registry.handle(state, f"/delete {t.id}") or ""
    assert "Are you sure" in ask
    assert state.task_store.get_task(t.id) is not None

    assert registry.handle(state, "/delete yes") == f"Deleted task #{t.id}."
    assert state.task_store.get_task(t.id) is None
    assert "Nothing to delete" in (registry.handle(state, "/delete yes") or "")


def test_done_and_snooze_need_pending_prompt(state: AppState) -> None:
    assert "No task is waiting" in (registry.handle(state, "/done yes") or "")
    assert "No task is waiting" in (registry.handle(state, "/snooze 10") or "")
    assert (registry.handle(state, "/snooze soon") or "").startswith("Usage")


def test_done_answers_completion_prompt(state: AppState, presenter) -> None:
    registry.handle(state, "/add 09:00 09:30 Standup")
    t = state.task_store.list_tasks()[0]

    state.engine.tick(at(9, 30))
    assert presenter.prompts == [t.id]

    reply = registry.handle(state, "/done yes") or ""
    assert reply.startswith("Completed")
    stored = state.task_store.get_task(t.id)
    assert stored is not None and stored.completed is True
    assert state.engine.pending_task is None


def test_current_and_stats(state: AppState, clock: FakeClock) -> None:
    assert registry.handle(state, "/current") == "No current task."

    registry.handle(state, "/add 09:00 10:40 medium Deep work")
    clock.now = at(10, 0)
    current = registry.handle(state, "/current") or ""
    assert "Deep work" in current
    assert "40m remaining" in current

    stats = registry.handle(state, "/stats") or ""
    assert "Completion rate: 0.0%" in stats
    assert "medium=1" in stats


def test_current_reflects_done_without_waiting_for_a_tick(state: AppState, clock: FakeClock) -> None:
    registry.handle(state, "/add 09:00 09:30 Standup")
    clock.now = at(9, 30)
    assert "Standup" in (registry.handle(state, "/current") or "")
    assert state.engine.pending_task is not None

    assert (registry.handle(state, "/done yes") or "").startswith("Completed")
    assert registry.handle(state, "/current") == "No current task."


def test_snooze_past_midnight_keeps_the_prompt(state: AppState, clock: FakeClock, presenter) -> None:
    registry.handle(state, "/add 23:00 23:59 Night shift")
    t = state.task_store.list_tasks()[0]
    clock.now = at(23, 59)
    state.engine.tick()
    assert presenter.prompts == [t.id]

    clock.now = at(23, 59, 5)
    reply = registry.handle(state, "/snooze 15") or ""
    assert reply.startswith("Cannot snooze")
    assert state.engine.pending_task is not None and state.engine.pending_task.id == t.id

    clock.now = at(23, 59, 6)
    state.engine.tick()
    assert presenter.prompts == [t.id]
