# src/taskpulse/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.state import AppState
from ..tasks.task_api import SNOOZE_PRESETS, add_task_from_strings, edit_task
from ..tasks.task_models import Priority, Task, TaskStatus
from ..tasks.task_stats import compute_stats, format_stats
from ..tasks.time_utils import FormatError, from_minutes

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)

_PRIORITIES = {p.value for p in Priority}
_STATUSES = {s.value for s in TaskStatus}
_EDIT_KEYS = ("title", "start", "end", "priority", "status")


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def format_task_line(task: Task) -> str:
    done = " (done)" if task.completed else ""
    return (
        f"#{task.id} {from_minutes(task.start_minute)}-{from_minutes(task.end_minute)} "
        f"[{task.priority.value}] {task.status.value}: {task.title}{done}"
    )


def _parse_id(raw: str) -> int | None:
    try:
        return int(raw.lstrip("#"))
    except ValueError:
        return None


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    s = state.settings
    engine = state.engine
    pending = engine.pending_task
    sound = "ON" if state.notifier.enabled else "OFF"
    return (
        "Status:\n"
        f"  Tasks DB: {getattr(s, 'tasks_db_path', '?')}\n"
        f"  Sound: {sound} (dir: {getattr(s, 'sounds_dir', '?')})\n"
        f"  Tick interval: {getattr(s, 'tick_interval_seconds', '?')}s\n"
        f"  Activation phase: {engine.phase.value}\n"
        f"  Completion prompt: {('#' + str(pending.id)) if pending else 'none'}"
    )


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add HH:MM HH:MM [priority] [status] title...
    """
    usage = "Usage: /add <start HH:MM> <end HH:MM> [high|medium|low] [status] <title>"
    if len(args) < 3:
        return usage

    start, end, rest = args[0], args[1], list(args[2:])
    priority = Priority.HIGH.value
    status = TaskStatus.IN_PROGRESS.value
    if rest and rest[0].lower() in _PRIORITIES:
        priority = rest.pop(0).lower()
    if rest and rest[0].lower() in _STATUSES:
        status = rest.pop(0).lower()

    title = " ".join(rest).strip()
    if not title:
        return usage

    try:
        task = add_task_from_strings(
            state.task_store, title=title, start=start, end=end, priority=priority, status=status
        )
    except FormatError as e:
        return f"Bad time: {e}. {usage}"
    except ValueError as e:
        return f"Cannot add task: {e}"

    return f"Added {format_task_line(task)}"


def cmd_list(state: AppState, args: list[str]) -> str:
    tasks = state.task_store.list_tasks()
    if not tasks:
        return "No tasks. Add one with /add."
    return "All tasks:\n" + "\n".join(f"  {format_task_line(t)}" for t in tasks)


def cmd_current(state: AppState, args: list[str]) -> str:
    # Fresh tick: an answer given since the last poll must already be reflected.
    outcome = state.engine.tick()
    if outcome.task is None:
        return "No current task."
    t = outcome.task
    return (
        f"CURRENT TASK: {t.title}\n"
        f"  {from_minutes(t.start_minute)} - {from_minutes(t.end_minute)} | {t.priority.value} priority\n"
        f"  {outcome.remaining_text} remaining ({outcome.progress:.0f}% elapsed)"
    )


def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <id> key=value ...   (keys: title, start, end, priority, status)

    Tokens without "=" continue the previous value, so titles may contain spaces.
    """
    usage = "Usage: /edit <id> [title=...] [start=HH:MM] [end=HH:MM] [priority=...] [status=...]"
    if len(args) < 2:
        return usage
    task_id = _parse_id(args[0])
    if task_id is None:
        return usage

    fields: dict[str, str] = {}
    last_key: str | None = None
    for token in args[1:]:
        key, sep, value = token.partition("=")
        if sep and key.lower() in _EDIT_KEYS:
            last_key = key.lower()
            fields[last_key] = value
        elif last_key is not None:
            fields[last_key] = f"{fields[last_key]} {token}"
        else:
            return usage

    try:
        task = edit_task(state.task_store, task_id, **fields)
    except FormatError as e:
        return f"Bad time: {e}. {usage}"
    except ValueError as e:
        return f"Cannot edit task: {e}"

    if task is None:
        return f"No task #{task_id}."
    return f"Updated {format_task_line(task)}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    """
    /delete <id>   -> ask for confirmation
    /delete yes    -> delete the task awaiting confirmation
    /delete no     -> cancel
    """
    if not args:
        return "Usage: /delete <id>, then /delete yes to confirm."

    arg = args[0].lower()
    if arg in ("yes", "y"):
        task_id = state.pending_delete_id
        if task_id is None:
            return "Nothing to delete. Use /delete <id> first."
        state.pending_delete_id = None
        state.task_store.delete_task(task_id)
        return f"Deleted task #{task_id}."

    if arg in ("no", "n"):
        state.pending_delete_id = None
        return "Delete cancelled."

    task_id = _parse_id(arg)
    if task_id is None:
        return "Usage: /delete <id>, then /delete yes to confirm."
    task = state.task_store.get_task(task_id)
    if task is None:
        return f"No task #{task_id}."

    state.pending_delete_id = task_id
    return f"Are you sure you want to delete: {task.title}? Confirm with /delete yes."


def cmd_done(state: AppState, args: list[str]) -> str:
    """
    /done yes [id]  -> mark completed
    /done no [id]   -> not completed, back to in-progress
    Without an id, answers the pending completion prompt.
    """
    usage = "Usage: /done yes|no [id]"
    if not args or args[0].lower() not in ("yes", "y", "no", "n"):
        return usage
    completed = args[0].lower() in ("yes", "y")

    task_id = None
    if len(args) > 1:
        task_id = _parse_id(args[1])
        if task_id is None:
            return usage
    elif state.engine.pending_task is None:
        return "No task is waiting for completion. Use /done yes|no <id>."

    task = state.engine.resolve_completion(completed, task_id=task_id)
    if task is None:
        return f"No task #{task_id}." if task_id is not None else "Task no longer exists."
    return f"{'Completed' if completed else 'Not completed'}: {format_task_line(task)}"


def cmd_snooze(state: AppState, args: list[str]) -> str:
    presets = ", ".join(str(m) for m in SNOOZE_PRESETS)
    usage = f"Usage: /snooze <minutes> [id] (presets: {presets})"
    if not args:
        return usage
    try:
        minutes = int(args[0])
    except ValueError:
        return usage
    if minutes <= 0:
        return usage

    task_id = None
    if len(args) > 1:
        task_id = _parse_id(args[1])
        if task_id is None:
            return usage
    elif state.engine.pending_task is None:
        return "No task is waiting for completion. Use /snooze <minutes> <id>."

    try:
        task = state.engine.snooze(minutes, task_id=task_id)
    except ValueError as e:
        return f"Cannot snooze: {e}."
    if task is None:
        return f"No task #{task_id}." if task_id is not None else "Task no longer exists."
    return f"Snoozed: {format_task_line(task)}"


def cmd_dismiss(state: AppState, args: list[str]) -> str:
    if not state.engine.warning_visible:
        return "No warning to dismiss."
    state.engine.dismiss_warning()
    return "Warning dismissed."


def cmd_stats(state: AppState, args: list[str]) -> str:
    return format_stats(compute_stats(state.task_store.list_tasks()))


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show settings and reminder state.")
registry.register(
    "add",
    cmd_add,
    help_text="Add a task: /add 09:00 09:30 [high|medium|low] [status] Title.",
)
registry.register("list", cmd_list, help_text="List all tasks.", aliases=["all", "ls"])
registry.register("current", cmd_current, help_text="Show the current task and time left.", aliases=["now"])
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <id> start=10:00 title=New title.")
registry.register("delete", cmd_delete, help_text="Delete a task: /delete <id>, then /delete yes.", aliases=["rm"])
registry.register("done", cmd_done, help_text="Answer the completion prompt: /done yes | /done no.")
registry.register("snooze", cmd_snooze, help_text="Move the window to now + N minutes: /snooze 15.")
registry.register("dismiss", cmd_dismiss, help_text="Dismiss the ending-soon warning.")
registry.register("stats", cmd_stats, help_text="Show completion rate and tasks by priority.")
