# src/taskpulse/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
import threading
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..tasks.task_api import SNOOZE_PRESETS
from ..tasks.task_models import Task
from ..tasks.time_utils import format_remaining

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsolePresenter:
    """ReminderPresenter that prints prompts to the terminal."""

    def show_warning(self, task: Task, remaining_minutes: int) -> None:
        _print_ts(
            f'[WARNING] Task "{task.title}" is almost ending! '
            f"You have {format_remaining(remaining_minutes)} remaining. (/dismiss)"
        )

    def show_completion_prompt(self, task: Task) -> None:
        presets = " | ".join(f"/snooze {m}" for m in SNOOZE_PRESETS)
        _print_ts(
            f"[TASK COMPLETE?] Did you complete: {task.title}?\n"
            f"    /done yes | /done no | {presets}"
        )


def _start_stdin_reader(loop: asyncio.AbstractEventLoop, lines: asyncio.Queue[str | None]) -> None:
    """
    Read stdin on a daemon thread and hand lines to the event loop.

    None is queued on EOF. The thread is a daemon so a blocked input() never holds up exit.
    """

    def reader() -> None:
        while True:
            line: str | None
            try:
                line = input(">>> ")
            except (EOFError, KeyboardInterrupt):
                line = None
            try:
                loop.call_soon_threadsafe(lines.put_nowait, line)
            except RuntimeError:
                # event loop already closed (app is exiting)
                return
            if line is None:
                return

    threading.Thread(target=reader, name="taskpulse-stdin", daemon=True).start()


async def run_console_loop(state: AppState) -> None:
    """
    Console REPL.

    Lines are read on a background thread; commands are handled on the event loop,
    so the reminder tick and user actions never touch the store concurrently.
    """
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    lines: asyncio.Queue[str | None] = asyncio.Queue()
    _start_stdin_reader(asyncio.get_running_loop(), lines)

    while True:
        raw = await lines.get()
        if raw is None:
            logger.info("Console EOF received, exiting.")
            break

        user_input = raw.strip()
        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not user_input.startswith("/"):
            _print_ts("Commands start with '/'. Try /help.")
            continue

        try:
            cmd_response = command_registry.handle(state, user_input)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response is not None:
            _print_ts(cmd_response)

    logger.info("Console connector finished.")
