# src/taskpulse/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs on one asyncio loop:
- the reminder engine polling task,
- the console REPL.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import ConsolePresenter, run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging
from ..tasks.reminder_engine import run_reminder_engine

logger = logging.getLogger(__name__)


def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    # TaskStore uses short-lived sqlite connections per call; no explicit close required.
    try:
        state.notifier.shutdown()
    except Exception:
        logger.debug("Sound notifier shutdown failed.", exc_info=True)


async def _run(state: AppState) -> None:
    interval = float(getattr(state.settings, "tick_interval_seconds", 1.0))
    engine_task = asyncio.create_task(run_reminder_engine(state.engine, interval_seconds=interval))
    try:
        await run_console_loop(state)
    finally:
        engine_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await engine_task


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings, presenter=ConsolePresenter())

    try:
        asyncio.run(_run(state))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")
    finally:
        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
