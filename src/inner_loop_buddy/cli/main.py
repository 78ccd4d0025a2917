# src/inner_loop_buddy/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then:
- consumes matched task events and launches the browser (background task),
- runs the console REPL (optional) until /exit, EOF or SIGTERM.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal

from ..cli.bootstrap import create_initial_state
from ..config import Settings, get_settings
from ..connectors.console_connector import (
    ConsoleFolderPicker,
    ConsoleInput,
    ConsoleNotifier,
    run_console_loop,
)
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def _shutdown(state: AppState, launcher_task: asyncio.Task[None]) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    # Disposing closes the event stream, which ends launcher.run().
    try:
        state.monitor.dispose()
    except Exception:
        logger.exception("Monitor dispose failed.")

    try:
        await asyncio.wait_for(launcher_task, timeout=5.0)
    except Exception:
        logger.debug("Launcher did not stop cleanly.", exc_info=True)

    try:
        await state.host.shutdown()
    except Exception:
        logger.exception("Task host shutdown failed.")


async def run_app(settings: Settings) -> None:
    console = ConsoleInput()
    state = create_initial_state(
        settings=settings,
        notifier=ConsoleNotifier(),
        picker=ConsoleFolderPicker(console),
    )

    launcher_task = asyncio.create_task(state.launcher.run(state.monitor.events()))
    stop_main = asyncio.Event()

    def _handle_signal(signum: int) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()
        console.close()

    loop = asyncio.get_running_loop()
    # Some platforms (Windows) do not support loop signal handlers.
    with contextlib.suppress(NotImplementedError):
        loop.add_signal_handler(signal.SIGTERM, _handle_signal, signal.SIGTERM)

    try:
        if settings.console_enabled:
            await run_console_loop(state, console)
        else:
            logger.info("Console disabled. Watching tasks only. Send SIGTERM or press Ctrl+C to stop.")
            await stop_main.wait()
    finally:
        await _shutdown(state, launcher_task)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    try:
        asyncio.run(run_app(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    logger.info("Bye.")


if __name__ == "__main__":
    main()
