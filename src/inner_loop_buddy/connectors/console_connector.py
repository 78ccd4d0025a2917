# src/inner_loop_buddy/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
import sys
import threading
from datetime import datetime
from typing import TextIO

from ..cli.commands import registry as command_registry
from ..core.ports import NotifyAction
from ..core.scope import WorkspaceFolder
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsoleInput:
    """
    Lines from stdin, read on a daemon thread and handed to the event loop.

    A daemon thread (rather than run_in_executor) so a pending read never
    blocks interpreter shutdown. readline() returns None on EOF or close().
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdin
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._loop = asyncio.get_running_loop()
        self._thread = threading.Thread(target=self._reader, name="console-input", daemon=True)
        self._thread.start()

    def _reader(self) -> None:
        loop = self._loop
        if loop is None:
            raise RuntimeError("ConsoleInput reader started without an event loop")
        while True:
            try:
                line = self._stream.readline()
            except Exception:
                logger.debug("stdin read failed", exc_info=True)
                line = ""
            if not line:
                loop.call_soon_threadsafe(self._queue.put_nowait, None)
                return
            loop.call_soon_threadsafe(self._queue.put_nowait, line.rstrip("\n"))

    def close(self) -> None:
        self._queue.put_nowait(None)

    async def readline(self, prompt: str = "") -> str | None:
        self.start()
        if prompt:
            print(prompt, end="", flush=True)
        return await self._queue.get()


class ConsoleNotifier:
    def notify(self, message: str, action: NotifyAction | None = None) -> None:
        logger.debug("notify: %s", message)
        _print_ts(f"[NOTICE] {message}")
        if action is not None:
            _print_ts(f"         {action.label}: {action.target}")


class ConsoleFolderPicker:
    def __init__(self, console: ConsoleInput) -> None:
        self._console = console

    async def pick(self, folders: list[WorkspaceFolder]) -> WorkspaceFolder | None:
        if not folders:
            return None
        _print_ts("Several folders configure this setting. Pick one:")
        for i, f in enumerate(folders, start=1):
            print(f"  {i}. {f.name} ({f.path})")

        raw = await self._console.readline("Folder number (empty to cancel): ")
        if raw is None or not raw.strip():
            return None
        try:
            idx = int(raw.strip())
        except ValueError:
            _print_ts(f"Not a number: {raw.strip()!r}")
            return None
        if not 1 <= idx <= len(folders):
            _print_ts(f"No folder #{idx}")
            return None
        return folders[idx - 1]


async def run_console_loop(state: AppState, console: ConsoleInput) -> None:
    logger.info("Console connector started (%d folder(s)).", len(state.workspace.folders))
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    def emit(text: str) -> None:
        _print_ts(text)

    while True:
        user_input = await console.readline(">>> ")
        if user_input is None:
            logger.info("Console input closed, exiting.")
            break

        user_input = user_input.strip()
        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            cmd_response = await command_registry.handle(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response is None:
            cmd_response = "Commands start with '/'. Use /help to list them."
        _print_ts(cmd_response)

    logger.info("Console connector finished.")
