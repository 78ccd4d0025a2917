# src/inner_loop_buddy/cli/commands.py

from __future__ import annotations

import inspect
import json
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import cast

from ..core.configuration import ConfigurationAggregator
from ..core.scope import config_scope_from_task_scope
from ..core.state import AppState
from ..settings.store import DEFAULT_URL

CommandEmitter = Callable[[str], None]
CommandResult = str | Awaitable[str]
CommandHandler2 = Callable[[AppState, list[str]], CommandResult]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], CommandResult]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Slash-command registry used by the console connector (/help, /run, ...)."""

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

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        Handlers may be plain functions or coroutines.
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

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            result = cast(CommandHandler3, handler)(state, args, emit)
        else:
            result = cast(CommandHandler2, handler)(state, args)

        if inspect.isawaitable(result):
            result = await result
        return cast(str, result)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _folder_label(state: AppState, uri: str | None) -> str:
    folder = state.workspace.folder_for_uri(uri)
    return folder.name if folder is not None else "global"


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    ws = state.workspace
    aggregator = ConfigurationAggregator(state.store)
    lines = ["Status:", f"  Monitor: {state.monitor.state.value}"]
    if ws.workspace_file is not None:
        lines.append(f"  Workspace file: {ws.workspace_file}")
    active = ws.folder_containing(ws.active_resource)
    lines.append(f"  Active resource: {ws.active_resource or '-'} ({active.name if active else 'no folder'})")
    for f in ws.folders:
        scope = f.scope
        lines.append(
            f"  [{f.name}] url={state.store.get(DEFAULT_URL, scope) or '-'} "
            f"mode={aggregator.mode_for(scope).value} "
            f"behavior={aggregator.behavior_for(scope).value} "
            f"criteria={len(aggregator.criteria_for(scope))} "
            f"occurrences={state.monitor.occurrences(scope)}"
        )
    return "\n".join(lines)


def cmd_tasks(state: AppState, args: list[str]) -> str:
    """
    /tasks  -> list task definitions from every folder, as the data criteria match on
    """
    tasks = state.host.fetch_tasks()
    if not tasks:
        return f"No tasks defined (looked for {state.host.tasks_file_name} in each folder)."
    lines = ["Tasks:"]
    for t in tasks:
        lines.append(f"  {t.name} [{_folder_label(state, t.scope.uri)}] {json.dumps(t.to_dict(), sort_keys=True)}")
    return "\n".join(lines)


async def cmd_run(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /run <label>           -> start the first task with that label
    /run <label> <folder>  -> start it from a specific folder
    """
    if not args:
        return "Usage: /run <label> [folder]"

    label = args[0]
    folder_name = args[1] if len(args) > 1 else None
    task = state.host.find_task(label, folder_name)
    if task is None:
        where = f" in folder '{folder_name}'" if folder_name else ""
        return f"No task '{label}'{where}. Use /tasks to list them."

    if emit:
        emit(f"Starting '{label}'...")
    execution = await state.host.execute_task(task)
    return f"Started '{task.name}' in {execution.folder.name} (pid={execution.process.pid})."


def cmd_running(state: AppState, args: list[str]) -> str:
    running = state.host.task_executions()
    if not running:
        return "No tasks running."
    lines = ["Running tasks:"]
    for t in running:
        lines.append(f"  {t.name} [{_folder_label(state, t.scope.uri)}]")
    return "\n".join(lines)


async def cmd_open(state: AppState, args: list[str]) -> str:
    if await state.launcher.open_default_url_manually():
        return "Browser opened."
    return "Nothing opened."


def cmd_focus(state: AppState, args: list[str]) -> str:
    """
    /focus <path>  -> treat <path> as the file being edited
    /focus         -> clear it
    """
    ws = state.workspace
    if not args:
        ws.active_resource = None
        return "Active resource cleared."

    ws.active_resource = Path(" ".join(args)).expanduser().resolve()
    folder = ws.folder_containing(ws.active_resource)
    scope = config_scope_from_task_scope(None, ws)
    return (
        f"Active resource: {ws.active_resource} "
        f"(folder: {folder.name if folder else 'none'}, settings scope: {scope or 'unscoped'})"
    )


def cmd_reload(state: AppState, args: list[str]) -> str:
    state.store.reload()
    return "Settings reloaded."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show folders and their resolved settings.")
registry.register("tasks", cmd_tasks, help_text="List task definitions.")
registry.register("run", cmd_run, help_text="Start a task: /run <label> [folder].")
registry.register("running", cmd_running, help_text="List running tasks.")
registry.register("open", cmd_open, help_text="Open the default URL now.")
registry.register("focus", cmd_focus, help_text="Set the active resource: /focus <path>.")
registry.register("reload", cmd_reload, help_text="Re-read settings files.")
