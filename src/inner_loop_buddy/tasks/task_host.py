# src/inner_loop_buddy/tasks/task_host.py

from __future__ import annotations

"""
Local task host.

Reads task definitions from each folder's tasks file and runs them as shell
subprocesses. Start notifications go to subscribers synchronously, on the
event loop, one at a time, so subscribers need no locking.

tasks file format:
    {"tasks": [{"label": "serve", "type": "npm", "script": "serve",
                "command": "npm run serve"}]}

Everything except "label" and "command" is opaque and ends up in the
descriptor's definition (so criteria can match on it).
"""

import asyncio
import contextlib
import logging
from dataclasses import dataclass, field
from typing import Any

from ..core.ports import TaskStartCallback
from ..core.scope import Workspace, WorkspaceFolder
from ..settings.store import SettingsFileError, read_json_object
from .task_models import TaskDescriptor

logger = logging.getLogger(__name__)

TASK_SOURCE = "Workspace"


@dataclass(slots=True)
class TaskExecution:
    task: TaskDescriptor
    folder: WorkspaceFolder
    process: asyncio.subprocess.Process
    waiter: asyncio.Task[int] | None = None


@dataclass(slots=True)
class _Subscription:
    host: LocalTaskHost
    callback: TaskStartCallback
    disposed: bool = field(default=False)

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        self.host._unsubscribe(self.callback)


def descriptor_from_entry(entry: dict[str, Any], folder: WorkspaceFolder) -> TaskDescriptor | None:
    label = str(entry.get("label") or "").strip()
    command = str(entry.get("command") or "").strip()
    if not label or not command:
        return None

    definition = {k: v for k, v in entry.items() if k not in ("label", "command")}
    definition.setdefault("type", "shell")
    return TaskDescriptor(
        definition=definition,
        name=label,
        scope=folder.scope,
        source=TASK_SOURCE,
        execution={"commandLine": command},
    )


class LocalTaskHost:
    def __init__(self, workspace: Workspace, *, tasks_file_name: str = ".innerloop/tasks.json") -> None:
        self.workspace = workspace
        self.tasks_file_name = tasks_file_name
        self._callbacks: list[TaskStartCallback] = []
        self._executions: list[TaskExecution] = []

    # ---------- subscriptions ----------

    def on_did_start_task(self, callback: TaskStartCallback) -> _Subscription:
        self._callbacks.append(callback)
        return _Subscription(host=self, callback=callback)

    def _unsubscribe(self, callback: TaskStartCallback) -> None:
        with contextlib.suppress(ValueError):
            self._callbacks.remove(callback)

    def _notify_started(self, task: TaskDescriptor) -> None:
        for cb in list(self._callbacks):
            try:
                cb(task)
            except Exception:
                logger.exception("Task start subscriber failed for '%s'", task.name)

    # ---------- definitions ----------

    def fetch_tasks(self) -> list[TaskDescriptor]:
        """All task definitions across folders (re-read on every call)."""
        out: list[TaskDescriptor] = []
        for folder in self.workspace.folders:
            path = folder.path / self.tasks_file_name
            try:
                data = read_json_object(path)
            except (OSError, SettingsFileError):
                logger.exception("Failed to read tasks from %s", path)
                continue

            entries = data.get("tasks", [])
            if not isinstance(entries, list):
                logger.warning("%s: 'tasks' must be a list", path)
                continue

            for entry in entries:
                if not isinstance(entry, dict):
                    continue
                task = descriptor_from_entry(entry, folder)
                if task is None:
                    logger.warning("%s: skipping task without label/command: %r", path, entry)
                    continue
                out.append(task)
        return out

    def find_task(self, label: str, folder_name: str | None = None) -> TaskDescriptor | None:
        for task in self.fetch_tasks():
            if task.name != label:
                continue
            if folder_name is None:
                return task
            folder = self.workspace.folder_for_uri(task.scope.uri)
            if folder is not None and folder.name == folder_name:
                return task
        return None

    # ---------- executions ----------

    def task_executions(self) -> list[TaskDescriptor]:
        return [e.task for e in self._executions]

    async def execute_task(self, task: TaskDescriptor) -> TaskExecution:
        folder = self.workspace.folder_for_uri(task.scope.uri)
        if folder is None:
            raise ValueError(f"Task '{task.name}' does not belong to an open folder")

        command = str(task.execution.get("commandLine", ""))
        process = await asyncio.create_subprocess_shell(
            command,
            cwd=str(folder.path),
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
        execution = TaskExecution(task=task, folder=folder, process=process)
        self._executions.append(execution)
        logger.info("Started task '%s' in %s (pid=%s)", task.name, folder.name, process.pid)

        execution.waiter = asyncio.create_task(self._wait_for_exit(execution))
        self._notify_started(task)
        return execution

    async def _wait_for_exit(self, execution: TaskExecution) -> int:
        code = await execution.process.wait()
        with contextlib.suppress(ValueError):
            self._executions.remove(execution)
        logger.info("Task '%s' exited with code %s", execution.task.name, code)
        return code

    async def shutdown(self, timeout: float = 5.0) -> None:
        """Terminate everything still running."""
        for execution in list(self._executions):
            if execution.process.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    execution.process.terminate()

        waiters = [e.waiter for e in self._executions if e.waiter is not None]
        if not waiters:
            return
        _done, pending = await asyncio.wait(waiters, timeout=timeout)
        for execution in list(self._executions):
            if execution.waiter in pending:
                with contextlib.suppress(ProcessLookupError):
                    execution.process.kill()
        if pending:
            await asyncio.wait(pending, timeout=timeout)
