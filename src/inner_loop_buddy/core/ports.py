# src/inner_loop_buddy/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The launch pipeline depends on Protocols instead of concrete implementations.
This keeps the task host, settings store, browser surface and notifier
swappable and makes testing easier.
"""

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ..launch.browser import ShowOptions
    from ..settings.store import SettingInspection
    from ..tasks.task_models import TaskDescriptor
    from .scope import Scope, WorkspaceFolder

TaskStartCallback = Callable[["TaskDescriptor"], None]


class Subscription(Protocol):
    def dispose(self) -> None: ...


class TaskHost(Protocol):
    """Where tasks run. Start notifications are delivered on the event loop, one at a time."""

    def on_did_start_task(self, callback: TaskStartCallback) -> Subscription: ...

    def task_executions(self) -> list[TaskDescriptor]: ...


class ConfigurationStore(Protocol):
    """
    Resource-scoped settings.

    get(): effective value for the scope (folder > workspace > user > default).
    inspect(): the explicit value at each layer, without fallbacks.
    """

    def get(self, key: str, scope: Scope | None = None, default: Any = None) -> Any: ...

    def inspect(self, key: str, scope: Scope | None = None) -> SettingInspection: ...

    def settings_path_for(self, scope: Scope | None) -> Path | None: ...


class BrowserSurface(Protocol):
    def show(self, url: str, options: ShowOptions | None = None) -> None: ...


@dataclass(slots=True, frozen=True)
class NotifyAction:
    """Optional button attached to a notification (e.g. "Open Settings")."""

    label: str
    target: str


class Notifier(Protocol):
    def notify(self, message: str, action: NotifyAction | None = None) -> None: ...


class FolderPicker(Protocol):
    """Ask the user to choose a folder. None means the prompt was dismissed."""

    async def pick(self, folders: list[WorkspaceFolder]) -> WorkspaceFolder | None: ...
