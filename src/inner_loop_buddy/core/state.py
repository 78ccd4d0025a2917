# src/inner_loop_buddy/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..launch.controller import LaunchController
    from ..settings.store import SettingsStore
    from ..tasks.task_host import LocalTaskHost
    from ..tasks.task_monitor import TaskMonitor
    from .scope import Workspace


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    workspace: Workspace
    store: SettingsStore
    host: LocalTaskHost
    monitor: TaskMonitor
    launcher: LaunchController
