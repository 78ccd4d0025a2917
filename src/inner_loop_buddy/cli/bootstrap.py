# src/inner_loop_buddy/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- builds the workspace shape and the layered settings store,
- wires the task host, monitor and launch controller into AppState.

The monitor is created here, once, and owned by AppState; main() disposes it.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.configuration import ConfigurationAggregator
from ..core.ports import BrowserSurface, FolderPicker, Notifier
from ..core.scope import Workspace
from ..core.state import AppState
from ..launch.browser import SystemBrowserSurface
from ..launch.controller import LaunchController
from ..settings.store import SettingsStore
from ..tasks.task_host import LocalTaskHost
from ..tasks.task_monitor import TaskMonitor

logger = logging.getLogger(__name__)


def create_initial_state(
    *,
    settings=None,
    notifier: Notifier,
    picker: FolderPicker,
    browser: BrowserSurface | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    workspace = Workspace.from_paths(settings.workspace_folders, workspace_file=settings.workspace_file)
    if not workspace.folders:
        logger.warning("No folders open; automatic launches have nothing to watch.")

    store = SettingsStore(
        workspace,
        user_settings_path=settings.user_settings_path,
        folder_settings_name=settings.folder_settings_name,
    )
    host = LocalTaskHost(workspace, tasks_file_name=settings.folder_tasks_name)

    aggregator = ConfigurationAggregator(store)
    monitor = TaskMonitor(host, aggregator.monitoring_resolver(workspace))

    launcher = LaunchController(
        workspace=workspace,
        store=store,
        browser=browser or SystemBrowserSurface(),
        notifier=notifier,
        picker=picker,
    )

    logger.info("Workspace: %s", ", ".join(f.name for f in workspace.folders) or "(empty)")
    return AppState(
        settings=settings,
        workspace=workspace,
        store=store,
        host=host,
        monitor=monitor,
        launcher=launcher,
    )
