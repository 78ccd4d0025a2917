# src/inner_loop_buddy/settings/store.py

from __future__ import annotations

"""
Layered JSON settings store.

Layers, lowest priority first:
- user:      one file shared by every project (Settings.user_settings_path)
- workspace: the "settings" section of the group file, if a group file is open
- folder:    <folder>/.innerloop/settings.json, one per workspace folder

Files are read once and cached; call reload() after editing them.
A broken file is logged and treated as empty, never fatal.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..core.scope import Scope, Workspace

logger = logging.getLogger(__name__)

DEFAULT_URL = "default_url"
AUTO_OPEN_DELAY = "auto_open_delay"
AVAILABILITY_CHECK = "availability_check"
AVAILABILITY_CHECK_TIMEOUT = "availability_check_timeout"
EDITOR_COLUMN = "editor_column"
TASK_MONITORING_MODE = "task_monitoring_mode"
MONITORED_TASKS = "monitored_tasks"
MATCHED_TASK_BEHAVIOR = "matched_task_behavior"

DEFAULTS: dict[str, Any] = {
    DEFAULT_URL: None,
    AUTO_OPEN_DELAY: 0,
    AVAILABILITY_CHECK: True,
    AVAILABILITY_CHECK_TIMEOUT: 1000,
    EDITOR_COLUMN: "beside",
    TASK_MONITORING_MODE: "matching",
    MONITORED_TASKS: [],
    MATCHED_TASK_BEHAVIOR: "onetime",
}


class SettingsFileError(ValueError):
    """A settings file exists but is not a JSON object."""


@dataclass(slots=True, frozen=True)
class SettingInspection:
    """Explicit value of one key at each layer (None = not set there)."""

    key: str
    default_value: Any = None
    global_value: Any = None
    workspace_value: Any = None
    folder_value: Any = None


def read_json_object(path: Path) -> dict[str, Any]:
    """Read a JSON object from `path`. Missing file -> {}."""
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text("utf-8") or "{}")
    except json.JSONDecodeError as e:
        raise SettingsFileError(f"{path}: invalid JSON ({e})") from e
    if not isinstance(data, dict):
        raise SettingsFileError(f"{path}: expected a JSON object, got {type(data).__name__}")
    return data


class SettingsStore:
    def __init__(
        self,
        workspace: Workspace,
        *,
        user_settings_path: Path | None = None,
        folder_settings_name: str = ".innerloop/settings.json",
        defaults: dict[str, Any] | None = None,
    ) -> None:
        self.workspace = workspace
        self.user_settings_path = user_settings_path
        self.folder_settings_name = folder_settings_name
        self._defaults = dict(DEFAULTS if defaults is None else defaults)

        self._user: dict[str, Any] = {}
        self._workspace: dict[str, Any] = {}
        self._folders: dict[str, dict[str, Any]] = {}
        self.reload()

    # ---------- loading ----------

    def _load(self, path: Path | None) -> dict[str, Any]:
        if path is None:
            return {}
        try:
            return read_json_object(path)
        except (OSError, SettingsFileError):
            logger.exception("Failed to read settings from %s", path)
            return {}

    def reload(self) -> None:
        self._user = self._load(self.user_settings_path)

        ws_file = self.workspace.workspace_file
        group = self._load(ws_file) if ws_file is not None else {}
        section = group.get("settings", {})
        self._workspace = section if isinstance(section, dict) else {}

        self._folders = {
            f.uri: self._load(f.path / self.folder_settings_name)
            for f in self.workspace.folders
        }
        logger.debug(
            "Settings loaded: user=%d workspace=%d folders=%d",
            len(self._user),
            len(self._workspace),
            len(self._folders),
        )

    # ---------- queries ----------

    def _folder_layer(self, scope: Scope | None) -> dict[str, Any]:
        if scope is None or not scope.is_folder:
            return {}
        return self._folders.get(str(scope.uri), {})

    def inspect(self, key: str, scope: Scope | None = None) -> SettingInspection:
        return SettingInspection(
            key=key,
            default_value=self._defaults.get(key),
            global_value=self._user.get(key),
            workspace_value=self._workspace.get(key),
            folder_value=self._folder_layer(scope).get(key),
        )

    def get(self, key: str, scope: Scope | None = None, default: Any = None) -> Any:
        info = self.inspect(key, scope)
        for value in (info.folder_value, info.workspace_value, info.global_value):
            if value is not None:
                return value
        if info.default_value is not None:
            return info.default_value
        return default

    def settings_path_for(self, scope: Scope | None) -> Path | None:
        """File a user should edit to change settings for `scope`."""
        if scope is not None and scope.is_folder:
            folder = self.workspace.folder_for_uri(scope.uri)
            if folder is not None:
                return folder.path / self.folder_settings_name
        if scope is not None and self.workspace.workspace_file is not None:
            return self.workspace.workspace_file
        return self.user_settings_path
