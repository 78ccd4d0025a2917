# src/inner_loop_buddy/config.py

"""Application settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Only process-level knobs live here (paths, logging, which folders are open).
- Launch behaviour (URL, criteria, delays) is resource-scoped and lives in
  JSON settings files, see settings/store.py.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "INNERLOOP"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_list(name: str, default: list[str]) -> list[str]:
    """Folder list: os.pathsep separated (paths may contain commas/spaces)."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.split(os.pathsep) if p.strip()]


def _env_path(name: str, default: Path | None) -> Path | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def folders_from_workspace_file(path: Path) -> list[Path]:
    """Folder paths listed in a group file; relative paths are relative to the file."""
    try:
        data = json.loads(path.read_text("utf-8"))
    except (OSError, json.JSONDecodeError):
        return []
    if not isinstance(data, dict):
        return []

    out: list[Path] = []
    for item in data.get("folders", []) or []:
        raw = item.get("path") if isinstance(item, dict) else None
        if not raw:
            continue
        p = Path(str(raw)).expanduser()
        out.append(p if p.is_absolute() else (path.parent / p))
    return out


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Settings layers ----
    user_settings_path: Path
    workspace_file: Path | None
    workspace_folders: list[Path]
    folder_settings_name: str
    folder_tasks_name: str

    # ---- Connectors ----
    console_enabled: bool

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "innerloop") or "innerloop"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/innerloop")) or Path(".local/innerloop")
        user_settings_path = _env_path(_k("USER_SETTINGS"), None) or data_dir / "settings.json"

        workspace_file = _env_path(_k("WORKSPACE_FILE"), None)
        folders = [Path(p).expanduser() for p in _env_list(_k("FOLDERS"), [])]
        if not folders and workspace_file is not None:
            folders = folders_from_workspace_file(workspace_file)
        if not folders and workspace_file is None:
            # Plain "open a folder" mode: the current directory.
            folders = [Path.cwd()]

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            user_settings_path=user_settings_path,
            workspace_file=workspace_file,
            workspace_folders=folders,
            folder_settings_name=_env(_k("FOLDER_SETTINGS_NAME"), ".innerloop/settings.json"),
            folder_tasks_name=_env(_k("FOLDER_TASKS_NAME"), ".innerloop/tasks.json"),
            console_enabled=_env_bool(_k("CONSOLE_ENABLED"), True),
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
