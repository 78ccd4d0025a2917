# tests/test_config.py

from __future__ import annotations

import json
import os
from pathlib import Path

from inner_loop_buddy.config import Settings, folders_from_workspace_file


def _clear_env(monkeypatch) -> None:
    for name in list(os.environ):
        if name.startswith("INNERLOOP_"):
            monkeypatch.delenv(name, raising=False)


def test_defaults_open_the_current_directory(monkeypatch, tmp_path: Path) -> None:
    _clear_env(monkeypatch)
    monkeypatch.chdir(tmp_path)

    s = Settings.from_env()
    assert s.workspace_folders == [tmp_path.resolve()]
    assert s.workspace_file is None
    assert s.user_settings_path == Path(".local/innerloop") / "settings.json"
    assert s.folder_settings_name == ".innerloop/settings.json"
    assert s.console_enabled is True


def test_folders_come_from_the_workspace_file(monkeypatch, tmp_path: Path) -> None:
    _clear_env(monkeypatch)
    ws_file = tmp_path / "group.innerloop-workspace"
    ws_file.write_text(json.dumps({"folders": [{"path": "web"}, {"path": str(tmp_path / "api")}, {"x": 1}]}), "utf-8")
    monkeypatch.setenv("INNERLOOP_WORKSPACE_FILE", str(ws_file))
    monkeypatch.setenv("INNERLOOP_CONSOLE_ENABLED", "off")

    s = Settings.from_env()
    assert s.workspace_file == ws_file
    assert s.workspace_folders == [tmp_path / "web", tmp_path / "api"]
    assert s.console_enabled is False


def test_explicit_folder_list_wins(monkeypatch, tmp_path: Path) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("INNERLOOP_FOLDERS", os.pathsep.join([str(tmp_path / "a"), str(tmp_path / "b")]))
    monkeypatch.setenv("INNERLOOP_DATA_DIR", str(tmp_path / "data"))

    s = Settings.from_env()
    assert s.workspace_folders == [tmp_path / "a", tmp_path / "b"]
    assert s.user_settings_path == tmp_path / "data" / "settings.json"


def test_unreadable_workspace_file_lists_no_folders(tmp_path: Path) -> None:
    assert folders_from_workspace_file(tmp_path / "missing.json") == []
    bad = tmp_path / "bad.json"
    bad.write_text("[]", "utf-8")
    assert folders_from_workspace_file(bad) == []
