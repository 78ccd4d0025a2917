# tests/conftest.py

from __future__ import annotations

from pathlib import Path

import pytest

from inner_loop_buddy.cli.bootstrap import create_initial_state
from inner_loop_buddy.config import Settings
from inner_loop_buddy.core.scope import Workspace
from inner_loop_buddy.core.state import AppState
from inner_loop_buddy.settings.store import SettingsStore

from .fakes import FakeBrowser, FakeNotifier, FakePicker, FakeTaskHost


@pytest.fixture()
def folder_paths(tmp_path: Path) -> list[Path]:
    """Two empty project folders, A and B."""
    paths = [tmp_path / "A", tmp_path / "B"]
    for p in paths:
        p.mkdir()
    return paths


@pytest.fixture()
def user_settings_path(tmp_path: Path) -> Path:
    return tmp_path / "user" / "settings.json"


@pytest.fixture()
def workspace(folder_paths: list[Path]) -> Workspace:
    """Multi-root workspace (A + B), no group file."""
    return Workspace.from_paths(folder_paths)


@pytest.fixture()
def single_workspace(folder_paths: list[Path]) -> Workspace:
    return Workspace.from_paths(folder_paths[:1])


@pytest.fixture()
def make_store(user_settings_path: Path):
    """
    Build a real SettingsStore over whatever files the test wrote.

    We use the real JSON-backed store rather than a fake because layering
    (user -> workspace -> folder) is part of what we want to test.
    """

    def _make(ws: Workspace) -> SettingsStore:
        return SettingsStore(ws, user_settings_path=user_settings_path)

    return _make


@pytest.fixture()
def host() -> FakeTaskHost:
    return FakeTaskHost()


@pytest.fixture()
def browser() -> FakeBrowser:
    return FakeBrowser()


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def picker() -> FakePicker:
    return FakePicker()


@pytest.fixture()
def settings(tmp_path: Path, folder_paths: list[Path], user_settings_path: Path) -> Settings:
    return Settings(
        app_name="innerloop-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        user_settings_path=user_settings_path,
        workspace_file=None,
        workspace_folders=list(folder_paths),
        folder_settings_name=".innerloop/settings.json",
        folder_tasks_name=".innerloop/tasks.json",
        console_enabled=False,
    )


@pytest.fixture()
def state(settings: Settings, browser: FakeBrowser, notifier: FakeNotifier, picker: FakePicker) -> AppState:
    """Fully wired AppState over temp folders, with fake UI surfaces."""
    return create_initial_state(settings=settings, notifier=notifier, picker=picker, browser=browser)
