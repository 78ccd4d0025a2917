# tests/test_commands.py

from __future__ import annotations

import pytest

from inner_loop_buddy.cli.commands import CommandRegistry, registry
from inner_loop_buddy.settings.store import DEFAULT_URL

from .fakes import write_json


@pytest.mark.asyncio
async def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}
    notes: list[str] = []

    def h2(state, args):
        called["h2"] += 1
        return "h2:" + ",".join(args)

    async def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a", aliases=["A2"])
    reg.register("b", h3, "b")

    assert await reg.handle(state, "/a x y") == "h2:x,y"
    assert await reg.handle(state, "/a2") == "h2:"
    assert await reg.handle(state, "/b", emit=notes.append) == "h3"
    assert called == {"h2": 2, "h3": 1}
    assert notes == ["note"]


@pytest.mark.asyncio
async def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert await reg.handle(state, "hello") is None
    assert "Unknown command" in (await reg.handle(state, "/nope") or "")
    assert "Empty command" in (await reg.handle(state, "/") or "")


@pytest.mark.asyncio
async def test_open_command_uses_launcher(state, folder_paths, browser) -> None:
    write_json(folder_paths[0] / ".innerloop" / "settings.json", {DEFAULT_URL: "http://a.test"})
    state.store.reload()

    # Only A overrides the URL, so the (fake) picker is asked; it dismisses.
    assert await registry.handle(state, "/open") == "Nothing opened."
    assert browser.shown == []


@pytest.mark.asyncio
async def test_status_tasks_and_running(state, folder_paths) -> None:
    write_json(
        folder_paths[1] / ".innerloop" / "tasks.json",
        {"tasks": [{"label": "serve", "type": "npm", "script": "serve", "command": "npm run serve"}]},
    )

    status = await registry.handle(state, "/status")
    assert "Monitor: active" in status
    assert "[A]" in status and "[B]" in status

    tasks = await registry.handle(state, "/tasks")
    assert "serve [B]" in tasks
    assert '"script": "serve"' in tasks

    assert await registry.handle(state, "/running") == "No tasks running."
    assert "No task 'nope'" in await registry.handle(state, "/run nope")


@pytest.mark.asyncio
async def test_focus_changes_settings_scope(state, folder_paths) -> None:
    reply = await registry.handle(state, f"/focus {folder_paths[1] / 'index.html'}")
    assert "folder: B" in reply
    assert state.workspace.folder_containing(state.workspace.active_resource).name == "B"

    assert await registry.handle(state, "/focus") == "Active resource cleared."
    assert state.workspace.active_resource is None
