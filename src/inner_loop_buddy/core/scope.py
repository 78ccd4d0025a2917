# src/inner_loop_buddy/core/scope.py

from __future__ import annotations

"""
Scopes and scope resolution.

A task runs in one of three scopes: Global, Workspace, or a specific Folder.
Configuration is resolved per folder (or unscoped), so this module turns a
task's scope, or the shape of the open workspace when there is no task, into
the scope that settings should be read from.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ports import ConfigurationStore, FolderPicker

logger = logging.getLogger(__name__)

GLOBAL_SCOPE_KEY = "global"


class ScopeKind(StrEnum):
    GLOBAL = "global"
    WORKSPACE = "workspace"
    FOLDER = "folder"


@dataclass(frozen=True, slots=True)
class Scope:
    """Task/configuration boundary. `uri` is set only for folder scopes."""

    kind: ScopeKind
    uri: str | None = None

    @classmethod
    def folder(cls, uri: str) -> Scope:
        if not uri:
            raise ValueError("folder scope requires a uri")
        return cls(ScopeKind.FOLDER, uri)

    @property
    def is_folder(self) -> bool:
        return self.kind == ScopeKind.FOLDER

    def __str__(self) -> str:
        return self.uri if self.is_folder and self.uri else self.kind.value


GLOBAL_SCOPE = Scope(ScopeKind.GLOBAL)
WORKSPACE_SCOPE = Scope(ScopeKind.WORKSPACE)


@dataclass(frozen=True, slots=True)
class WorkspaceFolder:
    path: Path
    name: str
    index: int = 0

    @property
    def uri(self) -> str:
        return self.path.as_uri()

    @property
    def scope(self) -> Scope:
        return Scope.folder(self.uri)


@dataclass(slots=True)
class Workspace:
    """
    Shape of the open project.

    - folders: roots, in the order they were opened
    - workspace_file: optional group file shared by all folders
    - active_resource: the file currently being edited (may be None)
    """

    folders: list[WorkspaceFolder] = field(default_factory=list)
    workspace_file: Path | None = None
    active_resource: Path | None = None

    @classmethod
    def from_paths(cls, paths: Sequence[Path], workspace_file: Path | None = None) -> Workspace:
        folders = []
        for i, p in enumerate(paths):
            resolved = Path(p).expanduser().resolve()
            folders.append(WorkspaceFolder(path=resolved, name=resolved.name, index=i))
        return cls(folders=folders, workspace_file=workspace_file)

    def folder_for_uri(self, uri: str | None) -> WorkspaceFolder | None:
        if not uri:
            return None
        for f in self.folders:
            if f.uri == uri:
                return f
        return None

    def folder_containing(self, path: Path | None) -> WorkspaceFolder | None:
        """Innermost folder that contains `path`."""
        if path is None:
            return None
        target = Path(path).expanduser().resolve()
        best: WorkspaceFolder | None = None
        for f in self.folders:
            if target == f.path or f.path in target.parents:
                if best is None or len(f.path.parts) > len(best.path.parts):
                    best = f
        return best


def scope_key_of(scope: Scope | None) -> str:
    """Stable map key: Global and Workspace share one key, folders use their uri."""
    if scope is None or not scope.is_folder:
        return GLOBAL_SCOPE_KEY
    return str(scope.uri)


def config_scope_from_task_scope(scope: Scope | None, workspace: Workspace) -> Scope | None:
    """
    Scope to read settings from for a task.

    A single-folder project gets the folder even when the task is global:
    reading "unscoped" there would only see the group file and skip the
    folder's own overrides.
    """
    if scope is not None and scope.is_folder:
        return scope

    if len(workspace.folders) == 1:
        return workspace.folders[0].scope

    active = workspace.folder_containing(workspace.active_resource)
    if active is not None:
        return active.scope
    return None


async def resolve_ambiguous_scope(
    probe_key: str,
    workspace: Workspace,
    store: ConfigurationStore,
    picker: FolderPicker,
) -> Scope | None:
    """
    Pick a settings scope for a manual command (no task context).

    Returns None when nothing is open or when the user dismisses the folder
    prompt; callers must abort in that case.
    """
    if not workspace.folders:
        return None

    if len(workspace.folders) == 1:
        return workspace.folders[0].scope

    overridden = [
        f for f in workspace.folders
        if store.inspect(probe_key, f.scope).folder_value is not None
    ]
    if not overridden:
        return WORKSPACE_SCOPE

    logger.debug("'%s' is overridden in %d folder(s); asking user", probe_key, len(overridden))
    chosen = await picker.pick(list(workspace.folders))
    if chosen is None:
        logger.info("Folder selection dismissed; nothing to do.")
        return None
    return chosen.scope
