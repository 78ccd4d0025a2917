# src/inner_loop_buddy/tasks/task_models.py

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from ..core.scope import Scope

CriteriaRule = dict[str, Any]


class MonitoringMode(StrEnum):
    """When tasks start, should we match criteria, or take any task."""

    MATCHING = "matching"
    ALL = "all"

    @classmethod
    def parse(cls, raw: Any, default: MonitoringMode | None = None) -> MonitoringMode:
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return default or cls.MATCHING


class LaunchBehavior(StrEnum):
    """
    What to do when a matched task start is seen.

    - none: never open the browser
    - onetime: open on the first matched start per scope
    - everytime: open on every matched start
    """

    NONE = "none"
    ONE_TIME = "onetime"
    EVERYTIME = "everytime"

    @classmethod
    def parse(cls, raw: Any, default: LaunchBehavior | None = None) -> LaunchBehavior:
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return default or cls.ONE_TIME


@dataclass(slots=True, frozen=True)
class TaskDescriptor:
    """A task as reported by the host. Never mutated after it is observed."""

    definition: Mapping[str, Any]
    name: str
    scope: Scope
    source: str = "Workspace"
    execution: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """
        Plain-data view used for criteria matching and display.

        Scope is left out: rules are resolved per scope already, and folder
        locations are not portable between machines.
        """
        return {
            "definition": _plain(self.definition),
            "name": self.name,
            "source": self.source,
            "execution": _plain(self.execution),
        }


def _plain(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


@dataclass(slots=True, frozen=True)
class MonitoringConfig:
    criteria: list[CriteriaRule]
    mode: MonitoringMode


@dataclass(slots=True, frozen=True)
class MatchedExecutionEvent:
    """
    Raised for each qualifying task start.

    occurrences counts matched starts in `scope` since the monitor was
    created, including one for a task that was already running then.
    """

    occurrences: int
    scope: Scope
