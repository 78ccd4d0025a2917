# src/inner_loop_buddy/core/configuration.py

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..settings.store import MATCHED_TASK_BEHAVIOR, MONITORED_TASKS, TASK_MONITORING_MODE
from ..tasks.task_models import CriteriaRule, LaunchBehavior, MonitoringConfig, MonitoringMode
from .ports import ConfigurationStore
from .scope import Scope, Workspace, config_scope_from_task_scope

logger = logging.getLogger(__name__)


def _as_rule_list(raw: Any, where: str) -> list[CriteriaRule]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        logger.warning("%s: expected a list of criteria, got %s; ignoring", where, type(raw).__name__)
        return []
    # Non-object rules are kept; the matcher skips them.
    return list(raw)


class ConfigurationAggregator:
    """
    Resolves monitoring settings for a task scope.

    Global-level criteria are always included: a folder may define the URL
    to open while the criteria are shared at user or workspace level.
    Duplicates are harmless since matching stops at the first hit.
    """

    def __init__(self, store: ConfigurationStore) -> None:
        self._store = store

    def criteria_for(self, scope: Scope | None) -> list[CriteriaRule]:
        criteria = _as_rule_list(self._store.get(MONITORED_TASKS, None, []), "global")

        if scope is not None and scope.is_folder:
            folder_value = self._store.inspect(MONITORED_TASKS, scope).folder_value
            criteria.extend(_as_rule_list(folder_value, str(scope)))

        return criteria

    def mode_for(self, scope: Scope | None) -> MonitoringMode:
        raw = self._store.get(TASK_MONITORING_MODE, _folder_or_none(scope), MonitoringMode.MATCHING.value)
        mode = MonitoringMode.parse(raw)
        if str(raw).strip().lower() != mode.value:
            logger.warning("Unknown %s=%r; using %s", TASK_MONITORING_MODE, raw, mode.value)
        return mode

    def behavior_for(self, scope: Scope | None) -> LaunchBehavior:
        raw = self._store.get(MATCHED_TASK_BEHAVIOR, _folder_or_none(scope), LaunchBehavior.ONE_TIME.value)
        behavior = LaunchBehavior.parse(raw)
        if str(raw).strip().lower() != behavior.value:
            logger.warning("Unknown %s=%r; using %s", MATCHED_TASK_BEHAVIOR, raw, behavior.value)
        return behavior

    def monitoring_config_for(self, scope: Scope | None) -> MonitoringConfig:
        return MonitoringConfig(criteria=self.criteria_for(scope), mode=self.mode_for(scope))

    def monitoring_resolver(self, workspace: Workspace) -> Callable[[Scope], MonitoringConfig]:
        """Resolver for TaskMonitor: task scope -> settings scope -> config."""

        def _resolve(task_scope: Scope) -> MonitoringConfig:
            return self.monitoring_config_for(config_scope_from_task_scope(task_scope, workspace))

        return _resolve


def _folder_or_none(scope: Scope | None) -> Scope | None:
    return scope if scope is not None and scope.is_folder else None
