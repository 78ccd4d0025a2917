# src/inner_loop_buddy/tasks/task_monitor.py

from __future__ import annotations

"""
Task monitor.

Watches task starts reported by the host and:
- resolves criteria/mode for the task's scope,
- counts matched starts per scope,
- publishes a MatchedExecutionEvent for each one.

Events are only raised for starts seen *after* construction. A matching task
that was already running at construction seeds its scope's count to 1 without
an event, so "open once" behaviour does not fire again for it.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from enum import Enum

from ..core.criteria import matches
from ..core.ports import Subscription, TaskHost
from ..core.scope import Scope, scope_key_of
from .task_models import MatchedExecutionEvent, MonitoringConfig, MonitoringMode, TaskDescriptor

logger = logging.getLogger(__name__)

ConfigurationResolver = Callable[[Scope], MonitoringConfig]


class MonitorState(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    DISPOSED = "disposed"


class EventChannel:
    """
    Single-consumer, ordered stream of events.

    publish() never blocks; close() ends iteration once queued events drain.
    """

    _CLOSED = object()

    def __init__(self) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, event: MatchedExecutionEvent) -> None:
        if self._closed:
            return
        self._queue.put_nowait(event)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(self._CLOSED)

    async def __aiter__(self) -> AsyncIterator[MatchedExecutionEvent]:
        while True:
            item = await self._queue.get()
            if item is self._CLOSED:
                return
            yield item


class TaskMonitor:
    def __init__(self, host: TaskHost, resolver: ConfigurationResolver) -> None:
        self._host = host
        self._resolver = resolver
        self._occurrences: dict[str, int] = {}
        self._channel = EventChannel()
        self._subscription: Subscription | None = None
        self.state = MonitorState.IDLE

        self._subscription = host.on_did_start_task(self._handle_task_started)
        self.state = MonitorState.ACTIVE

        for task in self._running_matching_tasks():
            # Already running: it has executed once before we were watching.
            key = scope_key_of(task.scope)
            self._occurrences.setdefault(key, 1)
            logger.info("Matching task '%s' already running in %s", task.name, task.scope)

    # ---------- queries ----------

    def _running_matching_tasks(self) -> list[TaskDescriptor]:
        out = []
        for task in self._host.task_executions():
            if matches(task, self._resolver(task.scope).criteria):
                out.append(task)
        return out

    def is_matching_task_running(self) -> TaskDescriptor | None:
        """First currently running task that matches its scope's criteria."""
        running = self._running_matching_tasks()
        return running[0] if running else None

    def occurrences(self, scope: Scope) -> int:
        return self._occurrences.get(scope_key_of(scope), 0)

    def events(self) -> AsyncIterator[MatchedExecutionEvent]:
        return self._channel.__aiter__()

    # ---------- notifications ----------

    def _handle_task_started(self, task: TaskDescriptor) -> None:
        if self.state != MonitorState.ACTIVE:
            return

        config = self._resolver(task.scope)
        if config.mode == MonitoringMode.MATCHING and not matches(task, config.criteria):
            logger.debug("Task '%s' does not match criteria; ignoring", task.name)
            return

        key = scope_key_of(task.scope)
        count = self._occurrences.get(key, 0) + 1
        self._occurrences[key] = count

        logger.info("Matched task '%s' in %s (occurrences=%d)", task.name, task.scope, count)
        self._channel.publish(MatchedExecutionEvent(occurrences=count, scope=task.scope))

    # ---------- lifecycle ----------

    def dispose(self) -> None:
        if self.state == MonitorState.DISPOSED:
            return
        if self._subscription is not None:
            self._subscription.dispose()
            self._subscription = None
        self._occurrences.clear()
        self._channel.close()
        self.state = MonitorState.DISPOSED
        logger.debug("Task monitor disposed")
