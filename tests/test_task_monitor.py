# tests/test_task_monitor.py

from __future__ import annotations

import asyncio

import pytest

from inner_loop_buddy.core.configuration import ConfigurationAggregator
from inner_loop_buddy.core.scope import GLOBAL_SCOPE, WORKSPACE_SCOPE, Scope
from inner_loop_buddy.settings.store import MONITORED_TASKS, TASK_MONITORING_MODE
from inner_loop_buddy.tasks.task_models import MatchedExecutionEvent, MonitoringConfig, MonitoringMode
from inner_loop_buddy.tasks.task_monitor import EventChannel, MonitorState, TaskMonitor

from .fakes import FakeTaskHost, make_task, write_json

FOLDER_A = Scope.folder("file:///work/A")
FOLDER_B = Scope.folder("file:///work/B")

SERVE = {"definition": {"type": "npm", "script": "serve"}}


def resolver_for(criteria, mode=MonitoringMode.MATCHING, per_scope=None):
    """Same criteria everywhere, unless per_scope overrides a scope."""
    per_scope = per_scope or {}

    def _resolve(scope):
        if scope in per_scope:
            return per_scope[scope]
        return MonitoringConfig(criteria=list(criteria), mode=mode)

    return _resolve


def drain(monitor: TaskMonitor) -> list[MatchedExecutionEvent]:
    """Pull queued events without waiting (monitor publishes synchronously)."""
    out = []
    queue = monitor._channel._queue
    while not queue.empty():
        item = queue.get_nowait()
        if isinstance(item, MatchedExecutionEvent):
            out.append(item)
    return out


def test_matching_start_raises_event(host: FakeTaskHost) -> None:
    monitor = TaskMonitor(host, resolver_for([SERVE]))
    assert monitor.state == MonitorState.ACTIVE

    host.start(make_task(FOLDER_A))
    assert drain(monitor) == [MatchedExecutionEvent(occurrences=1, scope=FOLDER_A)]
    assert monitor.occurrences(FOLDER_A) == 1


def test_non_matching_start_is_ignored(host: FakeTaskHost) -> None:
    monitor = TaskMonitor(host, resolver_for([SERVE]))
    host.start(make_task(FOLDER_A, name="echo", definition={"type": "shell"}, command="echo hi"))
    assert drain(monitor) == []
    assert monitor.occurrences(FOLDER_A) == 0


def test_counts_increase_per_scope(host: FakeTaskHost) -> None:
    monitor = TaskMonitor(host, resolver_for([SERVE]))
    host.start(make_task(FOLDER_A))
    host.start(make_task(FOLDER_B))
    host.start(make_task(FOLDER_A))

    events = drain(monitor)
    assert [(e.scope, e.occurrences) for e in events] == [(FOLDER_A, 1), (FOLDER_B, 1), (FOLDER_A, 2)]


def test_global_and_workspace_tasks_share_a_counter(host: FakeTaskHost) -> None:
    monitor = TaskMonitor(host, resolver_for([SERVE]))
    host.start(make_task(GLOBAL_SCOPE))
    host.start(make_task(WORKSPACE_SCOPE))
    assert [e.occurrences for e in drain(monitor)] == [1, 2]
    assert monitor.occurrences(GLOBAL_SCOPE) == 2


def test_already_running_task_seeds_count_without_event() -> None:
    host = FakeTaskHost(running=[make_task(FOLDER_A)])
    monitor = TaskMonitor(host, resolver_for([SERVE]))

    assert monitor.occurrences(FOLDER_A) == 1
    assert monitor.occurrences(FOLDER_B) == 0
    assert drain(monitor) == []
    assert monitor.is_matching_task_running() is not None

    host.start(make_task(FOLDER_A))
    assert drain(monitor) == [MatchedExecutionEvent(occurrences=2, scope=FOLDER_A)]


def test_running_non_matching_task_does_not_seed() -> None:
    host = FakeTaskHost(running=[make_task(FOLDER_A, definition={"type": "shell"})])
    monitor = TaskMonitor(host, resolver_for([SERVE]))
    assert monitor.occurrences(FOLDER_A) == 0
    assert monitor.is_matching_task_running() is None


def test_mode_all_matches_everything(host: FakeTaskHost) -> None:
    monitor = TaskMonitor(host, resolver_for([], mode=MonitoringMode.ALL))
    host.start(make_task(FOLDER_A, definition={"type": "shell"}))
    host.start(make_task(FOLDER_A, definition={"anything": True}))
    assert [e.occurrences for e in drain(monitor)] == [1, 2]


def test_mode_is_resolved_per_scope(host: FakeTaskHost) -> None:
    per_scope = {FOLDER_B: MonitoringConfig(criteria=[], mode=MonitoringMode.ALL)}
    monitor = TaskMonitor(host, resolver_for([SERVE], per_scope=per_scope))

    shell = {"type": "shell"}
    host.start(make_task(FOLDER_A, definition=shell))
    host.start(make_task(FOLDER_B, definition=shell))
    assert [e.scope for e in drain(monitor)] == [FOLDER_B]


def test_dispose_stops_events_and_clears_counts(host: FakeTaskHost) -> None:
    monitor = TaskMonitor(host, resolver_for([SERVE]))
    host.start(make_task(FOLDER_A))
    monitor.dispose()

    assert monitor.state == MonitorState.DISPOSED
    assert host.callbacks == []
    assert monitor.occurrences(FOLDER_A) == 0

    # Even if a host keeps a stale reference, nothing fires.
    monitor._handle_task_started(make_task(FOLDER_A))
    assert monitor.occurrences(FOLDER_A) == 0
    monitor.dispose()


@pytest.mark.asyncio
async def test_events_stream_in_order_and_ends_on_dispose(host: FakeTaskHost) -> None:
    monitor = TaskMonitor(host, resolver_for([SERVE]))
    received: list[MatchedExecutionEvent] = []

    async def consume() -> None:
        async for event in monitor.events():
            received.append(event)

    consumer = asyncio.create_task(consume())
    host.start(make_task(FOLDER_A))
    host.start(make_task(FOLDER_B))
    await asyncio.sleep(0)
    host.start(make_task(FOLDER_A))
    monitor.dispose()

    await asyncio.wait_for(consumer, timeout=1.0)
    assert [(e.scope, e.occurrences) for e in received] == [(FOLDER_A, 1), (FOLDER_B, 1), (FOLDER_A, 2)]


@pytest.mark.asyncio
async def test_channel_ignores_publish_after_close() -> None:
    channel = EventChannel()
    channel.publish(MatchedExecutionEvent(occurrences=1, scope=FOLDER_A))
    channel.close()
    channel.publish(MatchedExecutionEvent(occurrences=2, scope=FOLDER_A))

    got = [e async for e in channel]
    assert [e.occurrences for e in got] == [1]
    assert channel.closed


def test_workspace_task_in_single_folder_uses_folder_criteria(single_workspace, folder_paths, make_store, host) -> None:
    write_json(folder_paths[0] / ".innerloop" / "settings.json", {MONITORED_TASKS: [SERVE]})
    aggregator = ConfigurationAggregator(make_store(single_workspace))
    monitor = TaskMonitor(host, aggregator.monitoring_resolver(single_workspace))

    host.start(make_task(WORKSPACE_SCOPE))
    host.start(make_task(GLOBAL_SCOPE))
    assert [e.occurrences for e in drain(monitor)] == [1, 2]
    assert monitor.occurrences(WORKSPACE_SCOPE) == 2


def test_workspace_task_in_single_folder_uses_folder_mode(single_workspace, folder_paths, make_store, host) -> None:
    write_json(folder_paths[0] / ".innerloop" / "settings.json", {TASK_MONITORING_MODE: "all"})
    aggregator = ConfigurationAggregator(make_store(single_workspace))
    monitor = TaskMonitor(host, aggregator.monitoring_resolver(single_workspace))

    host.start(make_task(WORKSPACE_SCOPE, name="echo", definition={"type": "shell"}, command="echo hi"))
    assert drain(monitor) == [MatchedExecutionEvent(occurrences=1, scope=WORKSPACE_SCOPE)]


def test_running_workspace_task_seeds_from_folder_criteria(single_workspace, folder_paths, make_store) -> None:
    write_json(folder_paths[0] / ".innerloop" / "settings.json", {MONITORED_TASKS: [SERVE]})
    host = FakeTaskHost(running=[make_task(WORKSPACE_SCOPE)])
    aggregator = ConfigurationAggregator(make_store(single_workspace))
    monitor = TaskMonitor(host, aggregator.monitoring_resolver(single_workspace))

    assert monitor.occurrences(WORKSPACE_SCOPE) == 1
    assert drain(monitor) == []
