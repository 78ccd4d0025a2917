# src/inner_loop_buddy/launch/controller.py

from __future__ import annotations

"""
Launch controller.

Turns MatchedExecutionEvents into browser launches:
- applies the per-scope behaviour (none / onetime / everytime),
- waits the optional pre-launch delay,
- checks the target host is reachable (unless disabled),
- shows the URL.

Manual launches skip behaviour, delay and probe; only the URL is validated.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from urllib.parse import urlsplit

from ..core.configuration import ConfigurationAggregator
from ..core.ports import BrowserSurface, ConfigurationStore, FolderPicker, Notifier, NotifyAction
from ..core.scope import Scope, Workspace, config_scope_from_task_scope, resolve_ambiguous_scope
from ..settings.store import (
    AUTO_OPEN_DELAY,
    AVAILABILITY_CHECK,
    AVAILABILITY_CHECK_TIMEOUT,
    DEFAULT_URL,
    EDITOR_COLUMN,
)
from ..tasks.task_models import LaunchBehavior, MatchedExecutionEvent
from .browser import ShowOptions, ViewColumn
from .probe import wait_for_host_available

logger = logging.getLogger(__name__)

HostProbe = Callable[[str, int, float], Awaitable[bool]]

DEFAULT_PORTS = {"http": 80, "https": 443}


class InvalidTargetUrl(ValueError):
    """The configured URL is missing, relative, or not http(s)."""


@dataclass(slots=True, frozen=True)
class TargetUrl:
    url: str
    host: str
    port: int


def parse_target_url(raw: object) -> TargetUrl:
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidTargetUrl("No default URL is configured")

    url = raw.strip()
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    if scheme not in DEFAULT_PORTS:
        raise InvalidTargetUrl(f"Default URL must be an absolute http(s) URL: {url}")
    if not parts.hostname:
        raise InvalidTargetUrl(f"Default URL has no host: {url}")
    try:
        port = parts.port
    except ValueError as e:
        raise InvalidTargetUrl(f"Default URL has an invalid port: {url}") from e

    return TargetUrl(url=url, host=parts.hostname, port=port or DEFAULT_PORTS[scheme])


def should_launch(behavior: LaunchBehavior, occurrences: int) -> bool:
    if behavior == LaunchBehavior.NONE:
        return False
    if behavior == LaunchBehavior.ONE_TIME:
        return occurrences < 2
    return True


def _as_millis(raw: object, default: float) -> float:
    try:
        value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return max(0.0, value)


class LaunchController:
    def __init__(
        self,
        *,
        workspace: Workspace,
        store: ConfigurationStore,
        browser: BrowserSurface,
        notifier: Notifier,
        picker: FolderPicker,
        probe: HostProbe = wait_for_host_available,
    ) -> None:
        self.workspace = workspace
        self.store = store
        self.browser = browser
        self.notifier = notifier
        self.picker = picker
        self._probe = probe
        self._aggregator = ConfigurationAggregator(store)
        self._inflight: set[asyncio.Task[bool]] = set()

    # ---------- event handling ----------

    async def run(self, events: AsyncIterator[MatchedExecutionEvent]) -> None:
        """
        Consume events until the stream ends.

        Each event is handled in its own task so a slow delay/probe does not
        hold up later events.
        """
        async for event in events:
            task = asyncio.create_task(self.handle_matched_execution(event))
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)
        logger.debug("Event stream closed (%d launch(es) still in flight)", len(self._inflight))

    async def wait_idle(self) -> None:
        """Wait for launches already started by run()."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    async def handle_matched_execution(self, event: MatchedExecutionEvent) -> bool:
        try:
            config_scope = config_scope_from_task_scope(event.scope, self.workspace)
            behavior = self._aggregator.behavior_for(config_scope)

            if not should_launch(behavior, event.occurrences):
                logger.debug(
                    "Not launching for %s: behavior=%s occurrences=%d",
                    event.scope,
                    behavior.value,
                    event.occurrences,
                )
                return False

            return await self.open_default_url(config_scope, manual=False)
        except Exception:
            logger.exception("Launch for %s failed", event.scope)
            return False

    # ---------- manual ----------

    async def open_default_url_manually(self) -> bool:
        scope = await resolve_ambiguous_scope(DEFAULT_URL, self.workspace, self.store, self.picker)
        if scope is None:
            return False
        return await self.open_default_url(scope, manual=True)

    # ---------- launch ----------

    def _settings_action(self, scope: Scope | None) -> NotifyAction | None:
        path = self.store.settings_path_for(scope)
        if path is None:
            return None
        return NotifyAction(label="Open Settings", target=str(path))

    async def open_default_url(self, scope: Scope | None, *, manual: bool) -> bool:
        try:
            target = parse_target_url(self.store.get(DEFAULT_URL, scope))
        except InvalidTargetUrl as e:
            logger.warning("%s (scope=%s)", e, scope)
            self.notifier.notify(f"{e}. Set '{DEFAULT_URL}' in settings.", self._settings_action(scope))
            return False

        if not manual:
            delay_ms = _as_millis(self.store.get(AUTO_OPEN_DELAY, scope, 0), 0.0)
            if delay_ms:
                logger.debug("Waiting %sms before opening %s", delay_ms, target.url)
                await asyncio.sleep(delay_ms / 1000.0)

            if self.store.get(AVAILABILITY_CHECK, scope, True):
                timeout_ms = _as_millis(self.store.get(AVAILABILITY_CHECK_TIMEOUT, scope, 1000), 1000.0)
                if not await self._probe(target.host, target.port, timeout_ms):
                    self.notifier.notify(
                        f"Unable to open {target.url}: {target.host}:{target.port} "
                        f"was not available within {timeout_ms:g}ms."
                    )
                    return False

        options = ShowOptions(view_column=ViewColumn.parse(self.store.get(EDITOR_COLUMN, scope)))
        self.browser.show(target.url, options)
        logger.info("Opened %s (manual=%s, scope=%s)", target.url, manual, scope)
        return True
