# src/inner_loop_buddy/launch/browser.py

from __future__ import annotations

import logging
import webbrowser
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)


class ViewColumn(StrEnum):
    ACTIVE = "active"
    BESIDE = "beside"
    ONE = "one"
    TWO = "two"
    THREE = "three"
    FOUR = "four"
    FIVE = "five"
    SIX = "six"
    SEVEN = "seven"
    EIGHT = "eight"
    NINE = "nine"

    @classmethod
    def parse(cls, raw: Any) -> ViewColumn:
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            logger.warning("Unknown editor column %r; using beside", raw)
            return cls.BESIDE


@dataclass(slots=True, frozen=True)
class ShowOptions:
    view_column: ViewColumn = ViewColumn.BESIDE
    preserve_focus: bool = True


class SystemBrowserSurface:
    """
    Shows URLs in the system browser.

    Only one surface is kept: the first show() opens a new window, later calls
    navigate the existing one (where the platform browser supports it).
    """

    def __init__(self, controller: webbrowser.BaseBrowser | None = None) -> None:
        self._controller = controller
        self._opened = False
        self.current_url: str | None = None

    def _browser(self) -> webbrowser.BaseBrowser:
        if self._controller is None:
            self._controller = webbrowser.get()
        return self._controller

    def show(self, url: str, options: ShowOptions | None = None) -> None:
        options = options or ShowOptions()
        new = 0 if self._opened else 1
        logger.info("Showing %s (column=%s)", url, options.view_column.value)

        if not self._browser().open(url, new=new, autoraise=not options.preserve_focus):
            logger.warning("Browser refused to open %s", url)
            return

        self._opened = True
        self.current_url = url
