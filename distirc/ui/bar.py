"""Status bars shown above or below the buffer view.

A bar implements :class:`StatusBar`: ``update`` refreshes its state from the
buffer being viewed and ``render`` returns the text for one terminal row.
Bars are registered by name in ``BARS``; the UI picks them from there.
"""

from __future__ import annotations

from typing import Protocol

from ..model import BufferView


class StatusBar(Protocol):
    def update(self, view: BufferView) -> None:
        """Refresh the bar's state."""

    def render(self, width: int) -> str:
        """Return exactly ``width`` characters for the bar's row."""


class MainBar:
    """Buffer name and scroll position (``BOT`` when pinned to the bottom)."""

    def __init__(self) -> None:
        self.name = ""
        self.scroll = "BOT"

    def update(self, view: BufferView) -> None:
        self.name = view.name()
        offset = view.scroll()
        self.scroll = "BOT" if offset is None else str(offset)

    def render(self, width: int) -> str:
        text = f" {self.name} | {self.scroll}"
        return text[:width].ljust(width)


BARS: dict[str, type[StatusBar]] = {"main": MainBar}
