"""UI-facing helpers that need no terminal library."""

from .bar import BARS, MainBar, StatusBar  # noqa: F401

__all__ = ["BARS", "MainBar", "StatusBar"]
