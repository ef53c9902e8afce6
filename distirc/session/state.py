"""Connection states of the session worker."""

from __future__ import annotations

from enum import Enum, auto


class SessionState(Enum):
    DISCONNECTED = auto()
    CONNECTING = auto()
    AUTHENTICATING = auto()
    READY = auto()
    BACKOFF = auto()
    SHUTDOWN = auto()
