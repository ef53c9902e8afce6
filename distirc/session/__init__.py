"""Session subsystem.

Connection state machine, reconnect backoff, keepalive, frame dispatch and
the outbound command queue, all driven by :class:`SessionWorker`.
"""

from .backoff import ReconnectBackoff  # noqa: F401
from .commands import CommandQueue  # noqa: F401
from .dispatcher import FrameDispatcher  # noqa: F401
from .keepalive import Keepalive  # noqa: F401
from .state import SessionState  # noqa: F401
from .worker import SessionWorker  # noqa: F401

__all__ = [
    "CommandQueue",
    "FrameDispatcher",
    "Keepalive",
    "ReconnectBackoff",
    "SessionState",
    "SessionWorker",
]
