"""Error hierarchy and logging helpers for the session core."""

from .handling import categorize_error, is_recoverable, log_error  # noqa: F401
from .internal import (  # noqa: F401
    AuthError,
    BufferPoisonedError,
    ChannelClosed,
    InternalError,
    LocalStateError,
    ProtocolError,
    TransportError,
)

__all__ = [
    "AuthError",
    "BufferPoisonedError",
    "ChannelClosed",
    "InternalError",
    "LocalStateError",
    "ProtocolError",
    "TransportError",
    "categorize_error",
    "is_recoverable",
    "log_error",
]
