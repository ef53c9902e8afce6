"""Centralized internal error hierarchy.

These exceptions provide semantic categories for the session state machine.
Only raise these inside the session/buffer boundary; raw ``OSError`` /
``json`` / pydantic errors are wrapped before they reach the worker loop.

Classes:
  InternalError        – Base for all internal errors.
  TransportError       – DNS, connect, read or write failures (retry with backoff).
  AuthError            – The core rejected the supplied credentials.
  ProtocolError        – Malformed or unexpected frame (handled like TransportError).
  LocalStateError      – Client-side invariant broken; never recovered.
  BufferPoisonedError  – A buffer mutation failed mid-way; the buffer is unusable.
  ChannelClosed        – The UI side has gone away; a shutdown request, not a failure.

Each subclass sets the ``recoverable`` flag indicating whether the session
worker may handle it locally and keep running.
"""

from __future__ import annotations

from collections.abc import Mapping


class InternalError(Exception):
    """Base class for all internal client errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.
        recoverable: Whether the session worker may handle the error and continue.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    recoverable: bool = True
    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class TransportError(InternalError):
    """Exception raised for network or transport layer errors.

    Covers name resolution failures, connect timeouts, resets, unexpected
    EOF and write failures.
    """


class AuthError(InternalError):
    """Exception raised when the core rejects the client's credentials.

    Args:
        reason: Optional reason string supplied by the core.
    """

    def __init__(self, reason: str | None = None) -> None:
        self.reason = reason
        message = (
            f"Authentication rejected: {reason}" if reason else "Authentication rejected"
        )
        super().__init__(message, data={"reason": reason})


class ProtocolError(InternalError):
    """Exception raised for malformed frames or frames arriving out of order.

    A corrupted stream cannot be trusted to resynchronize, so the connection
    is dropped exactly as for a transport failure.
    """


class LocalStateError(InternalError):
    """Exception raised when client-local state can no longer be trusted."""

    recoverable = False


class BufferPoisonedError(LocalStateError):
    """Exception raised when writing to a buffer whose earlier mutation failed."""


class ChannelClosed(InternalError):
    """Raised when submitting to a command channel that has been closed."""


__all__ = [
    "InternalError",
    "TransportError",
    "AuthError",
    "ProtocolError",
    "LocalStateError",
    "BufferPoisonedError",
    "ChannelClosed",
]
