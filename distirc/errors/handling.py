from __future__ import annotations

from ..logging_config import log_structured_error
from .internal import (
    AuthError,
    ChannelClosed,
    InternalError,
    LocalStateError,
    ProtocolError,
    TransportError,
)


def categorize_error(error: BaseException) -> str:
    """Return the aggregation category for an exception."""
    if isinstance(error, TransportError | OSError | ConnectionError):
        return "network"
    if isinstance(error, AuthError):
        return "auth"
    if isinstance(error, ProtocolError):
        return "protocol"
    if isinstance(error, LocalStateError):
        return "local_state"
    if isinstance(error, ChannelClosed):
        return "shutdown"
    if isinstance(error, InternalError):
        return "internal"
    return "unknown"


def log_error(message: str, error: BaseException, context: dict | None = None) -> None:
    """Logs an error message with the associated exception details.

    This function formats and logs an error message along with the string
    representation of the exception using structured logging for better
    error tracking and aggregation.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.

    Returns:
        None
    """
    merged: dict = {}
    if isinstance(error, InternalError):
        merged.update(error.data)
    if context:
        merged.update(context)
    log_structured_error(
        error_type=categorize_error(error),
        message=f"{message}: {str(error)}",
        exception=error,
        context=merged or None,
    )


def is_recoverable(error: BaseException) -> bool:
    """Check whether the session worker may handle ``error`` and keep running."""
    if isinstance(error, InternalError):
        return error.recoverable
    return isinstance(error, OSError | ConnectionError | TimeoutError)
