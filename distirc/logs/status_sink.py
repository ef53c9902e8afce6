"""Routes project log records into the status buffer.

There is exactly one sink per process. :func:`install_status_sink` binds it
to the status buffer's sender once; a second call is a programming error.
"""

from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from ..errors import LocalStateError
from ..model.line import Line, LineKind, MessageData
from .logger import LOGGER_NAME

if TYPE_CHECKING:  # pragma: no cover
    from ..model.buffer import BufferSender

_install_lock = threading.Lock()
_installed: StatusBufferHandler | None = None


class StatusBufferHandler(logging.Handler):
    """Turns records into status lines and inserts them with ``send_front``."""

    def __init__(self, sender: BufferSender, level: int = logging.INFO) -> None:
        super().__init__(level)
        self.sender = sender
        self.setFormatter(logging.Formatter("%(levelname)5s %(module)s %(message)s"))

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "notified", False):
            return False
        name = record.name
        if name != LOGGER_NAME and not name.startswith(LOGGER_NAME + "."):
            return False
        return super().filter(record)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
        except Exception:  # noqa: BLE001
            self.handleError(record)
            return
        line = Line(
            time=datetime.fromtimestamp(record.created, UTC),
            data=MessageData(sender="status", text=msg, kind=LineKind.STATUS),
        )
        # A poisoned status buffer must reach the caller, not handleError.
        self.sender.send_front(line)


def install_status_sink(
    sender: BufferSender, level: int = logging.INFO
) -> StatusBufferHandler:
    """Bind the project logger to the status buffer. May be called once."""
    global _installed  # noqa: PLW0603
    with _install_lock:
        if _installed is not None:
            raise LocalStateError("Status log sink is already installed")
        handler = StatusBufferHandler(sender, level)
        project_logger = logging.getLogger(LOGGER_NAME)
        project_logger.addHandler(handler)
        if project_logger.level == logging.NOTSET or project_logger.level > level:
            project_logger.setLevel(level)
        _installed = handler
    return handler


def status_sink() -> StatusBufferHandler | None:
    return _installed


def _uninstall_status_sink() -> None:
    """Detach the sink. Only meant for test isolation."""
    global _installed  # noqa: PLW0603
    with _install_lock:
        if _installed is not None:
            logging.getLogger(LOGGER_NAME).removeHandler(_installed)
        _installed = None
