"""Dead-connection detection for the READY state."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from ..errors import TransportError
from ..logs.logger import logger
from ..protocol import Control

if TYPE_CHECKING:  # pragma: no cover
    from .worker import SessionWorker


class Keepalive:
    """Ping after one silent interval, give up after the second."""

    def __init__(self, worker: SessionWorker, interval: float):
        self.worker = worker
        self.interval = interval
        self.last_activity = 0.0
        self.ping_outstanding = False

    def on_activity(self) -> None:
        self.last_activity = time.monotonic()
        self.ping_outstanding = False

    async def on_silence(self) -> None:
        """Called when a read waited ``interval`` seconds without data.

        Raises:
            TransportError: a ping was already outstanding.
        """
        if self.ping_outstanding:
            raise TransportError(
                f"No data from core for {self.interval * 2:.0f}s",
                data={"interval": self.interval},
            )
        logger.log_event(
            "session", "keepalive_ping", level=logging.DEBUG, interval=self.interval
        )
        self.ping_outstanding = True
        await self.worker.send(Control.ping())
