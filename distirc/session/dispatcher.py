"""Applies frames received in the READY state to local state."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..errors import ProtocolError
from ..logs.logger import logger
from ..model import BufferSender, BufKey
from ..protocol import Control, LineDelta, Message

if TYPE_CHECKING:  # pragma: no cover
    from .worker import SessionWorker


class FrameDispatcher:
    def __init__(self, worker: SessionWorker):
        self.worker = worker
        self._senders: dict[BufKey, BufferSender] = {}

    async def dispatch(self, message: Message) -> None:
        if isinstance(message, LineDelta):
            self._route_line(message)
        elif isinstance(message, Control):
            await self.handle_control(message)
        else:
            raise ProtocolError(
                f"Unexpected {message.type} frame while ready",
                data={"frame_type": message.type},
            )

    def _route_line(self, delta: LineDelta) -> None:
        sender = self._senders.get(delta.target)
        if sender is None:
            _, sender = self.worker.registry.create_or_get(delta.target)
            self._senders[delta.target] = sender
        sender.send_back(delta.line)

    async def handle_control(self, control: Control) -> None:
        """Answer keepalives and merge session metadata."""
        if control.action == "ping":
            await self.worker.send(Control.pong())
            return
        if control.action == "pong":
            return
        logger.log_event(
            "session", "control", level=logging.DEBUG, action=control.action
        )
        self.worker.update_session_info(control.action, control.data)
