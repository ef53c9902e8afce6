"""Bounded hand-off of outbound commands from the UI thread to the worker."""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Callable

from ..constants import COMMAND_QUEUE_SIZE
from ..errors import ChannelClosed
from ..protocol import Command


class CommandQueue:
    """Thread-safe FIFO with a hard size bound.

    ``submit`` never blocks: when the queue is full the command is dropped
    and ``on_drop`` is called with it. The worker registers a waker that is
    called (outside the lock) after every submit and on close.
    """

    def __init__(
        self,
        maxsize: int = COMMAND_QUEUE_SIZE,
        on_drop: Callable[[Command], None] | None = None,
    ) -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be >= 1")
        self.maxsize = maxsize
        self.on_drop = on_drop
        self._items: deque[Command] = deque()
        self._lock = threading.Lock()
        self._closed = False
        self._waker: Callable[[], None] | None = None
        self.dropped = 0

    def set_waker(self, waker: Callable[[], None] | None) -> None:
        with self._lock:
            self._waker = waker

    def submit(self, command: Command) -> bool:
        """Queue ``command``; returns False when it was dropped.

        Raises:
            ChannelClosed: the queue was closed.
        """
        with self._lock:
            if self._closed:
                raise ChannelClosed("Command channel is closed")
            accepted = len(self._items) < self.maxsize
            if accepted:
                self._items.append(command)
            else:
                self.dropped += 1
            waker = self._waker
        if accepted:
            if waker:
                waker()
        elif self.on_drop:
            self.on_drop(command)
        return accepted

    def pop(self) -> Command | None:
        with self._lock:
            return self._items.popleft() if self._items else None

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            waker = self._waker
        if waker:
            waker()

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
