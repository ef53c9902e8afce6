"""Per-target line storage with thread-safe write handles.

A :class:`Buffer` is never touched directly outside this module. Writers go
through a :class:`BufferSender`, readers through a :class:`BufferView`; both
share the buffer's lock, which is held for exactly one mutation or one
snapshot copy.
"""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Iterator
from contextlib import contextmanager

from ..errors import BufferPoisonedError
from .line import BufKey, Line


class Buffer:
    """Ordered lines for one conversation target plus display metadata."""

    __slots__ = ("key", "name", "_lines", "_scroll", "_lock", "_poisoned", "_version")

    def __init__(self, key: BufKey, name: str | None = None) -> None:
        self.key = key
        self.name = name or key.display_name()
        self._lines: deque[Line] = deque()
        # None means pinned to the newest line
        self._scroll: int | None = None
        self._lock = threading.Lock()
        self._poisoned: BaseException | None = None
        self._version = 0

    @contextmanager
    def _mutation(self) -> Iterator[None]:
        with self._lock:
            if self._poisoned is not None:
                raise BufferPoisonedError(
                    f"Buffer {self.name} is poisoned by an earlier failed write",
                    data={"buffer": self.name, "cause": repr(self._poisoned)},
                )
            try:
                yield
            except BaseException as e:
                self._poisoned = e
                raise
            self._version += 1


class BufferSender:
    """Cloneable write handle bound to exactly one :class:`Buffer`.

    All clones share the buffer's lock, so writes from the session worker,
    the log sink and the UI are linearized per buffer.
    """

    __slots__ = ("_buf",)

    def __init__(self, buf: Buffer) -> None:
        self._buf = buf

    @property
    def key(self) -> BufKey:
        return self._buf.key

    def clone(self) -> BufferSender:
        return BufferSender(self._buf)

    __copy__ = clone

    def send_back(self, line: Line) -> None:
        """Append ``line`` after every line already in the buffer."""
        with self._buf._mutation():  # noqa: SLF001
            self._buf._lines.append(line)  # noqa: SLF001

    def send_front(self, line: Line) -> None:
        """Insert ``line`` at index 0.

        Status and log lines take this path so they show up immediately,
        ahead of anything queued behind them.
        """
        with self._buf._mutation():  # noqa: SLF001
            self._buf._lines.appendleft(line)  # noqa: SLF001

    def set_scroll(self, offset: int | None) -> None:
        if offset is not None and offset < 0:
            raise ValueError("scroll offset must be >= 0")
        with self._buf._mutation():  # noqa: SLF001
            self._buf._scroll = offset  # noqa: SLF001

    def same_buffer(self, other: BufferSender) -> bool:
        return self._buf is other._buf  # noqa: SLF001


class BufferView:
    """Read-only access to a buffer; every read is a point-in-time copy."""

    __slots__ = ("_buf",)

    def __init__(self, buf: Buffer) -> None:
        self._buf = buf

    @property
    def key(self) -> BufKey:
        return self._buf.key

    def name(self) -> str:
        return self._buf.name

    def snapshot(self) -> tuple[Line, ...]:
        with self._buf._lock:  # noqa: SLF001
            return tuple(self._buf._lines)  # noqa: SLF001

    def texts(self) -> list[str]:
        return [line.text for line in self.snapshot()]

    def scroll(self) -> int | None:
        with self._buf._lock:  # noqa: SLF001
            return self._buf._scroll  # noqa: SLF001

    def version(self) -> int:
        """Counter bumped by every successful mutation; lets a UI skip redraws."""
        with self._buf._lock:  # noqa: SLF001
            return self._buf._version  # noqa: SLF001

    def __len__(self) -> int:
        with self._buf._lock:  # noqa: SLF001
            return len(self._buf._lines)  # noqa: SLF001


def new_buffer(key: BufKey, name: str | None = None) -> tuple[BufferView, BufferSender]:
    """Create a standalone buffer and return its read and write handles."""
    buf = Buffer(key, name)
    return BufferView(buf), BufferSender(buf)
