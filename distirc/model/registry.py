"""Single source of truth for which buffers exist."""

from __future__ import annotations

import logging
import threading

from ..errors import LocalStateError
from ..logs.logger import logger
from .buffer import Buffer, BufferSender, BufferView
from .line import BufferKind, BufKey


class BufferRegistry:
    """Maps :class:`BufKey` to one buffer, created lazily on first reference.

    The registry lock covers only the dict lookup/insert, so the session
    worker and the log sink can both call in without waiting on each other
    for longer than that.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[BufKey, tuple[BufferView, BufferSender]] = {}
        self.create_or_get(BufKey.status())

    def create_or_get(self, key: BufKey) -> tuple[BufferView, BufferSender]:
        created = False
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                buf = Buffer(key)
                entry = (BufferView(buf), BufferSender(buf))
                self._entries[key] = entry
                created = True
        view, sender = entry
        if view.key != key:
            raise LocalStateError(
                "Buffer registry returned a buffer for another target",
                data={"requested": str(key), "found": str(view.key)},
            )
        if created and key.kind is not BufferKind.STATUS:
            logger.log_event(
                "session", "buffer_created", level=logging.DEBUG, name=key.display_name()
            )
        return view, sender.clone()

    def get(self, key: BufKey) -> BufferView | None:
        with self._lock:
            entry = self._entries.get(key)
        return entry[0] if entry else None

    def sender(self, key: BufKey) -> BufferSender:
        return self.create_or_get(key)[1]

    def status(self) -> tuple[BufferView, BufferSender]:
        return self.create_or_get(BufKey.status())

    def keys(self) -> list[BufKey]:
        """Known buffer keys in creation order."""
        with self._lock:
            return list(self._entries)

    def find(self, name: str) -> BufferView | None:
        """Look up a buffer by its display name (``status``, ``#chan``, a nick)."""
        with self._lock:
            views = [view for view, _ in self._entries.values()]
        for view in views:
            if view.name() == name:
                return view
        return None

    def __contains__(self, key: BufKey) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
