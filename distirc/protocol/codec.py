"""Newline-delimited JSON framing for session messages."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from typing import Any

from pydantic import TypeAdapter, ValidationError

from ..constants import MAX_FRAME_BYTES
from ..errors import ProtocolError
from ..logs.logger import logger
from .messages import FRAME_TYPES, Message

FRAME_TERMINATOR = b"\n"

_message_adapter: TypeAdapter[Message] = TypeAdapter(Message)


def encode(message: Message) -> bytes:
    """Serialize one message to a complete frame, terminator included."""
    payload = message.model_dump_json(by_alias=True, exclude_none=True)
    return payload.encode("utf-8") + FRAME_TERMINATOR


def decode_frame(raw: bytes) -> Message | None:
    """Parse one frame body (terminator already stripped).

    Returns ``None`` for frame types this client does not know.

    Raises:
        ProtocolError: the frame is not valid JSON, not an object, has no
            ``type`` or does not match the schema of its type.
    """
    try:
        obj: Any = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise ProtocolError(
            f"Undecodable frame: {e}", data={"frame": raw[:120]}
        ) from e
    if not isinstance(obj, dict):
        raise ProtocolError("Frame is not a JSON object", data={"frame": raw[:120]})
    frame_type = obj.get("type")
    if not isinstance(frame_type, str):
        raise ProtocolError("Frame has no type", data={"frame": raw[:120]})
    if frame_type not in FRAME_TYPES:
        logger.log_event(
            "session", "unknown_frame", level=logging.DEBUG, frame_type=frame_type
        )
        return None
    try:
        return _message_adapter.validate_python(obj)
    except ValidationError as e:
        raise ProtocolError(
            f"Invalid {frame_type} frame: {e.error_count()} error(s)",
            data={"frame_type": frame_type, "errors": e.errors(include_url=False)},
        ) from e


class FrameDecoder:
    """Incremental decoder fed with whatever the socket returned.

    Bytes up to the last terminator are consumed and dropped; a trailing
    partial frame stays buffered and is only scanned from where the previous
    scan stopped. An oversized frame stops the scan: the frames before it are
    still returned, and the error is kept in ``error`` and raised by the next
    :meth:`feed` until :meth:`reset`.
    """

    def __init__(self, max_frame_bytes: int = MAX_FRAME_BYTES) -> None:
        self.max_frame_bytes = max_frame_bytes
        self.error: ProtocolError | None = None
        self._buffer = bytearray()
        self._scanned = 0

    def feed(self, data: bytes) -> list[bytes]:
        """Buffer ``data`` and return the bodies of all frames it completed."""
        if self.error is not None:
            raise self.error
        self._buffer += data
        frames: list[bytes] = []
        start = 0
        while True:
            end = self._buffer.find(FRAME_TERMINATOR, max(start, self._scanned))
            if end < 0:
                break
            raw = bytes(self._buffer[start:end]).rstrip(b"\r")
            start = end + 1
            self._scanned = start
            if not self._check_length(len(raw)):
                return frames
            if raw.strip():
                frames.append(raw)
        if start:
            del self._buffer[:start]
        self._scanned = len(self._buffer)
        self._check_length(len(self._buffer))
        return frames

    def iter_messages(self, data: bytes) -> Iterator[Message]:
        """Decode frames completed by ``data`` one at a time.

        Frames before a malformed or oversized one are yielded before the
        :class:`ProtocolError` surfaces.
        """
        for raw in self.feed(data):
            message = decode_frame(raw)
            if message is not None:
                yield message
        if self.error is not None:
            raise self.error

    def _check_length(self, size: int) -> bool:
        if size > self.max_frame_bytes:
            self.error = ProtocolError(
                f"Frame exceeds {self.max_frame_bytes} bytes",
                data={"size": size},
            )
            return False
        return True

    @property
    def pending(self) -> int:
        """Number of buffered bytes belonging to an incomplete frame."""
        return len(self._buffer)

    def reset(self) -> None:
        self._buffer.clear()
        self._scanned = 0
        self.error = None
