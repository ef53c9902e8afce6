"""In-memory conversation model: lines, buffers and the buffer registry."""

from .buffer import Buffer, BufferSender, BufferView, new_buffer  # noqa: F401
from .line import (  # noqa: F401
    BufferKind,
    BufKey,
    JoinData,
    Line,
    LineData,
    LineKind,
    MessageData,
    NoticeData,
    PartData,
    TopicData,
)
from .registry import BufferRegistry  # noqa: F401

__all__ = [
    "Buffer",
    "BufferKind",
    "BufferRegistry",
    "BufferSender",
    "BufferView",
    "BufKey",
    "JoinData",
    "Line",
    "LineData",
    "LineKind",
    "MessageData",
    "NoticeData",
    "PartData",
    "TopicData",
    "new_buffer",
]
