"""Wire protocol between the terminal client and the core."""

from .codec import FRAME_TERMINATOR, FrameDecoder, decode_frame, encode  # noqa: F401
from .messages import (  # noqa: F401
    FRAME_TYPES,
    Auth,
    AuthResult,
    Command,
    Control,
    LineDelta,
    Message,
    Subscribe,
)

__all__ = [
    "Auth",
    "AuthResult",
    "Command",
    "Control",
    "FRAME_TERMINATOR",
    "FRAME_TYPES",
    "FrameDecoder",
    "LineDelta",
    "Message",
    "Subscribe",
    "decode_frame",
    "encode",
]
