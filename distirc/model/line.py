"""Immutable conversation values: buffer identities and timestamped lines."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _Value(BaseModel):
    # Frozen for hashability; extra fields ignored so a newer core can add them.
    model_config = ConfigDict(frozen=True, extra="ignore")


class BufferKind(str, Enum):
    STATUS = "status"
    SERVER = "server"
    CHANNEL = "channel"
    QUERY = "query"


class BufKey(_Value):
    """Identifies which conversation target a buffer belongs to.

    ``name`` is the channel name for channels and the peer nick for queries;
    status and server buffers carry no name.
    """

    kind: BufferKind
    name: str | None = None

    @model_validator(mode="after")
    def _check_name(self) -> BufKey:
        if self.kind in (BufferKind.CHANNEL, BufferKind.QUERY):
            if not self.name:
                raise ValueError(f"{self.kind.value} buffers need a name")
        elif self.name is not None:
            raise ValueError(f"{self.kind.value} buffers have no name")
        return self

    @classmethod
    def status(cls) -> BufKey:
        return cls(kind=BufferKind.STATUS)

    @classmethod
    def server(cls) -> BufKey:
        return cls(kind=BufferKind.SERVER)

    @classmethod
    def channel(cls, name: str) -> BufKey:
        return cls(kind=BufferKind.CHANNEL, name=name)

    @classmethod
    def query(cls, peer: str) -> BufKey:
        return cls(kind=BufferKind.QUERY, name=peer)

    def display_name(self) -> str:
        return self.name if self.name else self.kind.value

    def __str__(self) -> str:
        return self.display_name()


class LineKind(str, Enum):
    STATUS = "status"
    CHAT = "chat"
    ACTION = "action"
    NOTICE = "notice"
    ERROR = "error"


class MessageData(_Value):
    type: Literal["message"] = "message"
    sender: str
    text: str
    kind: LineKind = LineKind.CHAT


class JoinData(_Value):
    type: Literal["join"] = "join"
    nick: str


class PartData(_Value):
    type: Literal["part"] = "part"
    nick: str
    reason: str | None = None


class NoticeData(_Value):
    type: Literal["notice"] = "notice"
    text: str
    kind: LineKind = LineKind.NOTICE


class TopicData(_Value):
    type: Literal["topic"] = "topic"
    text: str
    setter: str | None = None


LineData = Annotated[
    MessageData | JoinData | PartData | NoticeData | TopicData,
    Field(discriminator="type"),
]


def _now() -> datetime:
    return datetime.now(UTC)


class Line(_Value):
    """One timestamped conversation event."""

    time: datetime = Field(default_factory=_now)
    data: LineData

    @classmethod
    def message(
        cls, sender: str, text: str, kind: LineKind = LineKind.CHAT
    ) -> Line:
        return cls(data=MessageData(sender=sender, text=text, kind=kind))

    @classmethod
    def status(cls, text: str, kind: LineKind = LineKind.STATUS) -> Line:
        return cls.message("status", text, kind)

    @property
    def text(self) -> str:
        """Plain text of the line, as a renderer without styling would show it."""
        data = self.data
        if isinstance(data, MessageData):
            return data.text
        if isinstance(data, JoinData):
            return f"{data.nick} has joined"
        if isinstance(data, PartData):
            suffix = f" ({data.reason})" if data.reason else ""
            return f"{data.nick} has left{suffix}"
        if isinstance(data, TopicData):
            by = f" (set by {data.setter})" if data.setter else ""
            return f"Topic: {data.text}{by}"
        return data.text
