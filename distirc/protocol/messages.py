"""Session messages exchanged with the core.

Every frame is a JSON object with a ``type`` discriminator. Fields the
client does not know are ignored so an older client keeps working against a
newer core.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_serializer

from ..model.line import BufKey, Line


class _Frame(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class Auth(_Frame):
    """client → core: credentials for this connection."""

    type: Literal["auth"] = "auth"
    user: str
    password: SecretStr = Field(alias="pass")

    @field_serializer("password", when_used="json")
    def _reveal_password(self, value: SecretStr) -> str:
        return value.get_secret_value()


class AuthResult(_Frame):
    """core → client: answer to :class:`Auth`."""

    type: Literal["auth_result"] = "auth_result"
    ok: bool
    reason: str | None = None


class Subscribe(_Frame):
    """client → core: request line deltas (and backlog) for ``targets``.

    ``None`` asks for every buffer the core holds for this user.
    """

    type: Literal["subscribe"] = "subscribe"
    targets: list[BufKey] | None = None


class LineDelta(_Frame):
    """core → client: one new line for one buffer."""

    type: Literal["line_delta"] = "line_delta"
    target: BufKey
    line: Line


class Command(_Frame):
    """client → core: user input aimed at a buffer (message or /command)."""

    type: Literal["command"] = "command"
    target: BufKey
    text: str


class Control(_Frame):
    """Keepalive and session metadata, in either direction."""

    type: Literal["control"] = "control"
    action: str
    data: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def ping(cls) -> Control:
        return cls(action="ping")

    @classmethod
    def pong(cls) -> Control:
        return cls(action="pong")


Message = Annotated[
    Auth | AuthResult | Subscribe | LineDelta | Command | Control,
    Field(discriminator="type"),
]

FRAME_TYPES: frozenset[str] = frozenset(
    {"auth", "auth_result", "subscribe", "line_delta", "command", "control"}
)
