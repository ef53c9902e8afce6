from __future__ import annotations

import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from ..constants import DEFAULT_CORE_HOST, DEFAULT_CORE_PORT


class CoreConfig(BaseModel):
    """Where the core lives and how to log in to it.

    Values are supplied by the caller (config file reader, environment,
    tests); this package never reads a config file itself. The password is
    a ``SecretStr`` so it never shows up in reprs or log lines.

    Attributes:
        host: Core hostname or address.
        port: Core TCP port.
        user: Account name on the core.
        password: Account password.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    host: str = Field(default=DEFAULT_CORE_HOST, min_length=1)
    port: int = Field(default=DEFAULT_CORE_PORT, ge=1, le=65535)
    user: str = Field(min_length=1)
    password: SecretStr = Field(alias="pass")

    @field_validator("host", "user", mode="before")
    @classmethod
    def _strip(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> CoreConfig:
        """Create a CoreConfig from a ``{host, port, user, pass}`` mapping.

        Args:
            data: Mapping such as the ``[core]`` table of a config file.

        Returns:
            CoreConfig instance.
        """
        return cls.model_validate(dict(data))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> CoreConfig:
        """Create a CoreConfig from ``DISTIRC_HOST/PORT/USER/PASS``."""
        env = os.environ if environ is None else environ
        data: dict[str, Any] = {
            "user": env.get("DISTIRC_USER", ""),
            "pass": env.get("DISTIRC_PASS", ""),
        }
        if env.get("DISTIRC_HOST"):
            data["host"] = env["DISTIRC_HOST"]
        if env.get("DISTIRC_PORT"):
            data["port"] = env["DISTIRC_PORT"]
        return cls.model_validate(data)

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"
