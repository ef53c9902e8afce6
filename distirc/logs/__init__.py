"""Project logging package.

Contains internal logging utilities (event catalog, ClientLogger and the
status buffer sink). Avoid importing stdlib logging through this package
name externally.
"""

from .event_catalog import EVENT_TEMPLATES, reload_event_templates  # noqa: F401
from .logger import LOGGER_NAME, ClientLogger, logger  # noqa: F401
from .status_sink import (  # noqa: F401
    StatusBufferHandler,
    install_status_sink,
    status_sink,
)

__all__ = [
    "ClientLogger",
    "EVENT_TEMPLATES",
    "LOGGER_NAME",
    "StatusBufferHandler",
    "install_status_sink",
    "logger",
    "reload_event_templates",
    "status_sink",
]
