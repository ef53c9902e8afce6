"""Project logger with the structured ``log_event`` API."""

from __future__ import annotations

import logging
import os

LOGGER_NAME = "distirc"

_EVENT_COLUMN = 28


def _debug_enabled() -> bool:
    return os.environ.get("DEBUG", "false").lower() in ("true", "1", "yes")


class ClientLogger:
    """Structured event logger for the client.

    Wraps the ``distirc`` stdlib logger. No console handler is attached here:
    the terminal belongs to the UI, so records reach the user through the
    status buffer sink (or colorlog in headless runs). ``DISTIRC_LOG_FILE``
    adds a plain file handler.
    """

    def __init__(self, name: str = LOGGER_NAME, log_file: str | None = None) -> None:
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG if _debug_enabled() else logging.INFO)
        self.log_file = log_file or os.environ.get("DISTIRC_LOG_FILE") or None
        if self.log_file:
            handler = logging.FileHandler(self.log_file)
            handler.setFormatter(
                logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
            )
            self.logger.addHandler(handler)

    def set_level(self, level: int) -> None:
        self.logger.setLevel(level)

    @staticmethod
    def render(domain: str, action: str, **kwargs: object) -> str | None:
        """Human text for an event from the template catalog, if one exists."""
        # Imported here: the catalog is reloadable and rebinds its dict.
        from . import event_catalog

        template = event_catalog.EVENT_TEMPLATES.get((domain, action))
        if not template:
            return None
        try:
            return template.format(**kwargs)
        except (KeyError, IndexError, ValueError):
            return template

    def log_event(
        self,
        domain: str,
        action: str,
        level: int = logging.INFO,
        human: str | None = None,
        *,
        exc_info: bool = False,
        notified: bool = False,
        **kwargs: object,
    ) -> None:
        """Log a ``domain``/``action`` event.

        The text comes from the template catalog unless ``human`` is given,
        falling back to ``"domain: action"``. ``notified`` marks events the
        caller already posted to the status buffer; the status sink skips
        them. A ``target`` keyword becomes the ``[target]`` prefix, ``[core]``
        otherwise. With ``DEBUG`` set the remaining keywords are appended.
        """
        event_name = f"{domain}_{action}".lower()
        text = human if human is not None else self.render(domain, action, **kwargs)
        if text is None:
            text = f"{domain.replace('_', ' ')}: {action.replace('_', ' ')}"
            kwargs.setdefault("derived", True)

        target = kwargs.pop("target", None)
        prefix = f"[{target}]" if isinstance(target, str) and target else "[core]"
        msg = f"{prefix} {text}"
        if _debug_enabled():
            msg = self._with_context(event_name, msg, kwargs)
        self.logger.log(
            level,
            msg,
            exc_info=exc_info,
            extra={"event": event_name, "notified": notified},
            stacklevel=2,
        )

    @staticmethod
    def _with_context(event_name: str, msg: str, context: dict[str, object]) -> str:
        if len(event_name) > _EVENT_COLUMN:
            event_name = event_name[: _EVENT_COLUMN - 1] + "…"
        line = f"{event_name.ljust(_EVENT_COLUMN)} {msg}"
        if context:
            line += " (" + ", ".join(f"{k}={v}" for k, v in context.items()) + ")"
        return line


logger = ClientLogger()
