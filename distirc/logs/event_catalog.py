"""Human-readable text for ``log_event`` calls, keyed by (domain, action).

Templates live in ``event_templates.json`` next to this module as a
``{domain: {action: template}}`` object.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

EVENT_TEMPLATES: dict[tuple[str, str], str] = {}
_TEMPLATES_PATH = Path(__file__).with_name("event_templates.json")


def _flatten(raw: Any) -> dict[tuple[str, str], str]:
    if not isinstance(raw, dict):
        return {}
    return {
        (domain, action): template
        for domain, actions in raw.items()
        if isinstance(actions, dict)
        for action, template in actions.items()
        if isinstance(template, str)
    }


def _load_event_templates() -> dict[tuple[str, str], str]:
    try:
        raw = json.loads(_TEMPLATES_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {("app", "load_error"): "Event templates file missing"}
    except (OSError, ValueError) as e:
        return {("app", "load_error"): f"Failed to load event templates: {e}"[:200]}
    return _flatten(raw)


def reload_event_templates() -> None:
    global EVENT_TEMPLATES  # noqa: PLW0603
    EVENT_TEMPLATES = _load_event_templates()


reload_event_templates()

__all__ = ["EVENT_TEMPLATES", "reload_event_templates"]
