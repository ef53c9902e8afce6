"""Every literal log_event call has a template unless it passes its own text."""

import ast
from pathlib import Path

from distirc.logs import EVENT_TEMPLATES, reload_event_templates

PACKAGE_ROOT = Path(__file__).resolve().parent.parent / "distirc"


def _literal(node):
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        return node.value
    return None


def _log_event_refs():
    refs = set()
    for path in PACKAGE_ROOT.rglob("*.py"):
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        for node in ast.walk(tree):
            if not (
                isinstance(node, ast.Call)
                and isinstance(node.func, ast.Attribute)
                and node.func.attr == "log_event"
                and len(node.args) >= 2
            ):
                continue
            if any(kw.arg == "human" for kw in node.keywords):
                continue
            domain, action = _literal(node.args[0]), _literal(node.args[1])
            if domain and action:
                refs.add((domain, action))
    return refs


def test_audit_finds_calls():
    refs = _log_event_refs()
    assert ("session", "worker_start") in refs
    assert ("app", "start") in refs


def test_all_literal_events_have_templates():
    missing = _log_event_refs() - set(EVENT_TEMPLATES)
    assert not missing, f"Missing templates: {sorted(missing)}"


def test_reload_is_idempotent():
    before = dict(EVENT_TEMPLATES)
    reload_event_templates()
    from distirc.logs import event_catalog

    assert event_catalog.EVENT_TEMPLATES == before
