"""Tests for the headless console logging setup."""

import logging
from unittest.mock import patch

import colorlog
import pytest

from distirc.logging_config import LoggerConfigurator, log_structured_error


@pytest.fixture
def isolated_root(monkeypatch):
    root = logging.getLogger()
    level = root.level
    monkeypatch.setattr(root, "handlers", [])
    yield root
    root.setLevel(level)


@pytest.mark.parametrize("debug,expected", [("1", logging.DEBUG), ("", logging.INFO)])
def test_configure_sets_level_and_colored_formatter(
    isolated_root, monkeypatch, debug, expected
):
    monkeypatch.setenv("DEBUG", debug)
    with patch("distirc.logging_config.atexit.register") as register, patch(
        "distirc.logging_config.logging.basicConfig"
    ) as basic_config:
        handler = LoggerConfigurator().configure()

    assert isinstance(handler.formatter, colorlog.ColoredFormatter)
    assert basic_config.call_args.kwargs["level"] == expected
    assert isolated_root.level == expected
    assert logging.getLogger("asyncio").level == logging.WARNING
    register.assert_called_once()


def test_structured_error_message(caplog):
    with caplog.at_level(logging.WARNING, logger="distirc.errors"):
        log_structured_error(
            "protocol",
            "bad frame",
            exception=ValueError("x"),
            context={"size": 3},
            level=logging.WARNING,
        )
    assert caplog.records[-1].getMessage() == (
        "[PROTOCOL] bad frame | Exception: ValueError: x | Context: size=3"
    )
