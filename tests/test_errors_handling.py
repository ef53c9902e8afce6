"""Tests for error categorization and structured error logging."""

import logging

import pytest

from distirc.errors import (
    AuthError,
    BufferPoisonedError,
    ChannelClosed,
    InternalError,
    LocalStateError,
    ProtocolError,
    TransportError,
    categorize_error,
    is_recoverable,
    log_error,
)
from distirc.logging_config import error_aggregator


@pytest.fixture(autouse=True)
def _clear_aggregator():
    error_aggregator.clear()
    yield
    error_aggregator.clear()


@pytest.mark.parametrize(
    "error,category",
    [
        (TransportError("x"), "network"),
        (ConnectionResetError(), "network"),
        (AuthError("nope"), "auth"),
        (ProtocolError("bad"), "protocol"),
        (BufferPoisonedError("p"), "local_state"),
        (ChannelClosed("closed"), "shutdown"),
        (InternalError("other"), "internal"),
        (ValueError("v"), "unknown"),
    ],
)
def test_categorize_error(error, category):
    assert categorize_error(error) == category


def test_recoverable_flags():
    assert is_recoverable(TransportError("x"))
    assert is_recoverable(ProtocolError("x"))
    assert not is_recoverable(LocalStateError("x"))
    assert not is_recoverable(BufferPoisonedError("x"))
    assert is_recoverable(TimeoutError())
    assert not is_recoverable(KeyError("k"))


def test_auth_error_message():
    assert str(AuthError("bad password")) == "Authentication rejected: bad password"
    assert AuthError().reason is None
    assert str(AuthError()) == "Authentication rejected"


def test_error_data_is_copied():
    data = {"host": "h"}
    error = TransportError("down", data=data)
    data["host"] = "changed"
    assert error.data == {"host": "h"}


def test_log_error_merges_context_and_aggregates(caplog):
    error = TransportError("refused", data={"host": "core", "port": 4242})
    with caplog.at_level(logging.ERROR, logger="distirc.errors"):
        log_error("Connect failed", error, {"attempt": 3})
    message = caplog.records[-1].getMessage()
    assert message.startswith("[NETWORK] Connect failed: refused")
    assert "host=core" in message
    assert "attempt=3" in message
    summary = error_aggregator.get_error_summary()
    assert summary["network"]["total_count"] == 1
    assert summary["network"]["last_occurrence"]["context"]["port"] == 4242


def test_aggregator_keeps_recent_entries():
    for i in range(250):
        error_aggregator.record_error("protocol", f"e{i}")
    summary = error_aggregator.get_error_summary()
    assert summary["protocol"]["total_count"] == 200
    assert summary["protocol"]["last_occurrence"]["message"] == "e249"


def test_summary_report(caplog):
    with caplog.at_level(logging.INFO, logger="distirc.errors"):
        error_aggregator.log_summary_report()
    assert "No errors recorded" in caplog.text
    error_aggregator.record_error("auth", "rejected")
    with caplog.at_level(logging.INFO, logger="distirc.errors"):
        error_aggregator.log_summary_report()
    assert "auth: 1 total" in caplog.text
