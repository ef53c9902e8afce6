"""Tests for the reconnect backoff policy."""

import logging
import random

import pytest

from distirc.session import ReconnectBackoff


def _delays(backoff, count):
    return [backoff.next_delay() for _ in range(count)]


def test_delays_stay_within_bounds_and_never_shrink():
    backoff = ReconnectBackoff(base=1.0, maximum=30.0, rng=random.Random(3))
    delays = _delays(backoff, 20)
    assert all(1.0 <= d <= 30.0 for d in delays)
    assert delays == sorted(delays)
    assert 30.0 * 0.75 <= delays[-1] <= 30.0
    assert delays[-1] == backoff.ceiling


def test_first_delay_at_least_base():
    backoff = ReconnectBackoff(base=0.5, maximum=10.0, jitter=0.0)
    assert backoff.next_delay() == 0.5
    assert backoff.next_delay() == 1.0
    assert backoff.next_delay() == 2.0


def test_jitter_differs_between_seeds():
    a = _delays(ReconnectBackoff(base=1.0, maximum=100.0, rng=random.Random(1)), 4)
    b = _delays(ReconnectBackoff(base=1.0, maximum=100.0, rng=random.Random(2)), 4)
    assert a != b


def test_capped_delays_keep_jitter_between_seeds():
    runs = [
        _delays(ReconnectBackoff(base=1.0, maximum=60.0, rng=random.Random(seed)), 10)
        for seed in (1, 2, 3)
    ]
    tails = [run[-4:] for run in runs]
    assert len({tuple(tail) for tail in tails}) == 3
    for run in runs:
        assert run == sorted(run)
        assert all(60.0 * 0.75 <= d <= 60.0 for d in run[-4:])


def test_reset_draws_a_new_ceiling():
    backoff = ReconnectBackoff(base=1.0, maximum=60.0, rng=random.Random(5))
    ceilings = set()
    for _ in range(5):
        ceilings.add(backoff.ceiling)
        _delays(backoff, 3)
        backoff.reset()
    assert len(ceilings) > 1
    assert all(45.0 <= c <= 60.0 for c in ceilings)


def test_reset_starts_a_new_streak():
    backoff = ReconnectBackoff(base=1.0, maximum=60.0, jitter=0.0)
    _delays(backoff, 5)
    assert backoff.attempt == 5
    backoff.reset()
    assert backoff.attempt == 0
    assert backoff.next_delay() == 1.0


def test_reset_logs_a_structured_event(caplog):
    backoff = ReconnectBackoff(base=1.0, maximum=60.0, jitter=0.0)
    _delays(backoff, 3)
    with caplog.at_level(logging.DEBUG, logger="distirc"):
        backoff.reset()
        backoff.reset()
    records = [
        r for r in caplog.records if getattr(r, "event", None) == "session_backoff_reset"
    ]
    assert len(records) == 1
    assert "Reconnect backoff reset after 3 attempt(s)" in records[0].getMessage()


def test_huge_attempt_count_does_not_overflow():
    backoff = ReconnectBackoff(base=1.0, maximum=5.0, rng=random.Random(0))
    backoff.attempt = 10_000
    assert 3.75 <= backoff.next_delay() <= 5.0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"base": 0},
        {"base": 2.0, "maximum": 1.0},
        {"multiplier": 0.5},
        {"jitter": -0.1},
    ],
)
def test_invalid_parameters(kwargs):
    with pytest.raises(ValueError):
        ReconnectBackoff(**kwargs)
