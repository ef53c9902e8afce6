"""Reconnect delay policy."""

from __future__ import annotations

import logging
import random
import secrets

from ..constants import (
    BACKOFF_BASE_DELAY,
    BACKOFF_JITTER_FACTOR,
    BACKOFF_MAX_DELAY,
    BACKOFF_MULTIPLIER,
)
from ..logs.logger import logger

# Past this exponent the raw delay is far above any sane cap.
_MAX_EXPONENT = 64


class ReconnectBackoff:
    """Exponential reconnect delay with upward jitter.

    The n-th delay of a failure streak is ``base * multiplier**n`` plus up to
    ``jitter`` of itself at random. Each streak also draws its own ceiling
    from ``[maximum * (1 - jitter), maximum]``, so clients stuck in a long
    outage keep different retry periods instead of all settling on
    ``maximum``. Delays stay in ``[base, ceiling]`` and never shrink within a
    streak; :meth:`reset` starts a new one.
    """

    def __init__(
        self,
        base: float = BACKOFF_BASE_DELAY,
        maximum: float = BACKOFF_MAX_DELAY,
        multiplier: float = BACKOFF_MULTIPLIER,
        jitter: float = BACKOFF_JITTER_FACTOR,
        rng: random.Random | None = None,
    ) -> None:
        if base <= 0:
            raise ValueError("base delay must be positive")
        if maximum < base:
            raise ValueError("maximum delay must be >= base delay")
        if multiplier < 1:
            raise ValueError("multiplier must be >= 1")
        if jitter < 0:
            raise ValueError("jitter must be >= 0")
        self.base = base
        self.maximum = maximum
        self.multiplier = multiplier
        self.jitter = jitter
        self._rng = rng or secrets.SystemRandom()
        self.attempt = 0
        self._last = 0.0
        self.ceiling = self._draw_ceiling()

    def _draw_ceiling(self) -> float:
        spread = min(self.jitter, 1.0) * self._rng.random()
        return max(self.base, self.maximum * (1.0 - spread))

    def next_delay(self) -> float:
        exponent = min(self.attempt, _MAX_EXPONENT)
        raw = self.base * (self.multiplier**exponent)
        raw += raw * self.jitter * self._rng.random()
        delay = min(self.ceiling, max(self.base, raw, self._last))
        self.attempt += 1
        self._last = delay
        return delay

    def reset(self) -> None:
        if self.attempt:
            logger.log_event(
                "session", "backoff_reset", level=logging.DEBUG, attempts=self.attempt
            )
        self.attempt = 0
        self._last = 0.0
        self.ceiling = self._draw_ceiling()
