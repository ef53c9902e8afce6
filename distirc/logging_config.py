r"""
Console logging and error aggregation for the distirc terminal client.

The terminal normally belongs to the UI and log records go to the status
buffer. ``--headless`` runs get a colorlog console instead. Every error
passed through :func:`log_structured_error` is also counted per category so
a summary can be printed when the client exits.
"""

import atexit
import logging
import os
import sys
import threading
import time
from collections import Counter, defaultdict, deque
from typing import Any

import colorlog

_errors_logger = logging.getLogger("distirc.errors")

# Recent occurrences remembered per category
_RECENT_PER_CATEGORY = 200
_RECENT_WINDOW_SECONDS = 3600

_LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "magenta",
}


class ErrorAggregator:
    """Counts errors per category and keeps the most recent occurrences."""

    def __init__(self):
        self.lock = threading.Lock()
        self.totals: Counter[str] = Counter()
        self.recent: dict[str, deque[dict[str, Any]]] = defaultdict(
            lambda: deque(maxlen=_RECENT_PER_CATEGORY)
        )
        self.start_time = time.time()

    def record_error(
        self, error_type: str, message: str, context: dict[str, Any] | None = None
    ) -> None:
        entry = {"timestamp": time.time(), "message": message, "context": context or {}}
        with self.lock:
            self.totals[error_type] += 1
            self.recent[error_type].append(entry)

    def get_error_summary(self) -> dict[str, Any]:
        """Per category: retained count, count within the last hour, newest entry."""
        cutoff = time.time() - _RECENT_WINDOW_SECONDS
        with self.lock:
            return {
                error_type: {
                    "total_count": len(entries),
                    "recent_count": sum(1 for e in entries if e["timestamp"] >= cutoff),
                    "last_occurrence": entries[-1] if entries else None,
                    "seen": self.totals[error_type],
                }
                for error_type, entries in self.recent.items()
            }

    def clear(self) -> None:
        with self.lock:
            self.totals.clear()
            self.recent.clear()

    def log_summary_report(self) -> None:
        summary = self.get_error_summary()
        if not summary:
            _errors_logger.info("No errors recorded in current session")
            return
        _errors_logger.warning("Error summary:")
        for error_type, stats in sorted(summary.items()):
            _errors_logger.warning(
                f"  {error_type}: {stats['total_count']} total, "
                f"{stats['recent_count']} in last hour"
            )
            last = stats["last_occurrence"]
            if last:
                _errors_logger.warning(f"    Last: {last['message']}")


error_aggregator = ErrorAggregator()


def log_structured_error(
    error_type: str,
    message: str,
    exception: BaseException | None = None,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log ``message`` tagged with its category and count it.

    Args:
        error_type: Category such as ``network``, ``auth`` or ``protocol``.
        message: Human readable description.
        exception: The exception being reported, if any.
        context: Extra key/value pairs appended to the log line.
        level: Logging level, ERROR by default.
    """
    parts = [f"[{error_type.upper()}] {message}"]
    if exception is not None:
        parts.append(f"Exception: {type(exception).__name__}: {exception}")
    if context:
        parts.append("Context: " + " | ".join(f"{k}={v}" for k, v in context.items()))
    _errors_logger.log(level, " | ".join(parts))
    error_aggregator.record_error(error_type, message, context)


class LoggerConfigurator:
    """Sets up a colored stderr console for runs without the terminal UI."""

    def __init__(self, config=None):
        self.config = config or {}

    def configure(self):
        """Install the colorlog handler on the root logger.

        ``DEBUG`` set to ``true``, ``1`` or ``yes`` selects DEBUG level,
        otherwise INFO.
        """
        debug_env = os.environ.get("DEBUG", "").lower()
        log_level = logging.DEBUG if debug_env in ("true", "1", "yes") else logging.INFO

        formatter = colorlog.ColoredFormatter(
            "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s %(message_log_color)s%(message)s",
            datefmt="%H:%M:%S",
            log_colors=_LOG_COLORS,
            secondary_log_colors={"message": {"ERROR": "red", "CRITICAL": "magenta"}},
            reset=True,
        )
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)

        logging.basicConfig(level=log_level, handlers=[handler])
        root_logger = logging.getLogger()
        root_logger.setLevel(log_level)
        for existing in root_logger.handlers:
            existing.setFormatter(formatter)
        logging.getLogger("asyncio").setLevel(logging.WARNING)

        atexit.register(self._log_final_error_summary)
        return handler

    def _log_final_error_summary(self):
        try:
            _errors_logger.info("Final error summary before shutdown:")
            error_aggregator.log_summary_report()
        except Exception as e:  # noqa: BLE001
            logging.error(f"Failed to log final error summary: {e}")
