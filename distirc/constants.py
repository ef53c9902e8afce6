"""
Configuration constants for the distirc terminal client

This module contains all tunables used by the session core.
Each constant can be overridden by setting an environment variable with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Attempts to parse the environment variable as an integer. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Same contract as ``_get_env_int`` for floating point values.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


# Core connection defaults
DEFAULT_CORE_HOST = os.getenv("DISTIRC_DEFAULT_HOST", "localhost")
DEFAULT_CORE_PORT = _get_env_int("DISTIRC_DEFAULT_PORT", 4242)

# Timeouts
CONNECT_TIMEOUT_SECONDS = _get_env_float(
    "CONNECT_TIMEOUT_SECONDS", 10.0
)  # Bound on a single TCP connect attempt
AUTH_TIMEOUT_SECONDS = _get_env_float(
    "AUTH_TIMEOUT_SECONDS", 15.0
)  # Max wait for AuthResult after sending credentials
KEEPALIVE_INTERVAL_SECONDS = _get_env_float(
    "KEEPALIVE_INTERVAL_SECONDS", 60.0
)  # Silence before a ping is sent; twice this declares the link dead
SHUTDOWN_JOIN_TIMEOUT_SECONDS = _get_env_float(
    "SHUTDOWN_JOIN_TIMEOUT_SECONDS", 5.0
)  # How long stop() waits for the worker thread

# Reconnect backoff
BACKOFF_BASE_DELAY = _get_env_float("BACKOFF_BASE_DELAY", 1.0)  # Minimum delay
BACKOFF_MAX_DELAY = _get_env_float("BACKOFF_MAX_DELAY", 60.0)  # Upper bound
BACKOFF_MULTIPLIER = _get_env_float("BACKOFF_MULTIPLIER", 2.0)
BACKOFF_JITTER_FACTOR = _get_env_float(
    "BACKOFF_JITTER_FACTOR", 0.25
)  # Fraction of the raw delay added at random

# Authentication: automatic retries after a rejection before waiting for
# an explicit reconnect request. 0 means a rejection always needs user action.
AUTH_RETRY_LIMIT = _get_env_int("AUTH_RETRY_LIMIT", 0)

# Outbound commands
COMMAND_QUEUE_SIZE = _get_env_int(
    "COMMAND_QUEUE_SIZE", 64
)  # Commands held while not ready; extra ones are dropped

# Wire framing
MAX_FRAME_BYTES = _get_env_int(
    "MAX_FRAME_BYTES", 1_048_576
)  # Longest accepted frame, terminator excluded
READ_CHUNK_BYTES = _get_env_int("READ_CHUNK_BYTES", 65_536)
