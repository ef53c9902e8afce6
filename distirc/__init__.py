"""distirc terminal client: session and buffer-synchronization core."""

__version__ = "0.1.0"
