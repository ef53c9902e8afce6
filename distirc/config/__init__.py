"""Configuration values consumed by the session core."""

from .model import CoreConfig

__all__ = ["CoreConfig"]
