"""Logging micro API for pagecore."""

from .lib import get_logger, level_from_name, setup_logging

__all__ = ["get_logger", "level_from_name", "setup_logging"]
