"""Shared infrastructure for pagecore."""

from pagecore.core.log import get_logger, level_from_name, setup_logging

__all__ = ["get_logger", "level_from_name", "setup_logging"]
