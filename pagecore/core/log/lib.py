"""Core logging implementation for pagecore."""

import logging
import sys
from typing import Optional

__all__ = ["get_logger", "level_from_name", "setup_logging"]

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def level_from_name(name: str, default: int = logging.INFO) -> int:
    """Translate a level name such as "debug" into a logging level.

    Unrecognized names fall back to ``default``.
    """
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else default


def setup_logging(level: int | str = logging.INFO, stream=sys.stderr) -> None:
    """Configure basic logging.

    Args:
        level: Logging level, numeric or by name.
        stream: Output stream.
    """
    if isinstance(level, str):
        level = level_from_name(level)
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=stream)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Name of the logger.

    Returns:
        Logger instance.
    """
    return logging.getLogger(name or "pagecore")
