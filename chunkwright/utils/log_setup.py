"""Logging configuration for chunkwright."""

import sys
from typing import Any, Optional

from loguru import logger

VERBOSE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
DEFAULT_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"


def setup_logging(verbose: bool = False, sink: Optional[Any] = None) -> int:
    """Configure logging based on verbosity level.

    Replaces every installed handler with a single one.

    Args:
        verbose: Whether to enable verbose (DEBUG) logging
        sink: Destination accepted by ``logger.add`` (stderr by default)

    Returns:
        Id of the installed handler
    """
    logger.remove()
    if sink is None:
        sink = sys.stderr

    if verbose:
        return logger.add(sink, level="DEBUG", format=VERBOSE_FORMAT)
    return logger.add(sink, level="INFO", format=DEFAULT_FORMAT)
