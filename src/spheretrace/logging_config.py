"""Logging configuration for spheretrace."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVEL = "WARNING"


def setup_logging(
    level: str | None = None,
    stream: TextIO | None = None,
    name: str = "spheretrace",
) -> logging.Logger:
    """
    Set up logging for the package.

    Log records go to stderr so stdout stays free for image data. Calling
    this again replaces the handler rather than adding a second one.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        stream: Stream for the console handler (default stderr)
        name: Logger name

    Returns:
        Configured logger instance
    """
    if level is None:
        level = LOG_LEVEL
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(numeric_level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    # Console handler
    console_handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(console_handler)

    return logger
