"""Logging configuration for the GUI and command line entry points."""
from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a single stderr handler to the package logger.

    Calling the function again replaces the previous handler, so entry points
    may reconfigure the level after parsing their arguments.
    """

    log_level = getattr(logging, level.upper(), logging.INFO)
    logger = logging.getLogger("codec_qr_tool")
    logger.setLevel(log_level)

    if logger.hasHandlers():
        logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False

    logger.debug("Logging initialised at %s", logging.getLevelName(log_level))
    return logger


__all__ = ["LOG_FORMAT", "configure_logging"]
