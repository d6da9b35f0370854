"""Logging utilities for the vitals trend Lambda functions."""

import logging
import sys
from typing import Optional

from .config import settings

# Format: [LEVEL] timestamp - name - message
LOG_FORMAT = "[%(levelname)s] %(asctime)s - %(name)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _stdout_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logger(name: Optional[str] = None, level: Optional[str] = None) -> logging.Logger:
    """Return a logger that writes formatted lines to stdout (CloudWatch picks them up).

    Args:
        name: Logger name (defaults to root logger).
        level: Log level (defaults to settings.LOG_LEVEL).

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger(name) if name else logging.getLogger()

    log_level = level or settings.LOG_LEVEL
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # Lambda containers are reused between invocations, so replace rather than stack handlers
    logger.handlers.clear()
    logger.addHandler(_stdout_handler())
    logger.propagate = False

    return logger
