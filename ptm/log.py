"""Logging setup for the command line."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from .config import Config


def setup_logging(name: Optional[str] = "ptm") -> logging.Logger:
    """Attach a stderr handler to ``name`` at the configured level.

    Calling it twice does not add a second handler.
    """
    logger = logging.getLogger(name)
    level = Config.log_level()
    logger.setLevel(level)

    if logger.handlers:
        for existing in logger.handlers:
            existing.setLevel(level)
        return logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            fmt='[%(asctime)s] %(levelname)s [%(name)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
        )
    )
    logger.addHandler(handler)
    return logger


__all__ = ["setup_logging"]
