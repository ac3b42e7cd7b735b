"""Logging configuration helpers for the portal."""

from __future__ import annotations

import logging
from logging import Logger
import os


def configure_logging() -> Logger:
    """Configure basic logging for the application and return the portal logger."""
    level_name = os.environ.get("EDUPORTAL_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    return logging.getLogger("eduportal")
