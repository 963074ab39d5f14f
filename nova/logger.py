"""
Logging setup, done once at the entry point.

Library modules only call ``logging.getLogger(__name__)``; handlers, format
and level are configured here.
"""

import logging
import sys
from logging import Logger, StreamHandler
from typing import Final

LOG_FORMAT: Final[str] = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

LOG_LEVELS: Final[dict[str, int]] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def setup_logger(name: str = "nova", level: str = "INFO") -> Logger:
    """
    Configure root logging to stdout and return a named logger.

    Unknown level names fall back to INFO.
    """
    logging.basicConfig(
        level=LOG_LEVELS.get(level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[StreamHandler(sys.stdout)],
        force=True,  # replaces handlers left by a previous streamlit rerun
    )
    return logging.getLogger(name)
