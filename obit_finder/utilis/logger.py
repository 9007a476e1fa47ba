"""
Logging for ObitFinder.

Everything goes to a size-capped ``obit_finder.log``; warnings and errors
are echoed to stderr so the CLI's JSON on stdout stays parseable.

Environment:
    OBIT_FINDER_LOG_DIR: directory for the log file (default ``logs/``).
    OBIT_FINDER_LOG_LEVEL: file log level name (default ``INFO``).
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

LOG_FILE_NAME = "obit_finder.log"
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 3

_FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(module)s.%(funcName)s:%(lineno)d | %(message)s"
_CONSOLE_FORMAT = "[obit-finder] %(levelname)s: %(message)s"


def _default_log_dir() -> str:
    return os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "..", "logs")


def _level_from_env(default: int) -> int:
    name = os.getenv("OBIT_FINDER_LOG_LEVEL", "").strip().upper()
    level = logging.getLevelName(name) if name else default
    return level if isinstance(level, int) else default


def setup_logger(name: str = "obit_finder", level: int = logging.INFO) -> logging.Logger:
    """Return the named logger, attaching handlers on first use only.

    Args:
        name: Logger name; child loggers (``obit_finder.x``) propagate here.
        level: File log level when ``OBIT_FINDER_LOG_LEVEL`` is unset.

    Returns:
        Configured logging.Logger instance.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level = _level_from_env(level)
    logger.setLevel(level)
    logger.propagate = False

    log_dir = os.getenv("OBIT_FINDER_LOG_DIR") or _default_log_dir()
    os.makedirs(log_dir, exist_ok=True)

    file_handler = RotatingFileHandler(
        os.path.join(log_dir, LOG_FILE_NAME),
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    return logger


logger = setup_logger()
