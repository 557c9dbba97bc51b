"""
utils/logger.py
---------------
Logging for the ``matzip`` package tree.
Store contexts run on named worker threads, so every line carries the
thread name; the level comes from ``LOG_LEVEL``.
Modules obtain their logger with `get_logger(__name__)`.
"""

import logging
import sys

from matzip.config import LOG_LEVEL

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_initialized = False


def _init_logging() -> None:
    """Attach the stdout handler to the `matzip` logger, once per process."""
    global _initialized
    if _initialized:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    package_logger = logging.getLogger("matzip")
    package_logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    package_logger.addHandler(handler)
    _initialized = True


def get_logger(name: str) -> logging.Logger:
    """
    Logger for a module inside the package; records reach the `matzip` handler.

    Args:
        name: Usually ``__name__`` of the calling module.

    Returns:
        A configured logging.Logger.
    """
    _init_logging()
    return logging.getLogger(name)
