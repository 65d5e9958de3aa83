"""
Logging configuration for the Mortgage Calculator application.

Importing this module configures the root logger once from config:
- Console output in a short format
- mortgage_calculator.log, rotated, with the full record location
- errors.log, rotated, holding ERROR and above only

Route and utility modules then call get_logger(__name__).
"""

import logging
import logging.handlers
import os
from typing import Dict

from mortgage_calculator.config import LOG_LEVEL, LOGS_DIR

APP_LOG_NAME = "mortgage_calculator.log"
ERROR_LOG_NAME = "errors.log"

# (max bytes, backups kept) per rotating log
APP_LOG_ROTATION = (10 * 1024 * 1024, 5)
ERROR_LOG_ROTATION = (5 * 1024 * 1024, 3)

DETAILED_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"
CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"

# Third-party loggers pinned to a fixed level regardless of LOG_LEVEL.
# urllib3 logs every connection the rate scraper opens.
LIBRARY_LEVELS = {
    "uvicorn.access": logging.INFO,
    "uvicorn.error": logging.INFO,
    "sqlalchemy.engine": logging.WARNING,
    "urllib3": logging.WARNING,
}


def _rotating_handler(path: str, level: int, rotation: tuple, formatter: logging.Formatter) -> logging.Handler:
    max_bytes, backup_count = rotation
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(level: str = LOG_LEVEL, log_dir: str = LOGS_DIR) -> Dict[str, str]:
    """
    Configure application-wide logging.

    Replaces any handlers already on the root logger, so calling it again
    (for example with a different directory) reconfigures cleanly.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Unknown names fall back to INFO.
        log_dir: Directory for the log files, created if missing

    Returns:
        Dictionary with the "app" and "error" log file paths
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    os.makedirs(log_dir, exist_ok=True)
    paths = {
        "app": os.path.join(log_dir, APP_LOG_NAME),
        "error": os.path.join(log_dir, ERROR_LOG_NAME),
    }

    detailed = logging.Formatter(fmt=DETAILED_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(log_level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT, datefmt="%H:%M:%S"))
    root_logger.addHandler(console_handler)

    root_logger.addHandler(_rotating_handler(paths["app"], log_level, APP_LOG_ROTATION, detailed))
    root_logger.addHandler(_rotating_handler(paths["error"], logging.ERROR, ERROR_LOG_ROTATION, detailed))

    for name, library_level in LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(library_level)

    root_logger.info(f"Logging configured at level {logging.getLevelName(log_level)}, files in {log_dir}")
    return paths


def get_logger(name: str) -> logging.Logger:
    """Logger for a module; pass __name__."""
    return logging.getLogger(name)


setup_logging()
