"""DivTrack log output: a size-rotated file in the data directory, plus stdout."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from divtrack.config.paths import get_data_dir, is_frozen

LOGGER_NAME = "divtrack"
LOG_FILENAME = "divtrack.log"
MAX_BYTES = 5 * 1024 * 1024
BACKUP_COUNT = 3
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Set by setup_logging()
_logger: Optional[logging.Logger] = None


def get_log_path(portable: bool = False) -> Path:
    """Location of divtrack.log, next to the database in the data directory."""
    return get_data_dir(portable=portable) / LOG_FILENAME


def _file_handler(
    log_path: Path, formatter: logging.Formatter, level: int
) -> Optional[RotatingFileHandler]:
    """Rotating handler for log_path, or None if the file cannot be opened."""
    try:
        handler = RotatingFileHandler(
            log_path,
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError as e:
        print(f"Warning: Could not create log file at {log_path}: {e}")
        return None
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    portable: bool = False,
    console: bool = True,
    level: int = logging.INFO,
) -> logging.Logger:
    """
    Attach file and console handlers to the "divtrack" logger.

    Server startup, seed imports and schema migrations all write through
    this logger. Console output is skipped in frozen builds, which have no
    terminal attached.

    Args:
        portable: Write divtrack.log under ./data instead of the user data dir
        console: Also echo records to stdout
        level: Minimum level for both handlers

    Returns:
        The configured logger
    """
    global _logger

    if _logger is not None:
        return _logger

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Handlers attached by an embedding application are left alone
    if not logger.handlers:
        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

        file_handler = _file_handler(get_log_path(portable=portable), formatter, level)
        if file_handler is not None:
            logger.addHandler(file_handler)

        if console and not is_frozen():
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(level)
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """
    Get the application logger.

    Before setup_logging() runs (library use, tests) this is the bare
    "divtrack" logger, which propagates to whatever the host configured.
    """
    if _logger is None:
        return logging.getLogger(LOGGER_NAME)
    return _logger
