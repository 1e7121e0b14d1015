"""Logging setup for EU4 Save Manager.

Everything logs below the ``eu4_save_manager`` logger. The log file
rotates so a long session of auto-backups cannot grow it without bound.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

ROOT_LOGGER = "eu4_save_manager"
LOG_FILE_NAME = "eu4_save_manager.log"

_MAX_LOG_BYTES = 1024 * 1024
_LOG_BACKUP_COUNT = 3


def setup_logging(debug: bool = False, log_dir: Optional[Path] = None) -> logging.Logger:
    """Configure the application logger.

    A rotating file handler always records DEBUG and above. In debug mode
    the same records are also echoed to stdout.

    Args:
        debug: If True, also log to the console
        log_dir: Directory for the log file; defaults to the config directory

    Returns:
        The application's top-level logger
    """
    if log_dir is None:
        from .config.paths import GamePaths
        log_dir = GamePaths.ensure_config_dir()
    else:
        log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    file_handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=_MAX_LOG_BYTES,
        backupCount=_LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    logger.addHandler(file_handler)

    if debug:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(logging.Formatter("%(levelname)s - %(name)s - %(message)s"))
        logger.addHandler(console_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get the logger of one module, e.g. ``get_logger("backup_store")``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
