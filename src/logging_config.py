"""
Centralized logging configuration with a rotating file handler.

This module provides logging for tracing how learning maps are loaded,
classified and rendered.

Usage:
    from src.logging_config import setup_logging
    setup_logging()  # Call once at application startup
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Log directory (relative to project root unless LEARNINGMAP_LOG_DIR is set)
DEFAULT_LOG_DIR = Path(__file__).parent.parent / "logs"

# Log format with function name and line number for debugging
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Rotation settings: 5 MB per file, keep 5 backups (25 MB total max)
MAX_LOG_SIZE_BYTES = 5 * 1024 * 1024
BACKUP_COUNT = 5


def get_log_dir() -> Path:
    return Path(os.getenv("LEARNINGMAP_LOG_DIR", str(DEFAULT_LOG_DIR)))


def setup_logging(
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Configure logging with console and rotating file handlers.

    Sets up two logging outputs:
    - Console: Shows INFO and above (user-facing messages)
    - File: Shows DEBUG and above for the learningmap package

    Args:
        console_level: Minimum log level for console output (default: INFO)
        file_level: Minimum log level for file output (default: DEBUG)

    Example:
        # Verbose console output while debugging a map
        setup_logging(console_level=logging.DEBUG)
    """
    log_dir = get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    # Get root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture all, let handlers filter

    # Clear any existing handlers (prevents duplicate logs on re-init)
    root_logger.handlers.clear()

    # Console handler - stderr so rendered markup on stdout stays clean
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    map_file_handler = RotatingFileHandler(
        log_dir / "learningmap.log",
        maxBytes=MAX_LOG_SIZE_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
    )
    map_file_handler.setLevel(file_level)
    map_file_handler.setFormatter(formatter)

    map_logger = logging.getLogger("src.learningmap")
    map_logger.handlers.clear()
    map_logger.addHandler(map_file_handler)

    root_logger.info("Logging initialized - console: %s, file: %s",
                     logging.getLevelName(console_level),
                     logging.getLevelName(file_level))
