"""
Logging configuration and utilities.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional


DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"


def setup_root_logger(log_file: Optional[Path] = None,
                      level: str = "WARNING",
                      max_file_size_mb: int = 10,
                      backup_count: int = 5,
                      format_string: Optional[str] = None):
    """
    Set up the root logger for the application.

    Operator-facing output goes through the console reporter, so the console
    handler only carries diagnostics at `level` and above. The rotating file
    handler, when requested, always records DEBUG.

    Args:
        log_file: Optional log file path
        level: Console logging level
        max_file_size_mb: Rotate the log file at this size
        backup_count: Number of rotated files to keep
        format_string: Log format string
    """
    root_logger = logging.getLogger()

    # Clear any existing handlers
    root_logger.handlers.clear()

    console_level = getattr(logging, level.upper())
    root_logger.setLevel(logging.DEBUG if log_file else console_level)

    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
