"""
Logging setup utilities.

This module provides functions to configure logging with console output and an
optional log file, and to read the desired level from the environment.
"""

import logging
import os
from pathlib import Path
from typing import Optional

LOG_LEVEL_ENV = "SHAPEDROP_LOG_LEVEL"
DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def get_log_level(default: int = logging.INFO) -> int:
    """
    Return the logging level named by SHAPEDROP_LOG_LEVEL.

    Accepts level names (``debug``, ``INFO``...) or numeric values. Falls
    back to ``default`` when unset or unrecognised.
    """
    raw = (os.getenv(LOG_LEVEL_ENV) or "").strip()
    if not raw:
        return default
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else default


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None
) -> Optional[Path]:
    """
    Set up logging with a console handler and an optional file handler.

    Args:
        level: Logging level (default: logging.INFO)
        log_file: Optional path of a log file; parent directories are created
        format_string: Optional custom format string. If None, uses default format.

    Returns:
        Path to the log file, or None when logging to the console only

    Example:
        >>> setup_logging(logging.DEBUG)
        >>> logger = logging.getLogger(__name__)
        >>> logger.debug("Visible on the console")
    """
    formatter = logging.Formatter(
        format_string or DEFAULT_FORMAT,
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file is None:
        return None

    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    return log_file
