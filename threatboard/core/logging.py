"""
Logging configuration for Threatboard.

This module provides the shared application logger and its setup.
"""

import logging
from logging.handlers import RotatingFileHandler
import sys
from pathlib import Path
from typing import Optional

from threatboard.core.config import settings

# Shared application logger; handlers are attached to the root logger
logger = logging.getLogger("threatboard")


def setup_logging(log_level: Optional[str] = None, log_dir: Optional[str] = None):
    """
    Configure logging for the application.

    Logs to the console and, when a log directory is configured, to rotating
    files with different levels.

    Args:
        log_level: Root log level name. Defaults to settings.LOG_LEVEL.
        log_dir: Directory for log files. Defaults to settings.LOG_DIR.

    Returns:
        The configured root logger.
    """
    level = getattr(logging, (log_level or settings.LOG_LEVEL).upper())
    if log_dir is None:
        log_dir = settings.LOG_DIR

    # Create formatter
    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear any existing handlers
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    # Console handler (INFO and above)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_dir:
        logs_path = Path(log_dir)
        logs_path.mkdir(parents=True, exist_ok=True)

        # File handler for all logs (DEBUG and above)
        file_handler = RotatingFileHandler(
            logs_path / "threatboard.log",
            maxBytes=10_485_760,  # 10MB
            backupCount=5,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

        # File handler for errors only
        error_handler = RotatingFileHandler(
            logs_path / "error.log",
            maxBytes=10_485_760,  # 10MB
            backupCount=5,
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        root_logger.addHandler(error_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    return root_logger
