"""
Logging configuration for page2atom.

Uses loguru for console output and an optional rotating log file.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger as _logger

from page2atom.config import LoggingConfig, get_config


def setup_logger(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_config: Optional[LoggingConfig] = None,
) -> None:
    """Configure the logger with console and file handlers.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, etc.)
        log_file: Path to log file; enables file logging when given
        log_config: Logging settings, defaults to the global configuration
    """
    log_config = log_config or get_config().logging

    level = (level or log_config.level).upper()
    file_enabled = log_config.file_enabled or log_file is not None
    log_file = log_file or log_config.file_path

    # Remove default handler
    _logger.remove()

    if log_config.console_enabled:
        _logger.add(
            sys.stderr,
            format=log_config.format,
            level=level,
            colorize=True,
            backtrace=True,
            diagnose=False,
        )

    if file_enabled:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

        _logger.add(
            log_file,
            format=log_config.format,
            level=level,
            rotation=log_config.rotation,
            retention=log_config.retention,
            encoding="utf-8",
            backtrace=True,
            diagnose=False,
        )


def get_logger(name: Optional[str] = None):
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__ from calling module)

    Returns:
        Logger instance
    """
    if name:
        return _logger.bind(name=name)
    return _logger


# Re-export logger for direct use
logger = _logger

__all__ = [
    "setup_logger",
    "get_logger",
    "logger",
]
