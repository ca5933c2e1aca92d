"""Logging setup for VirtualTV with console and rotating file output."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

from virtualtv.config import LoggingConfig

CONSOLE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    config: Optional[LoggingConfig] = None,
    log_directory: Optional[Path] = None,
) -> logging.Logger:
    """
    Configure the root logger from the logging config section.

    Writes to stdout and to a size-rotated log file, each of which can be
    switched off in the config.

    Args:
        config: Logging section; defaults apply when omitted.
        log_directory: Override the directory of the configured log file.

    Returns:
        Configured root logger
    """
    config = config or LoggingConfig()
    numeric_level = getattr(logging, config.level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Avoid duplicate handlers when called more than once
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    if config.log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt="%H:%M:%S"))
        root_logger.addHandler(console_handler)

    log_file_path = None
    if config.log_to_file:
        log_file_path = Path(config.file)
        if log_directory is not None:
            log_file_path = log_directory / log_file_path.name
        log_file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file_path,
            maxBytes=config.max_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(config.format, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)

    root_logger.info(f"VirtualTV logging initialized - Level: {config.level}")
    if log_file_path is not None:
        root_logger.info(
            f"Log file: {log_file_path} "
            f"(max {config.max_size_mb} MB, {config.backup_count} backups)"
        )

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module."""
    return logging.getLogger(name)
