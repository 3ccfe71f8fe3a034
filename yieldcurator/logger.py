"""Logging configuration for Yield Curator.

Every module logs through a child of the ``yieldcurator`` logger, which owns
a single file handler. Nothing reaches the root logger, so the CLI output
stays clean.
"""

import logging
from pathlib import Path

from yieldcurator.config import get_settings

PACKAGE_LOGGER = "yieldcurator"
LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(log_file: str | Path | None = None, level: str | None = None) -> logging.Logger:
    """(Re)attach the package file handler.

    Defaults come from settings (``YIELDCURATOR_LOG_FILE``,
    ``YIELDCURATOR_LOG_LEVEL``).
    """
    if log_file is None or level is None:
        settings = get_settings()
        log_file = log_file or settings.log_file
        level = level or settings.log_level

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    file_handler = logging.FileHandler(Path(log_file), mode="a")
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    package_logger.addHandler(file_handler)
    package_logger.setLevel(level.upper())
    package_logger.propagate = False
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given module name, configuring the package once."""
    if not logging.getLogger(PACKAGE_LOGGER).handlers:
        configure_logging()

    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
