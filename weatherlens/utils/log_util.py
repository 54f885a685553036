"""
Logging setup shared by every weatherlens module.

Usage:
    from weatherlens.utils.log_util import app_logger

    logger = app_logger(__name__)
"""

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
PACKAGE_LOGGER = "weatherlens"


def _resolve_level(level: Optional[str] = None) -> int:
    """Map a level name (or WEATHERLENS_LOG_LEVEL) to a logging constant."""
    name = (level or os.environ.get("WEATHERLENS_LOG_LEVEL", "INFO")).upper()
    return getattr(logging, name, logging.INFO)


def _configure_package_logger() -> logging.Logger:
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        package_logger.addHandler(handler)
        package_logger.setLevel(_resolve_level())
    return package_logger


def app_logger(
    name: str, log_file: Optional[str] = None, level: Optional[str] = None
) -> logging.Logger:
    """
    Return a logger that writes through the package-wide handler.

    :param name: Logger name, normally the calling module's __name__.
    :param log_file: Optional file path for an additional file handler.
    :param level: Optional level name overriding WEATHERLENS_LOG_LEVEL.
    :return: Configured logging.Logger.
    """
    _configure_package_logger()

    # Loggers outside the package namespace still route through its handler
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"

    logger = logging.getLogger(name)
    if level:
        logger.setLevel(_resolve_level(level))

    if log_file and not any(
        isinstance(h, logging.FileHandler)
        and h.baseFilename == os.path.abspath(log_file)
        for h in logger.handlers
    ):
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        logger.addHandler(file_handler)

    return logger
