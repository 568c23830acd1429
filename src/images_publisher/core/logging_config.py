"""Centralized logging configuration for the images publisher.

Component loggers (``publisher``, ``compression``, ``storage``...) are
children of the ``images_publisher`` package logger. Only the package
logger carries a level and a handler, so configuring it once applies to
every component.
"""

import logging
import os
import sys
from typing import Optional

PACKAGE_LOGGER = "images_publisher"


def setup_logger(
    name: str = PACKAGE_LOGGER,
    level: Optional[str] = None,
    format_type: str = "structured",
) -> logging.Logger:
    """
    Setup centralized logging with environment variable configuration.

    Args:
        name: Logger name (defaults to the package logger)
        level: Log level override (defaults to env var or INFO)
        format_type: Logging format ("structured" or "simple")

    Returns:
        Configured logger instance

    Environment Variables:
        LOG_LEVEL: Set logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_FORMAT: Set format type ("structured" or "simple")
    """
    logger = logging.getLogger(name)

    requested = level or os.getenv("LOG_LEVEL", "INFO")
    logger.setLevel(getattr(logging, requested.upper(), logging.INFO))

    if not logger.handlers:
        # stdout carries the published URLs
        handler = logging.StreamHandler(sys.stderr)

        env_format = os.getenv("LOG_FORMAT", format_type).lower()

        if env_format == "structured":
            formatter = logging.Formatter(
                "%(asctime)s | %(name)s | %(levelname)-8s | "
                "%(filename)s:%(lineno)d | %(funcName)s() | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        else:
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )

        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: str = PACKAGE_LOGGER) -> logging.Logger:
    """
    Get a component logger under the package logger.

    The package logger is set up from the environment the first time it is
    needed. Later calls never touch levels, so whatever ``setup_logger``
    configured last stays in effect.

    Args:
        name: Component name, or a dotted name already under the package

    Returns:
        Logger that inherits level and handler from the package logger
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if not package_logger.handlers:
        setup_logger(PACKAGE_LOGGER)

    if name == PACKAGE_LOGGER or name.startswith(f"{PACKAGE_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
