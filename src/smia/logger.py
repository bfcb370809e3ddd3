"""
Logging setup for SMIA, backed by loguru.

Modules obtain a bound logger with ``get_logger(__name__)``; the CLI calls
``setup_logging`` once at startup to choose the level.
"""

import os
import sys

from loguru import logger

_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> - <level>{message}</level>"
)

logger.configure(extra={"name": "smia"})


def setup_logging(level: str | None = None, log_file: str | None = None) -> None:
    """
    Configure loguru sinks.

    Args:
        level: Minimum level for the stderr sink. Falls back to SMIA_LOG_LEVEL,
            then WARNING.
        log_file: Optional path for a rotating DEBUG file sink. Falls back to
            SMIA_LOG_FILE.
    """
    level = (level or os.getenv("SMIA_LOG_LEVEL") or "WARNING").upper()
    log_file = log_file or os.getenv("SMIA_LOG_FILE")

    logger.remove()
    logger.add(sys.stderr, level=level, format=_FORMAT)

    if log_file:
        logger.add(log_file, rotation="10 MB", retention=2, level="DEBUG")


def get_logger(name: str):
    """Return the shared loguru logger bound to a module name."""
    return logger.bind(name=name)
