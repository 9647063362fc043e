"""
Logging configuration.

Configures the loguru logger for services and background workers.
"""

import sys

from loguru import logger

from nutrifit.config.settings import settings


def setup_logging(component: str = "nutrifit") -> None:
    """
    Configure logger sinks with file rotation.

    Args:
        component: Process name shown in the startup line
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        backtrace=False,
        diagnose=False,
    )
    logger.add(
        settings.log_file,
        rotation="1 day",
        retention="7 days",
        level=settings.log_level,
        encoding="utf-8",
        enqueue=True,
    )

    logger.info(f"Starting {component} ({settings.environment})...")
