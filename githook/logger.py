"""
Logging configuration for the controller.

Every reconciliation pass logs through a child of the ``githook`` logger named
after the GitHook it works on, so one resource can be followed in the output.
"""
import logging
import sys
from .config import settings


def setup_logging():
    """Configure the controller logger from settings."""

    logger = logging.getLogger("githook")

    level = logging.DEBUG if settings.debug else logging.INFO
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(fmt=settings.log_format, datefmt=settings.log_date_format)
    )
    logger.addHandler(handler)

    return logger


def resource_logger(namespace: str, name: str) -> logging.Logger:
    """Child logger scoped to a single GitHook, e.g. ``githook.ci/demo``."""
    return logger.getChild(f"{namespace}/{name}")


# Global logger instance
logger = setup_logging()
