"""Logging configuration helpers."""
from __future__ import annotations

import sys

from loguru import logger


def configure_logging(verbose: bool = False) -> None:
    """Route loguru output to stderr, at DEBUG level when ``verbose``."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "INFO",
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan> | {message}",
    )
