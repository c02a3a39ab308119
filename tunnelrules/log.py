"""Logging setup for the tunnelrules package."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "tunnelrules"


def configure_logging(level: str | int = "WARNING") -> logging.Logger:
    """
    Attach a stderr RichHandler to the package logger.

    Safe to call more than once: the handler is installed a single time and
    later calls only change the level.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=False)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger
