"""
Logging utilities for cmdgate.
Uses Rich for colored console output.
"""

import logging
from typing import Optional, Set

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

CUSTOM_THEME = Theme({
    "logging.level.success": "green",
    "logging.level.command": "cyan",
    "logging.level.debug": "dim cyan",
})

console = Console(theme=CUSTOM_THEME)

_default_level = logging.INFO
_configured: Set[str] = set()


def set_default_level(level: int) -> None:
    """Set the level of every configured logger and of loggers created later."""
    global _default_level
    _default_level = level
    for name in _configured:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)


def setup_logging(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Set up a logger with RichHandler.

    Args:
        name: Logger name
        level: Logging level (default: module default, INFO unless changed)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if level is None:
        level = _default_level

    logger.setLevel(level)

    # Replace handlers so repeated setup doesn't duplicate output
    logger.handlers = []

    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        fmt="[%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    ))

    logger.addHandler(handler)
    logger.propagate = False
    _configured.add(name)

    return logger


class LoggerMixin:
    """Mixin class that provides logger functionality."""

    def __init__(self, name: str):
        self._logger = setup_logging(name)

    def debug(self, message: str, **kwargs) -> None:
        self._logger.debug(message, extra=kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._logger.info(message, extra=kwargs)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return setup_logging(name)
