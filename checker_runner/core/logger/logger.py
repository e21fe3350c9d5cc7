"""Logging for checker runs.

Compiler diagnostics are relayed through these loggers line by line, so the
console handler never interprets Rich markup in messages.
"""

import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

from checker_runner.core.config.settings import LoggingSettings, get_settings

FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _console_handler(settings: LoggingSettings) -> logging.Handler:
    if not settings.use_rich:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(settings.format))
        return handler
    return RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )


def setup_logging(settings: LoggingSettings | None = None) -> None:
    """Configure the root logger.

    Args:
        settings: Logging settings. Uses global settings if not provided.
    """
    settings = settings or get_settings().logging
    level = getattr(logging, settings.level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(_console_handler(settings))

    if settings.file:
        settings.file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(settings.file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger, configuring logging on first use.

    Args:
        name: Logger name (typically __name__).

    Returns:
        Logger instance.
    """
    if not logging.getLogger().handlers:
        setup_logging()
    return logging.getLogger(name)
