"""Configuration management for checker-runner."""

from checker_runner.core.config.loader import ConfigLoader
from checker_runner.core.config.settings import (
    LoggingSettings,
    RepositorySettings,
    Settings,
    get_settings,
)

__all__ = [
    "ConfigLoader",
    "LoggingSettings",
    "RepositorySettings",
    "Settings",
    "get_settings",
]
