"""Exception definitions module."""

from checker_runner.core.exceptions.errors import (
    ArtifactResolutionError,
    CheckerExecutionError,
    CheckerFailureError,
    CheckerRunnerError,
    ConfigurationError,
)

__all__ = [
    "CheckerRunnerError",
    "ConfigurationError",
    "ArtifactResolutionError",
    "CheckerFailureError",
    "CheckerExecutionError",
]
