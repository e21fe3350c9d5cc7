"""Custom exception definitions for checker-runner."""

from typing import Any


class CheckerRunnerError(Exception):
    """Base exception for all checker-runner errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Error message.
            details: Additional error details.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class ConfigurationError(CheckerRunnerError):
    """Exception raised for configuration errors."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error.

        Args:
            message: Error message.
            config_key: Configuration key that caused the error.
            details: Additional error details.
        """
        details = details or {}
        if config_key:
            details["config_key"] = config_key
        super().__init__(message, details)


class ArtifactResolutionError(CheckerRunnerError):
    """Exception raised when a single resolution tier cannot produce an artifact."""

    def __init__(
        self,
        message: str,
        coordinates: str | None = None,
        tier: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize artifact resolution error.

        Args:
            message: Error message.
            coordinates: Artifact coordinates (group:name:version).
            tier: Name of the resolution tier that failed.
            details: Additional error details.
        """
        details = details or {}
        if coordinates:
            details["coordinates"] = coordinates
        if tier:
            details["tier"] = tier
        super().__init__(message, details)


class CheckerFailureError(CheckerRunnerError):
    """Exception raised when the checker reports errors (non-zero exit)."""

    def __init__(
        self,
        message: str,
        return_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize checker failure error.

        Args:
            message: Error message.
            return_code: Exit code of the compiler process.
            details: Additional error details.
        """
        details = details or {}
        if return_code is not None:
            details["return_code"] = return_code
        super().__init__(message, details)
        self.return_code = return_code


class CheckerExecutionError(CheckerRunnerError):
    """Exception raised for unexpected failures while running the checker."""

    def __init__(
        self,
        message: str,
        command: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize checker execution error.

        Args:
            message: Error message.
            command: Executable that was being run.
            details: Additional error details.
        """
        details = details or {}
        if command:
            details["command"] = command
        super().__init__(message, details)
