"""Tests for the exception hierarchy."""

from checker_runner.core.exceptions import (
    ArtifactResolutionError,
    CheckerExecutionError,
    CheckerFailureError,
    CheckerRunnerError,
    ConfigurationError,
)


class TestExceptions:
    """Tests for error details and string rendering."""

    def test_base_without_details(self) -> None:
        error = CheckerRunnerError("boom")
        assert str(error) == "boom"
        assert error.details == {}

    def test_configuration_error_key(self) -> None:
        error = ConfigurationError("bad version", config_key="source_version")
        assert isinstance(error, CheckerRunnerError)
        assert error.details == {"config_key": "source_version"}
        assert "source_version" in str(error)

    def test_artifact_resolution_error(self) -> None:
        error = ArtifactResolutionError("no jar", coordinates="g:a:1", tier="remote")
        assert error.details == {"coordinates": "g:a:1", "tier": "remote"}

    def test_failure_error_return_code(self) -> None:
        error = CheckerFailureError("errors", return_code=2)
        assert error.return_code == 2
        assert error.details["return_code"] == 2

    def test_execution_error_command(self) -> None:
        error = CheckerExecutionError("spawn failed", command="java")
        assert error.details == {"command": "java"}
