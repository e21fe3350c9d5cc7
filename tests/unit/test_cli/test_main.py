"""Tests for CLI main module."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from checker_runner.cli.main import main
from checker_runner.core.exceptions import CheckerFailureError, ConfigurationError
from checker_runner.planner.planner import CheckResult

NULLNESS = "org.checkerframework.checker.nullness.NullnessChecker"


@pytest.fixture
def config_file(temp_dir: Path, local_repo: Path) -> Path:
    """YAML configuration pointing at an empty local repository, offline."""
    path = temp_dir / "checker-runner.yaml"
    path.write_text(
        f"repository:\n  local: {local_repo}\n  offline: true\n"
    )
    return path


class TestMainCommand:
    """Test main CLI command."""

    def test_version_flag(self) -> None:
        """Test version flag."""
        runner = CliRunner()
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_no_command_shows_help(self) -> None:
        runner = CliRunner()
        result = runner.invoke(main, [])
        assert result.exit_code == 0
        assert "check" in result.output
        assert "inspect" in result.output

    def test_invalid_config_values(self, temp_dir: Path, sample_project: Path) -> None:
        """Test bad configuration values are reported without a traceback."""
        config = temp_dir / "bad.yaml"
        config.write_text("checker:\n  timeout: 0\n")

        runner = CliRunner()
        result = runner.invoke(main, ["--config", str(config), "check", str(sample_project)])

        assert result.exit_code == 1
        assert "Configuration Error" in result.output
        assert not isinstance(result.exception, ConfigurationError)


class TestCheckCommand:
    """Test check subcommand."""

    @patch("checker_runner.cli.main.probe_java_version", new_callable=AsyncMock)
    @patch("checker_runner.cli.main.InvocationPlanner")
    def test_check_success(
        self,
        mock_planner_cls: MagicMock,
        mock_java_version: AsyncMock,
        sample_project: Path,
        config_file: Path,
    ) -> None:
        """Test options from POM and command line reach the planner."""
        mock_java_version.return_value = "17.0.2"
        mock_planner_cls.return_value.run = AsyncMock(
            return_value=CheckResult(success=True, command="java ...")
        )

        runner = CliRunner()
        result = runner.invoke(
            main,
            ["--config", str(config_file), "check", str(sample_project), "--fail-on-error", "--extra-arg=-Alint"],
        )

        assert result.exit_code == 0, result.output
        context, options, resolver = mock_planner_cls.call_args.args
        assert context.java_version == "17.0.2"
        assert options.processors == [NULLNESS]
        assert options.fail_on_error is True
        assert options.extra_args == ["-Alint"]
        assert "remote" not in [tier.name for tier in resolver.tiers]

    @patch("checker_runner.cli.main.probe_java_version", new_callable=AsyncMock)
    @patch("checker_runner.cli.main.InvocationPlanner")
    def test_check_failure_exit_code(
        self,
        mock_planner_cls: MagicMock,
        mock_java_version: AsyncMock,
        sample_project: Path,
        config_file: Path,
    ) -> None:
        mock_java_version.return_value = "17"
        mock_planner_cls.return_value.run = AsyncMock(
            side_effect=CheckerFailureError("Checker Framework found errors.", return_code=1)
        )

        runner = CliRunner()
        result = runner.invoke(main, ["--config", str(config_file), "check", str(sample_project)])

        assert result.exit_code == 1

    @patch("checker_runner.cli.main.probe_java_version", new_callable=AsyncMock)
    @patch("checker_runner.cli.main.InvocationPlanner")
    def test_check_configuration_error(
        self,
        mock_planner_cls: MagicMock,
        mock_java_version: AsyncMock,
        sample_project: Path,
        config_file: Path,
    ) -> None:
        mock_java_version.return_value = None
        mock_planner_cls.return_value.run = AsyncMock(
            side_effect=ConfigurationError("Unable to determine the Java runtime version")
        )

        runner = CliRunner()
        result = runner.invoke(main, ["--config", str(config_file), "check", str(sample_project)])

        assert result.exit_code == 1

    def test_check_missing_pom(self, temp_dir: Path, config_file: Path) -> None:
        project = temp_dir / "empty"
        project.mkdir()
        runner = CliRunner()
        result = runner.invoke(main, ["--config", str(config_file), "check", str(project)])
        assert result.exit_code == 1

    @patch("checker_runner.cli.main.probe_java_version", new_callable=AsyncMock)
    def test_check_skip(self, mock_java_version: AsyncMock, sample_project: Path, config_file: Path) -> None:
        """Test a skipped run exits cleanly without spawning the compiler."""
        mock_java_version.return_value = "17"
        runner = CliRunner()
        result = runner.invoke(
            main, ["--config", str(config_file), "check", str(sample_project), "--skip"]
        )
        assert result.exit_code == 0, result.output
        assert "Skipped" in result.output


class TestInspectCommand:
    """Test inspect subcommand."""

    @patch("checker_runner.cli.main.probe_java_version", new_callable=AsyncMock)
    def test_inspect(self, mock_java_version: AsyncMock, sample_project: Path, config_file: Path) -> None:
        """Test the plan summary is printed without running the compiler."""
        mock_java_version.return_value = "1.8.0_292"
        runner = CliRunner()
        result = runner.invoke(
            main, ["--config", str(config_file), "inspect", str(sample_project), "--offline"]
        )

        assert result.exit_code == 0, result.output
        assert "Checker Plan" in result.output
        assert "3.42.0" in result.output
        assert "Runtime Version" in result.output
