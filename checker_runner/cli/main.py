"""Main CLI entry point for checker-runner."""

import asyncio
import dataclasses
import sys
from pathlib import Path
from typing import Any

import click

from checker_runner.cli.display import (
    console,
    show_check_result,
    show_error,
    show_inspection,
    show_success,
)
from checker_runner.core.config.settings import Settings
from checker_runner.core.exceptions import (
    CheckerExecutionError,
    CheckerFailureError,
    ConfigurationError,
)
from checker_runner.core.logger.logger import get_logger, setup_logging
from checker_runner.models.build import BuildContext
from checker_runner.models.options import CheckerOptions
from checker_runner.planner.planner import InvocationPlanner, default_resolver, resolve_executable
from checker_runner.project.pom import load_build_context, probe_java_version, read_plugin_options

logger = get_logger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def checker_options(func):
    """Options shared by commands that plan a checker run."""
    decorators = [
        click.argument(
            "project_dir",
            default=".",
            type=click.Path(exists=True, file_okay=False, path_type=Path),
        ),
        click.option("--processor", "-p", "processors", multiple=True, help="Checker class (repeatable)"),
        click.option("--checker-version", help="Checker Framework version"),
        click.option("--extra-arg", "-A", "extra_args", multiple=True, help="Extra compiler argument (repeatable)"),
        click.option("--skip/--no-skip", default=None, help="Skip the checker run"),
        click.option("--proc-only/--no-proc-only", default=None, help="Only run annotation processing"),
        click.option("--fail-on-error/--no-fail-on-error", default=None, help="Fail when the checker reports errors"),
        click.option("--exclude-tests/--include-tests", default=None, help="Do not check test sources"),
        click.option(
            "--suppress-lombok-warnings/--no-suppress-lombok-warnings",
            default=None,
            help="Suppress known false positives in Lombok code",
        ),
        click.option("--executable", "-e", help="Java launcher (default: java)"),
        click.option("--include", "includes", multiple=True, help="Source inclusion pattern (repeatable)"),
        click.option("--exclude", "excludes", multiple=True, help="Source exclusion pattern (repeatable)"),
        click.option("--java-home", type=click.Path(file_okay=False, path_type=Path), help="JDK used as toolchain"),
        click.option("--timeout", type=click.IntRange(min=1), help="Compiler timeout in seconds"),
        click.option("--offline", is_flag=True, default=False, help="Never download artifacts"),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


def _cli_overrides(params: dict[str, Any]) -> dict[str, Any]:
    keys = (
        "processors",
        "checker_version",
        "extra_args",
        "skip",
        "proc_only",
        "fail_on_error",
        "exclude_tests",
        "suppress_lombok_warnings",
        "executable",
        "includes",
        "excludes",
        "java_home",
        "timeout",
    )
    return {key: list(params[key]) if isinstance(params[key], tuple) else params[key] for key in keys}


async def prepare_run(
    project_dir: Path,
    settings: Settings,
    overrides: dict[str, Any],
) -> tuple[BuildContext, CheckerOptions]:
    """Load the project and merge options.

    Priority: command line > POM plugin configuration > settings.

    Args:
        project_dir: Maven project directory.
        settings: Runner settings.
        overrides: Option values given on the command line.

    Returns:
        Tuple of (build context, effective options).
    """
    if overrides.get("java_home") is not None:
        checker = settings.checker.merged_with({"java_home": overrides["java_home"]})
        settings = settings.model_copy(update={"checker": checker})

    context = load_build_context(project_dir, settings)
    options = settings.checker.merged_with(read_plugin_options(context)).merged_with(overrides)
    logger.debug(f"Effective checker options: {options.model_dump()}")

    java_version = await probe_java_version(resolve_executable(options.executable, context))
    context = dataclasses.replace(context, java_version=java_version)
    return context, options


@click.group(invoke_without_command=True)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML configuration file",
)
@click.option("--log-level", type=click.Choice(LOG_LEVELS, case_sensitive=False), help="Log level")
@click.pass_context
def main(ctx: click.Context, version: bool, config_path: Path | None, log_level: str | None) -> None:
    """checker-runner - run the Checker Framework on a Maven project."""
    if version:
        from checker_runner import __version__

        click.echo(f"checker-runner version {__version__}")
        return

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        return

    try:
        settings = Settings.load(config_path)
    except ConfigurationError as e:
        show_error("Configuration Error", str(e))
        sys.exit(1)

    if log_level:
        settings.logging.level = log_level.upper()
    setup_logging(settings.logging)
    ctx.obj = settings


@main.command()
@checker_options
@click.pass_obj
def check(settings: Settings, project_dir: Path, offline: bool, **params: Any) -> None:
    """Run the configured checkers on a Maven project.

    Example:
        checker-runner check . -p org.checkerframework.checker.nullness.NullnessChecker
    """

    async def _check():
        context, options = await prepare_run(project_dir, settings, _cli_overrides(params))
        planner = InvocationPlanner(context, options, default_resolver(context, settings.repository, offline))
        return await planner.run()

    try:
        result = asyncio.run(_check())
    except CheckerFailureError as e:
        show_error("Checker Failed", e.message)
        sys.exit(1)
    except ConfigurationError as e:
        show_error("Configuration Error", str(e))
        sys.exit(1)
    except CheckerExecutionError as e:
        show_error("Execution Error", str(e))
        sys.exit(1)

    show_check_result(result)
    if not result.skipped and result.return_code == 0:
        show_success("Check Complete", "No type-checking errors found.")


@main.command()
@checker_options
@click.pass_obj
def inspect(settings: Settings, project_dir: Path, offline: bool, **params: Any) -> None:
    """Show the versions, artifacts and sources a check would use.

    Nothing is compiled.
    """

    async def _inspect():
        context, options = await prepare_run(project_dir, settings, _cli_overrides(params))
        planner = InvocationPlanner(context, options, default_resolver(context, settings.repository, offline))
        reason = planner.skip_reason()
        return context, await planner.prepare(), reason

    try:
        context, planning, reason = asyncio.run(_inspect())
    except ConfigurationError as e:
        show_error("Configuration Error", str(e))
        sys.exit(1)

    show_inspection(context, planning)
    if reason:
        console.print(f"[yellow]A check would be skipped: {reason}[/]")


if __name__ == "__main__":
    main()
