"""Display components for CLI using Rich."""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from checker_runner.models.build import BuildContext
from checker_runner.planner.planner import CheckResult, PlanningContext
from checker_runner.planner.resolver import ResolvedArtifact

console = Console()


def show_success(title: str, message: str) -> None:
    """Display a success message."""
    console.print()
    console.print(
        Panel(
            f"[bold green]{escape(message)}[/]",
            title=f"[bold]{escape(title)}[/]",
            border_style="green",
        )
    )


def show_error(title: str, message: str) -> None:
    """Display an error message."""
    console.print()
    console.print(
        Panel(
            f"[bold red]{escape(message)}[/]",
            title=f"[bold]{escape(title)}[/]",
            border_style="red",
        )
    )


def show_info(title: str, message: str) -> None:
    """Display an info message."""
    console.print()
    console.print(
        Panel(
            escape(message),
            title=f"[bold]{escape(title)}[/]",
            border_style="blue",
        )
    )


def _flag(value: bool) -> str:
    return "[green]yes[/]" if value else "[dim]no[/]"


def _artifact_row(artifact: ResolvedArtifact | None) -> str:
    if artifact is None:
        return "[dim]not needed[/]"
    if artifact.file is None:
        return f"[red]missing[/] {escape(artifact.coordinates)}"
    return f"{escape(str(artifact.file))} [dim]({artifact.source})[/]"


def show_check_result(result: CheckResult) -> None:
    """Display the outcome of a checker run.

    Args:
        result: Result returned by the planner.
    """
    if result.skipped:
        show_info("Skipped", result.skip_reason or "Checker run skipped")
        return

    table = Table(title="[bold]Checker Result[/]", show_header=False, box=None)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")

    if result.return_code == 0:
        table.add_row("Status", "[bold green]PASSED[/]")
    else:
        table.add_row("Status", "[bold yellow]ERRORS (tolerated)[/]")
    table.add_row("Exit Code", str(result.return_code))
    table.add_row("Errors", str(len(result.error_lines)))
    table.add_row("Duration", f"{result.duration_seconds:.1f}s")

    console.print()
    console.print(Panel(table, border_style="green" if result.return_code == 0 else "yellow"))


def show_inspection(context: BuildContext, planning: PlanningContext) -> None:
    """Display what a checker run would do, without running it.

    Args:
        context: Loaded build context.
        planning: Prepared planning context.
    """
    table = Table(title="[bold]Checker Plan[/]", show_header=False, box=None)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Project", escape(str(context.base_dir)))
    table.add_row("Packaging", context.packaging)
    table.add_row("Executable", escape(planning.executable))

    table.add_section()
    table.add_row("Source Version", str(planning.versions.source_version))
    table.add_row("Runtime Version", str(planning.versions.runtime_version))
    table.add_row("Checker Version", planning.checker_version)

    table.add_section()
    decision = planning.decision
    table.add_row("Module Flags", _flag(decision.needs_module_visibility_flags))
    table.add_row("Alternate Frontend", _flag(decision.needs_alternate_frontend))
    table.add_row("Annotated JDK", _flag(decision.needs_annotated_stdlib))

    table.add_section()
    for artifact in planning.processor_path.found + planning.processor_path.missing:
        table.add_row(artifact.name, _artifact_row(artifact))
    if decision.needs_alternate_frontend:
        table.add_row("Frontend Jar", _artifact_row(planning.alternate_frontend))
    if decision.needs_annotated_stdlib:
        table.add_row("Annotated JDK Jar", _artifact_row(planning.annotated_stdlib))

    table.add_section()
    lombok = planning.lombok
    table.add_row("Lombok", _flag(lombok.is_used))
    if lombok.is_used:
        table.add_row(
            "Delombok Output",
            escape(str(lombok.delombok_output_dir)) if lombok.has_delombok_output else "[yellow]not found[/]",
        )
    table.add_row("Source Files", str(len(planning.source_files)))
    if planning.extra_args:
        table.add_row("Extra Args", escape(" ".join(planning.extra_args)))

    console.print()
    console.print(Panel(table, border_style="cyan"))
