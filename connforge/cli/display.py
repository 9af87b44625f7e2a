"""Rich display functions for the connforge CLI."""

from rich.console import Console
from rich.table import Table

from connforge.cli.errors import ConnforgeCLIError, JobValidationError
from connforge.codegen.config_view import ConfigView
from connforge.codegen.planner import select_mode
from connforge.codegen.strategies import select_strategy
from connforge.config.models import CONNECTION, JobDefinition
from connforge.exceptions import ConnforgeError
from connforge.validation import ValidationResult

console = Console()


def display_generation_success(job_name: str, stage_count: int, output_path: str) -> None:
    """Display successful generation of a job module.

    Args:
        job_name: Name of the generated job
        stage_count: Number of stages emitted
        output_path: File the module was written to
    """
    console.print("✅ [bold green]Job generated successfully[/bold green]")

    table = Table(show_header=True, header_style="bold blue")
    table.add_column("Property", style="cyan", width=12)
    table.add_column("Value", style="white")
    table.add_row("Job", job_name)
    table.add_row("Stages", str(stage_count))
    table.add_row("Output", output_path)
    console.print(table)


def display_job_plan(job: JobDefinition) -> None:
    """Show how each stage of ``job`` will be generated."""
    table = Table(show_header=True, header_style="bold blue")
    table.add_column("#", style="dim", width=3)
    table.add_column("Stage", style="cyan")
    table.add_column("Kind", style="white")
    table.add_column("Component", style="white")
    table.add_column("Acquisition", style="green")
    table.add_column("Strategy", style="green")

    for index, stage in enumerate(job.stages, 1):
        view = ConfigView(stage, job.globals)
        if stage.kind == CONNECTION:
            mode = select_mode(view).value
            strategy = select_strategy(view).name
        else:
            mode = f"reuse {view.get('connection') or '?'}"
            strategy = "-"
        table.add_row(str(index), stage.cid, stage.kind, stage.component_name, mode, strategy)

    logging_state = "enabled" if job.globals.log_enabled else "disabled"
    console.print(
        f"📋 [bold blue]Job '{job.name}'[/bold blue] (structured logging {logging_state})"
    )
    console.print(table)


def display_validation_result(job_name: str, result: ValidationResult) -> None:
    """Display the outcome of opt-in validation."""
    if result.warnings:
        console.print("⚠️  [bold yellow]Warnings:[/bold yellow]")
        for warning in result.warnings:
            console.print(f"  • {warning}")

    if result.is_valid:
        console.print(f"✅ [bold green]Job '{job_name}' is valid[/bold green]")


def display_validation_error(error: JobValidationError) -> None:
    console.print(f"❌ [bold red]{error.message}[/bold red]")
    if error.errors:
        console.print("\n📋 [yellow]Issues found:[/yellow]")
        for i, err in enumerate(error.errors, 1):
            console.print(f"  {i}. [red]{err}[/red]")


def display_cli_error(error: ConnforgeCLIError) -> None:
    console.print(f"❌ [bold red]{error.message}[/bold red]")
    if error.suggestions:
        console.print("💡 [bold yellow]Suggestions:[/bold yellow]")
        for suggestion in error.suggestions:
            console.print(f"   • {suggestion}")


def display_config_error(error: ConnforgeError) -> None:
    """Display a job loading error with its context."""
    console.print(f"❌ [bold red]{error.message}[/bold red]")
    if error.context:
        console.print("📊 [bold blue]Context:[/bold blue]")
        for key, value in error.context.items():
            if isinstance(value, list):
                value = ", ".join(map(str, value))
            console.print(f"   {key}: {value}")


def display_generic_error(error: Exception, context: str = "") -> None:
    """Display generic error with context.

    Args:
        error: Exception that occurred
        context: Optional context about where the error occurred
    """
    context_text = f" during {context}" if context else ""
    console.print(f"❌ [bold red]Error{context_text}[/bold red]")
    console.print(f"🔍 [dim]{str(error)}[/dim]")

