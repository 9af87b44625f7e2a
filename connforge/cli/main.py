#!/usr/bin/env python3
"""connforge CLI.

Generates Python job modules from YAML job definitions:

    connforge generate jobs/load_orders.yml -o build/load_orders.py
    connforge plan jobs/load_orders.yml
    connforge validate jobs/load_orders.yml --var db_host=prod-db
"""

import os
from typing import List, Optional

import typer
from rich.console import Console

from connforge.cli.display import (
    display_cli_error,
    display_config_error,
    display_generation_success,
    display_generic_error,
    display_job_plan,
    display_validation_error,
    display_validation_result,
)
from connforge.cli.errors import (
    ConnforgeCLIError,
    InvalidVariableError,
    JobFileNotFoundError,
    JobValidationError,
)
from connforge.codegen.generator import JobGenerator
from connforge.config.loader import load_job
from connforge.config.models import JobDefinition
from connforge.config.variables import parse_assignments
from connforge.exceptions import ConnforgeError
from connforge.logging import configure_logging, get_logger
from connforge.validation import validate_job

logger = get_logger(__name__)
console = Console()

app = typer.Typer(
    name="connforge",
    help="connforge - generate database connection code for pipeline jobs",
    add_completion=False,
)

VAR_OPTION_HELP = "Variable override as KEY=VALUE (repeatable)"


def _version_callback(value: bool) -> None:
    if value:
        from connforge import __version__

        console.print(f"connforge v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show warnings and errors"),
) -> None:
    """connforge - generate database connection code for pipeline jobs."""
    configure_logging(verbose=verbose, quiet=quiet)


def _load(job_file: str, variables: Optional[List[str]]) -> JobDefinition:
    """Load a job file, turning every failure into a displayed error and exit 1."""
    try:
        if not os.path.exists(job_file):
            raise JobFileNotFoundError(job_file)
        try:
            overrides = parse_assignments(variables or [])
        except ValueError:
            bad = next(v for v in variables or [] if "=" not in v)
            raise InvalidVariableError(bad)
        return load_job(job_file, variables=overrides)
    except ConnforgeCLIError as e:
        display_cli_error(e)
        raise typer.Exit(1)
    except ConnforgeError as e:
        display_config_error(e)
        raise typer.Exit(1)


@app.command()
def generate(
    job_file: str = typer.Argument(..., help="YAML job definition"),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Write the module here instead of stdout"
    ),
    var: Optional[List[str]] = typer.Option(None, "--var", help=VAR_OPTION_HELP),
) -> None:
    """Generate the Python module implementing a job."""
    job = _load(job_file, var)
    try:
        code = JobGenerator().generate(job)
    except ConnforgeError as e:
        display_config_error(e)
        raise typer.Exit(1)

    if output is None:
        typer.echo(code, nl=False)
        return

    try:
        directory = os.path.dirname(os.path.abspath(output))
        os.makedirs(directory, exist_ok=True)
        with open(output, "w", encoding="utf-8") as handle:
            handle.write(code)
    except OSError as e:
        display_generic_error(e, "writing generated module")
        logger.error(f"Failed to write {output}: {e}")
        raise typer.Exit(1)

    display_generation_success(job.name, len(job.stages), output)
    logger.info(f"Generated job '{job.name}' into {output}")


@app.command()
def plan(
    job_file: str = typer.Argument(..., help="YAML job definition"),
    var: Optional[List[str]] = typer.Option(None, "--var", help=VAR_OPTION_HELP),
) -> None:
    """Show the acquisition mode and strategy chosen for each stage."""
    job = _load(job_file, var)
    display_job_plan(job)


@app.command()
def validate(
    job_file: str = typer.Argument(..., help="YAML job definition"),
    var: Optional[List[str]] = typer.Option(None, "--var", help=VAR_OPTION_HELP),
) -> None:
    """Check a job for configurations that would generate broken code.

    Generation never runs these checks itself.
    """
    job = _load(job_file, var)
    result = validate_job(job)
    display_validation_result(job.name, result)
    if not result.is_valid:
        display_validation_error(JobValidationError(job.name, result.errors))
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
