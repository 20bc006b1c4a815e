"""Validate command for checking job files.

This module provides the `validate` command that checks a JSON job file
for syntax and schema errors and for parts that can never be cut.
"""

from pathlib import Path
from typing import Annotated

import typer

from cutplan.application.config import (
    ConfigError,
    ValidationResult,
    load_job,
    validate_job,
)


def validate_command(
    job_file: Annotated[
        Path,
        typer.Argument(help="Path to the JSON job file to validate"),
    ],
) -> None:
    """Validate a cut planning job file.

    Checks the job file for:
    - JSON syntax errors
    - Schema validation errors (missing fields, non-positive sizes, etc.)
    - Parts no stock can hold and insufficient total stock

    Exit codes:
        0 - Job is valid with no warnings
        1 - Job has errors
        2 - Job is valid but has warnings

    Example:
        cutplan validate kitchen.json
    """
    typer.echo(f"Validating {job_file}...")
    typer.echo()

    try:
        job = load_job(job_file)
    except ConfigError as e:
        display_load_error(e)
        raise typer.Exit(code=1)

    result = validate_job(job)
    _display_validation_result(result)
    raise typer.Exit(code=result.exit_code)


def display_load_error(error: ConfigError) -> None:
    """Display a job loading error on stderr."""
    typer.echo("Errors:", err=True)
    if error.error_type == "file_not_found":
        typer.echo(f"  File not found: {error.path}", err=True)
    elif error.error_type == "json_parse":
        typer.echo("  Invalid JSON syntax", err=True)
        for detail in error.details:
            line = detail.get("line", "?")
            column = detail.get("column", "?")
            message = detail.get("message", "Unknown error")
            typer.echo(f"    Line {line}, Column {column}: {message}", err=True)
    elif error.error_type == "validation":
        for detail in error.details:
            path = detail.get("path", "unknown")
            message = detail.get("message", "Unknown error")
            typer.echo(f"  {path}: {message}", err=True)
            value = detail.get("value")
            if value is not None and not isinstance(value, (dict, list)):
                typer.echo(f"    Value: {value!r}", err=True)
    else:
        typer.echo(f"  {error.message}", err=True)

    typer.echo()
    typer.echo("Validation failed.", err=True)


def _display_validation_result(result: ValidationResult) -> None:
    if result.errors:
        typer.echo("Errors:", err=True)
        for error in result.errors:
            typer.echo(f"  {error.path}: {error.message}", err=True)
            if error.value is not None:
                typer.echo(f"    Value: {error.value!r}", err=True)
        typer.echo()

    if result.warnings:
        typer.echo("Warnings:")
        for warning in result.warnings:
            typer.echo(f"  {warning.path}: {warning.message}")
            if warning.suggestion:
                typer.echo(f"    Suggestion: {warning.suggestion}")
        typer.echo()

    if result.errors:
        typer.echo(
            f"Validation failed: {len(result.errors)} error(s), "
            f"{len(result.warnings)} warning(s)",
            err=True,
        )
    elif result.warnings:
        typer.echo(f"Validation passed with {len(result.warnings)} warning(s)")
    else:
        typer.echo("Validation passed. Job is valid.")
