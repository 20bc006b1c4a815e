"""Typer CLI for cut planning."""

import logging
from pathlib import Path
from typing import Annotated

import typer

from cutplan.application import CutPlanner, DebugConfig
from cutplan.application.config import (
    ConfigError,
    job_to_parts,
    job_to_planner_config,
    job_to_stock,
    load_job,
)
from cutplan.cli.commands import display_load_error, validate_command
from cutplan.domain.services import available_strategies
from cutplan.infrastructure import PlanJsonFormatter, PlanReportFormatter

app = typer.Typer(
    name="cutplan",
    help="Plan how to cut parts from sheet and board stock with minimal waste.",
)

# Register validate command
app.command(name="validate")(validate_command)


def _configure_logging(verbose: bool, debug: bool) -> None:
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        return
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@app.command()
def plan(
    job_file: Annotated[
        Path,
        typer.Argument(help="Path to the JSON job file"),
    ],
    kerf: Annotated[
        float | None,
        typer.Option("--kerf", "-k", min=0.0, max=20.0, help="Saw kerf in mm (overrides the job)"),
    ] = None,
    strategy: Annotated[
        list[str] | None,
        typer.Option(
            "--strategy",
            "-s",
            help=f"Packing strategy to try; repeatable. One of: {', '.join(available_strategies())}",
        ),
    ] = None,
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: text or json"),
    ] = "text",
    output_file: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the report to this file"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log planning progress"),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Log every placement decision"),
    ] = False,
) -> None:
    """Plan cuts for a job file and print the report.

    Exit codes:
        0 - All parts placed
        1 - Job file or option error
        2 - Plan is partial or infeasible

    Example:
        cutplan plan kitchen.json --kerf 3.2 --strategy best-fit
    """
    _configure_logging(verbose, debug)

    if output_format not in ("text", "json"):
        typer.echo(f"Unknown format: {output_format}. Use 'text' or 'json'.", err=True)
        raise typer.Exit(code=1)

    try:
        job = load_job(job_file)
    except ConfigError as e:
        display_load_error(e)
        raise typer.Exit(code=1)

    try:
        config = job_to_planner_config(
            job,
            strategies=strategy or None,
            debug=DebugConfig.all() if debug else None,
        )
        planner = CutPlanner(config)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    parts = job_to_parts(job)
    result = planner.plan(job_to_stock(job), parts, job.kerf if kerf is None else kerf)

    if output_format == "json":
        report = PlanJsonFormatter().format(result)
    else:
        report = PlanReportFormatter(parts).format(result)

    if output_file is not None:
        output_file.write_text(report, encoding="utf-8")
        typer.echo(f"Report written to {output_file}")
    else:
        typer.echo(report)

    raise typer.Exit(code=0 if result.success else 2)


if __name__ == "__main__":
    app()
