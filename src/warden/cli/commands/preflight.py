"""Preflight command: check a repository, config and credentials without running agents."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer

from warden.core.result import Err
from warden.execution.preflight import run_preflight_checks

from ..helpers import exit_code_for
from ..output import console, output_warden_error, preflight_hints


def preflight(
    repo: Path = typer.Argument(
        ...,
        help="Path to the target git repository",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Optional YAML configuration file to validate",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output the result as JSON",
    ),
) -> None:
    """Run the preflight checks.

    Checks run cheapest first and stop at the first failure: repository,
    configuration file (when given), then API credentials.

    Exit codes: 0 all checks passed, 1 configuration problem, 2 transient
    failure worth retrying.
    """
    outcome = asyncio.run(run_preflight_checks(repo, config))

    if isinstance(outcome, Err):
        error = outcome.error
        output_warden_error(error, hints=preflight_hints(error), json_output=json_output)
        raise typer.Exit(exit_code_for(error.retryable))

    if json_output:
        console.print_json(data={"success": True})
    else:
        console.print("[green]✓ All preflight checks passed[/green]")


__all__ = ["preflight"]
