"""Validate-config command: parse and schema-check a configuration file."""

from __future__ import annotations

from pathlib import Path

import typer

from warden.core.config import distribute_config, parse_config
from warden.core.result import Err

from ..helpers import EXIT_FAILURE
from ..output import console, create_simple_table, output_warden_error


def validate_config(
    config_file: Path = typer.Argument(
        ...,
        help="Path to YAML configuration file",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output validation result as JSON",
    ),
) -> None:
    """Validate a configuration file.

    Reports YAML syntax errors and every schema violation. Exits 0 when the
    file is valid, 1 otherwise.
    """
    parsed = parse_config(config_file)
    if isinstance(parsed, Err):
        output_warden_error(parsed.error, json_output=json_output)
        raise typer.Exit(EXIT_FAILURE)

    config = parsed.value
    distributed = distribute_config(config)

    if json_output:
        console.print_json(
            data={
                "success": True,
                "config": config.model_dump(mode="json", exclude={"authentication": {"credentials"}}),
            }
        )
        return

    console.print(f"[green]✓ Configuration is valid:[/green] {config_file}")
    table = create_simple_table()
    table.add_column("Section", style="bold")
    table.add_column("Summary")
    table.add_row("Avoid rules", str(len(distributed.avoid)))
    table.add_row("Focus rules", str(len(distributed.focus)))
    auth = distributed.authentication
    table.add_row(
        "Authentication",
        f"{auth.login_type} via {auth.login_url}" if auth else "none",
    )
    if config.pipeline is not None:
        table.add_row("Retry preset", config.pipeline.retry_preset)
        table.add_row("Max concurrent pipelines", str(config.pipeline.max_concurrent_pipelines))
    console.print(table)


__all__ = ["validate_config"]
