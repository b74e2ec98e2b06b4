"""Warden CLI.

Typer application with global logging options and three commands:

    warden preflight REPO [--config FILE]
    warden validate-config FILE
    warden run REPO PROMPT_FILE [--config FILE] [--context-file FILE]
               [--description TEXT] [--agent NAME] [--no-loader] [--audit-log FILE]

Package structure:
    cli/
    ├── __init__.py     # This file - app assembly
    ├── helpers.py      # Logging state, exit codes
    ├── output.py       # Rich formatting
    └── commands/
        ├── preflight.py
        ├── run.py
        └── validate.py
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from warden import __version__

# Re-export helpers module for direct access to internal state (conftest.py needs this)
from . import helpers as helpers
from .commands import preflight, run, validate_config
from .helpers import configure_global_logging, set_log_file, set_log_format, set_log_level
from .output import console

# =============================================================================
# Typer app definition
# =============================================================================

app = typer.Typer(
    name="warden",
    help="Preflight gate and resilient LLM execution for pentest agents",
    add_completion=False,
)


# =============================================================================
# Global option callbacks
# =============================================================================


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"Warden v{__version__}")
        raise typer.Exit()


def log_level_callback(value: str | None) -> str | None:
    if value:
        set_log_level(value)
    return value


def log_file_callback(value: Path | None) -> Path | None:
    if value:
        set_log_file(value)
    return value


def log_format_callback(value: str | None) -> str | None:
    if value:
        set_log_format(value)
    return value


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            "-L",
            callback=log_level_callback,
            help="Logging level (DEBUG, INFO, WARNING, ERROR)",
            envvar="WARDEN_LOG_LEVEL",
        ),
    ] = None,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            callback=log_file_callback,
            help="Path for log file output",
            envvar="WARDEN_LOG_FILE",
        ),
    ] = None,
    log_format: Annotated[
        str | None,
        typer.Option(
            "--log-format",
            callback=log_format_callback,
            help="Log format: json, console, or both",
            envvar="WARDEN_LOG_FORMAT",
        ),
    ] = None,
) -> None:
    """Warden - preflight gate and resilient LLM execution for pentest agents."""
    configure_global_logging(console)


# =============================================================================
# Command registration
# =============================================================================

app.command()(preflight)
app.command()(run)
app.command(name="validate-config")(validate_config)


__all__ = ["app", "console", "main"]
