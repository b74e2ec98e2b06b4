"""Shared utilities for Warden CLI commands.

- Global logging options (level, file, format) captured by the app
  callback and applied once per session.
- Exit codes shared by all commands.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

import typer
from rich.console import Console

from warden.core.logging import configure_logging, get_logger

_logger = get_logger("cli")


# =============================================================================
# Exit codes
# =============================================================================

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_RETRYABLE = 2
"""Failure the caller may retry after backoff (network, billing)."""


def exit_code_for(retryable: bool) -> int:
    return EXIT_RETRYABLE if retryable else EXIT_FAILURE


# =============================================================================
# Logging configuration
# =============================================================================


@dataclass
class CliLoggingConfig:
    """CLI logging configuration state set by the global options."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    file: Path | None = None
    format: Literal["json", "console", "both"] = "console"
    configured: bool = False


_log_config = CliLoggingConfig()


def get_log_level() -> str:
    return _log_config.level


def set_log_level(level: str) -> None:
    """Set the log level.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR).

    Raises:
        typer.BadParameter: If the level is not recognized.
    """
    normalized = level.upper()
    if normalized not in ("DEBUG", "INFO", "WARNING", "ERROR"):
        raise typer.BadParameter(f"Unknown log level: {level}")
    _log_config.level = normalized  # type: ignore[assignment]


def get_log_file() -> Path | None:
    return _log_config.file


def set_log_file(path: Path | None) -> None:
    _log_config.file = path


def get_log_format() -> str:
    return _log_config.format


def set_log_format(fmt: str) -> None:
    """Set the log format.

    Args:
        fmt: Log format string (json, console, both).

    Raises:
        typer.BadParameter: If the format is not recognized.
    """
    normalized = fmt.lower()
    if normalized not in ("json", "console", "both"):
        raise typer.BadParameter(f"Unknown log format: {fmt}")
    _log_config.format = normalized  # type: ignore[assignment]


def configure_global_logging(console: Console) -> None:
    """Apply the global logging options once per session.

    Args:
        console: Rich console for error output.

    Raises:
        typer.Exit: If logging configuration fails.
    """
    if _log_config.configured:
        return

    try:
        configure_logging(
            level=_log_config.level,
            format=_log_config.format,
            file_path=_log_config.file,
        )
        _log_config.configured = True
    except ValueError as e:
        # e.g. format="both" without a log file
        console.print(f"[red]Logging configuration error:[/red] {e}")
        raise typer.Exit(EXIT_FAILURE) from None


def reset_logging_state() -> None:
    """Reset logging state (primarily for testing)."""
    _log_config.level = "WARNING"
    _log_config.file = None
    _log_config.format = "console"
    _log_config.configured = False


__all__ = [
    "EXIT_FAILURE",
    "EXIT_OK",
    "EXIT_RETRYABLE",
    "CliLoggingConfig",
    "configure_global_logging",
    "exit_code_for",
    "get_log_file",
    "get_log_format",
    "get_log_level",
    "reset_logging_state",
    "set_log_file",
    "set_log_format",
    "set_log_level",
]
