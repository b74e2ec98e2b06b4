"""Rich output formatting for the Warden CLI.

Shared console, error output with hints, and summary panels for preflight
and prompt runs. Structured logs go to stderr via structlog; everything
here is operator-facing output.
"""

from __future__ import annotations

import json
from typing import Any, Literal

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from warden.core.errors import ErrorCode, WardenError
from warden.execution.executor import PromptFailure, PromptResult, PromptSuccess
from warden.execution.output import format_duration

# =============================================================================
# Shared console instance
# =============================================================================

console = Console()


# Remediation hints for preflight failures by code
_PREFLIGHT_HINTS: dict[ErrorCode | None, list[str]] = {
    ErrorCode.REPO_NOT_FOUND: [
        "Point REPO at a directory containing a .git checkout",
    ],
    ErrorCode.CONFIG_VALIDATION_FAILED: [
        "Run 'warden validate-config <file>' to see every schema error",
    ],
    ErrorCode.AUTH_FAILED: [
        "Set OPENAI_API_KEY in the environment or .env",
        "Check that the key is active and has access to OPENAI_MODEL",
    ],
    None: [
        "Check network connectivity and retry",
    ],
}


def preflight_hints(error: WardenError) -> list[str]:
    return list(_PREFLIGHT_HINTS.get(error.code, []))


def output_error(
    message: str,
    *,
    error_code: str | None = None,
    hints: list[str] | None = None,
    severity: Literal["error", "warning"] = "error",
    json_output: bool = False,
    console_instance: Console | None = None,
    **json_extras: Any,
) -> None:
    """Output a formatted error/warning with optional hints and JSON alternative.

    Args:
        message: The error message to display.
        error_code: Optional error code (e.g., "AUTH_FAILED").
        hints: Optional list of hint strings for the user.
        severity: "error" (red) or "warning" (yellow).
        json_output: If True, output as JSON instead of Rich markup.
        console_instance: Console to print to. Defaults to module console.
        **json_extras: Extra key-value pairs included in JSON output only.
    """
    out = console_instance or console
    color = "red" if severity == "error" else "yellow"
    label = "Error" if severity == "error" else "Warning"

    if json_output:
        result: dict[str, Any] = {"success": False, "message": message}
        if error_code:
            result["error_code"] = error_code
        if hints:
            result["hints"] = hints
        result.update(json_extras)
        out.print_json(json.dumps(result))
        return

    if error_code:
        prefix = f"[{color}]{label} {escape(f'[{error_code}]')}:[/{color}] "
    else:
        prefix = f"[{color}]{label}:[/{color}] "
    out.print(f"{prefix}{escape(message)}")

    if hints:
        out.print()
        out.print("[dim]Hints:[/dim]")
        for hint in hints:
            out.print(f"  - {escape(hint)}")


def output_warden_error(
    error: WardenError,
    *,
    hints: list[str] | None = None,
    json_output: bool = False,
    console_instance: Console | None = None,
) -> None:
    """Print a classified error, including category and retryability."""
    output_error(
        error.message,
        error_code=error.code.value if error.code else None,
        hints=hints,
        json_output=json_output,
        console_instance=console_instance,
        category=error.category.value,
        retryable=error.retryable,
    )


def create_simple_table(show_header: bool = False) -> Table:
    """Create a table without box styling for key-value displays."""
    return Table(show_header=show_header, box=None)


def create_run_summary_panel(result: PromptResult, description: str) -> Panel:
    """Summarize a prompt execution.

    Args:
        result: Outcome of ``run_prompt``.
        description: Agent description used for the run.

    Returns:
        Panel with green border for success, yellow for retryable failure,
        red otherwise.
    """
    table = create_simple_table()
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Agent", escape(description))
    table.add_row("Duration", format_duration(result.duration_ms))
    table.add_row("Cost", f"${result.cost:.2f}")

    if isinstance(result, PromptSuccess):
        table.add_row("Status", "[green]SUCCESS[/green]")
        table.add_row("Model", escape(result.model))
        table.add_row("Turns", str(result.turn_count))
        if result.tokens_used is not None:
            table.add_row("Tokens", str(result.tokens_used))
        if result.api_error_detected:
            table.add_row("Warning", "[yellow]response looks like an API error[/yellow]")
        border = "green"
    else:
        table.add_row("Status", "[red]FAILED[/red]")
        table.add_row("Error", escape(f"{result.error_type}: {result.error_message}"))
        table.add_row("Category", result.category.value)
        table.add_row("Retryable", "yes" if result.retryable else "no")
        border = "yellow" if result.retryable else "red"

    return Panel(table, title="Run Summary", border_style=border)


def result_to_dict(result: PromptResult) -> dict[str, Any]:
    """JSON-serializable view of a prompt result."""
    if isinstance(result, PromptFailure):
        return {
            "success": False,
            "error": result.error_message,
            "error_type": result.error_type,
            "prompt": result.prompt_preview,
            "duration_ms": result.duration_ms,
            "cost": result.cost,
            "retryable": result.retryable,
            "category": result.category.value,
        }
    return {
        "success": True,
        "result": result.result_text,
        "duration_ms": result.duration_ms,
        "turns": result.turn_count,
        "cost": result.cost,
        "model": result.model,
        "partial_cost": result.partial_cost,
        "api_error_detected": result.api_error_detected,
        "tokens_used": result.tokens_used,
    }


__all__ = [
    "console",
    "create_run_summary_panel",
    "create_simple_table",
    "output_error",
    "output_warden_error",
    "preflight_hints",
    "result_to_dict",
]
