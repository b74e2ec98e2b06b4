"""Console formatting for agent executions.

Decides how much an execution prints based on its description, and builds
the completion and failure lines shown to the operator. Lines use rich
markup; untrusted text (error messages, paths) is escaped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from rich.markup import escape

from warden.core.constants import ERROR_LOG_FILENAME, TRUNCATE_CONSOLE_ERROR_CHARS

# Agents that run side by side with siblings and share the terminal
_PARALLEL_MARKERS = ("vuln agent", "exploit agent")

# Agents whose output is kept to a single summary line
_CLEAN_OUTPUT_MARKERS = (
    "pre-recon agent",
    "recon agent",
    "report",
    "vuln agent",
    "exploit agent",
)


@dataclass(frozen=True)
class ExecutionContextInfo:
    """How an execution should present itself on the console.

    Attributes:
        is_parallel: Runs alongside sibling agents; lines get an agent prefix.
        use_clean_output: Suppress the interactive spinner.
        agent_type: Coarse agent family (pre-recon, recon, vuln, exploit, report, analysis).
        agent_key: Slug of the description, e.g. ``injection-vuln-agent``.
    """

    is_parallel: bool
    use_clean_output: bool
    agent_type: str
    agent_key: str


def _agent_type_for(lowered: str) -> str:
    if "pre-recon" in lowered:
        return "pre-recon"
    if "recon" in lowered:
        return "recon"
    if "vuln" in lowered:
        return "vuln"
    if "exploit" in lowered:
        return "exploit"
    if "report" in lowered:
        return "report"
    return "analysis"


def detect_execution_context(description: str) -> ExecutionContextInfo:
    """Infer presentation settings from an agent description."""
    lowered = description.lower()
    return ExecutionContextInfo(
        is_parallel=any(marker in lowered for marker in _PARALLEL_MARKERS),
        use_clean_output=any(marker in lowered for marker in _CLEAN_OUTPUT_MARKERS),
        agent_type=_agent_type_for(lowered),
        agent_key=re.sub(r"\s+", "-", lowered.strip()),
    )


def agent_prefix(description: str) -> str:
    """Short bracketed label for parallel output, e.g. ``[Injection]``."""
    words = description.split()
    return f"[{words[0].capitalize()}]" if words else "[Agent]"


def format_duration(duration_ms: float) -> str:
    """Format a duration in milliseconds (e.g., "850ms", "5.2s", "3m 12s", "1h 30m")."""
    if duration_ms < 1000:
        return f"{duration_ms:.0f}ms"
    seconds = duration_ms / 1000
    if seconds < 60:
        return f"{seconds:.1f}s"
    if seconds < 3600:
        return f"{int(seconds // 60)}m {int(seconds % 60)}s"
    return f"{int(seconds // 3600)}h {int((seconds % 3600) // 60)}m"


def format_completion_message(
    context: ExecutionContextInfo,
    description: str,
    turn_count: int,
    duration_ms: float,
) -> str:
    """Single line announcing a successful execution."""
    turns = f"{turn_count} turn{'s' if turn_count != 1 else ''}"
    took = format_duration(duration_ms)
    if context.is_parallel:
        return f"[green]✓ {escape(agent_prefix(description))} complete ({turns}, {took})[/green]"
    if context.use_clean_output:
        return f"[green]✓ {context.agent_type} complete ({turns}, {took})[/green]"
    return f"[green]✓ Completed: {escape(description)} ({turns}) in {took}[/green]"


def _shorten(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def format_error_output(
    error: BaseException,
    context: ExecutionContextInfo,
    description: str,
    duration_ms: float,
    source_dir: Path | str,
    retryable: bool,
) -> list[str]:
    """Lines describing a failed execution.

    Stack traces are never included; they go to the error log instead. Long
    messages (such as an HTML error page in an API response body) are
    shortened; the full text is kept in the error log.
    """
    message = _shorten(str(error), TRUNCATE_CONSOLE_ERROR_CHARS)
    took = format_duration(duration_ms)
    if context.is_parallel:
        header = f"[red]✗ {escape(agent_prefix(description))} failed ({took})[/red]"
    elif context.use_clean_output:
        header = f"[red]✗ {context.agent_type} failed ({took})[/red]"
    else:
        header = f"[red]✗ Failed: {escape(description)} ({took})[/red]"

    lines = [
        header,
        f"[dim]    Error type: {type(error).__name__}[/dim]",
        f"[dim]    Message: {escape(message)}[/dim]",
        f"[dim]    Agent: {escape(description)}[/dim]",
        f"[dim]    Working directory: {escape(str(source_dir))}[/dim]",
        f"[dim]    Retryable: {'yes' if retryable else 'no'}[/dim]",
    ]
    code = getattr(error, "code", None)
    if code is not None:
        lines.append(f"[dim]    Code: {escape(str(getattr(code, 'value', code)))}[/dim]")
    lines.append(
        f"[dim]    Details: {escape(str(Path(source_dir) / ERROR_LOG_FILENAME))}[/dim]"
    )
    return lines


__all__ = [
    "ExecutionContextInfo",
    "agent_prefix",
    "detect_execution_context",
    "format_completion_message",
    "format_duration",
    "format_error_output",
]
