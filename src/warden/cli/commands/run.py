"""Run command: preflight a repository, then execute one agent prompt."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console

from warden.core.config import ExecutorOptions
from warden.execution.audit import JsonlAuditSession
from warden.execution.executor import PromptExecutor, PromptFailure
from warden.execution.pipeline import AgentStep, PipelineReport, PipelineRunner

from ..helpers import EXIT_FAILURE, EXIT_OK, exit_code_for
from ..output import (
    console,
    create_run_summary_panel,
    output_error,
    output_warden_error,
    preflight_hints,
    result_to_dict,
)


def _read_text(path: Path, label: str, json_output: bool) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        output_error(f"Cannot read {label} {path}: {e}", json_output=json_output)
        raise typer.Exit(EXIT_FAILURE) from None


def run(
    repo: Path = typer.Argument(
        ...,
        help="Path to the target git repository (agent working directory)",
    ),
    prompt_file: Path = typer.Argument(
        ...,
        help="File containing the agent prompt",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML configuration file validated during preflight",
    ),
    context_file: Path | None = typer.Option(
        None,
        "--context-file",
        help="File whose contents are placed before the prompt",
    ),
    description: str = typer.Option(
        "LLM analysis",
        "--description",
        "-d",
        help="Agent description shown in progress output",
    ),
    agent: str | None = typer.Option(
        None,
        "--agent",
        "-a",
        help="Agent name used for logging and output validation",
    ),
    no_loader: bool = typer.Option(
        False,
        "--no-loader",
        help="Disable the spinner and print periodic heartbeat lines instead",
    ),
    audit_log: Path | None = typer.Option(
        None,
        "--audit-log",
        help="Append audit records (responses, errors) to this JSONL file",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output the result as JSON",
    ),
) -> None:
    """Execute one prompt against the target repository.

    Preflight checks run first; nothing is sent for the prompt if any fails.

    Exit codes: 0 success, 1 failure, 2 retryable failure.
    """
    prompt = _read_text(prompt_file, "prompt file", json_output)
    context = _read_text(context_file, "context file", json_output) if context_file else ""

    step = AgentStep(
        name=agent or prompt_file.stem,
        prompt=prompt,
        description=description,
        context=context,
    )
    options = ExecutorOptions(disable_loader=no_loader or json_output)

    report = asyncio.run(_run_step(repo, step, config, options, audit_log, json_output))
    raise typer.Exit(_report_exit_code(report, step, json_output))


async def _run_step(
    repo: Path,
    step: AgentStep,
    config: Path | None,
    options: ExecutorOptions,
    audit_log: Path | None,
    json_output: bool,
) -> PipelineReport:
    audit_session = JsonlAuditSession(audit_log, agent=step.name) if audit_log else None
    # Progress output would corrupt JSON on stdout
    executor_console = console if not json_output else Console(quiet=True)
    async with PromptExecutor(options=options, console=executor_console) as executor:
        runner = PipelineRunner(executor)
        return await runner.run(repo, [step], config_path=config, audit_session=audit_session)


def _report_exit_code(report: PipelineReport, step: AgentStep, json_output: bool) -> int:
    if report.preflight_error is not None:
        error = report.preflight_error
        output_warden_error(error, hints=preflight_hints(error), json_output=json_output)
        return exit_code_for(error.retryable)

    outcome = report.steps[0]
    result = outcome.result
    if json_output:
        console.print_json(data={**result_to_dict(result), "validated": outcome.validated})
    else:
        console.print(create_run_summary_panel(result, step.description))
        if result.success and not outcome.validated:
            output_error(f"Output validation failed for agent '{step.name}'")

    if outcome.success:
        return EXIT_OK
    return exit_code_for(isinstance(result, PromptFailure) and result.retryable)


__all__ = ["run"]
