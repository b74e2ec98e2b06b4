"""Execution layer for Warden.

Contains the preflight gate, the single-call prompt executor with its
timing, progress, audit and output helpers, agent output validation, and
the sequential pipeline runner.
"""

from warden.execution.audit import AuditLogger, AuditSession, JsonlAuditSession
from warden.execution.executor import (
    PromptExecutor,
    PromptFailure,
    PromptResult,
    PromptSuccess,
    write_error_log,
)
from warden.execution.pipeline import AgentStep, PipelineReport, PipelineRunner, StepOutcome
from warden.execution.preflight import run_preflight_checks
from warden.execution.timing import Timer
from warden.execution.validation import ValidatorRegistry, validate_agent_output

__all__ = [
    "AgentStep",
    "AuditLogger",
    "AuditSession",
    "JsonlAuditSession",
    "PipelineReport",
    "PipelineRunner",
    "PromptExecutor",
    "PromptFailure",
    "PromptResult",
    "PromptSuccess",
    "StepOutcome",
    "Timer",
    "ValidatorRegistry",
    "run_preflight_checks",
    "validate_agent_output",
    "write_error_log",
]
