"""Sequential agent pipeline: preflight once, then run and validate each step.

The runner stops at the first failed preflight check (no step runs) or the
first step whose execution or validation fails. Retrying failed steps is
left to the caller, guided by ``PromptFailure.retryable``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from warden.core.errors import WardenError
from warden.core.logging import AgentContext, get_logger, with_context
from warden.core.result import Err
from warden.execution.audit import AuditSession
from warden.execution.executor import PromptExecutor, PromptResult
from warden.execution.preflight import run_preflight_checks
from warden.execution.validation import ValidatorRegistry, validate_agent_output

_logger = get_logger("pipeline")


@dataclass(frozen=True)
class AgentStep:
    """One agent invocation in a pipeline."""

    name: str
    prompt: str
    description: str = "LLM analysis"
    context: str = ""


@dataclass(frozen=True)
class StepOutcome:
    step: AgentStep
    result: PromptResult
    validated: bool

    @property
    def success(self) -> bool:
        return self.result.success and self.validated


@dataclass
class PipelineReport:
    """Outcome of a pipeline run.

    Attributes:
        preflight_error: First failing preflight check, if any.
        steps: Outcomes of the steps that ran, in order.
    """

    preflight_error: WardenError | None = None
    steps: list[StepOutcome] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.preflight_error is None and all(s.success for s in self.steps)

    @property
    def failed_step(self) -> StepOutcome | None:
        return next((s for s in self.steps if not s.success), None)


class PipelineRunner:
    """Runs a list of agent steps against one repository."""

    def __init__(
        self,
        executor: PromptExecutor,
        registry: ValidatorRegistry | None = None,
    ) -> None:
        self.executor = executor
        self.registry = registry or ValidatorRegistry()

    async def run(
        self,
        repo_path: Path | str,
        steps: Sequence[AgentStep],
        config_path: Path | str | None = None,
        audit_session: AuditSession | None = None,
    ) -> PipelineReport:
        repo_path = Path(repo_path)
        report = PipelineReport()
        run_context = AgentContext(agent="pipeline", source_dir=str(repo_path))

        with with_context(run_context):
            _logger.info("pipeline_started", step_count=len(steps))

            preflight = await run_preflight_checks(
                repo_path, config_path, client=self.executor.client
            )
            if isinstance(preflight, Err):
                report.preflight_error = preflight.error
                _logger.error(
                    "pipeline_preflight_failed",
                    error=preflight.error.message,
                    category=preflight.error.category.value,
                    retryable=preflight.error.retryable,
                )
                return report

            for step in steps:
                result = await self.executor.run_prompt(
                    step.prompt,
                    repo_path,
                    context=step.context,
                    description=step.description,
                    agent_name=step.name,
                    audit_session=audit_session,
                )
                validated = result.success and await validate_agent_output(
                    result, step.name, repo_path, self.registry
                )
                outcome = StepOutcome(step=step, result=result, validated=validated)
                report.steps.append(outcome)
                if not outcome.success:
                    _logger.error("pipeline_step_failed", step=step.name)
                    break
            else:
                _logger.info("pipeline_completed", step_count=len(report.steps))

        return report


__all__ = ["AgentStep", "PipelineReport", "PipelineRunner", "StepOutcome"]
