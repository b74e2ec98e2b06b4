"""Single-call LLM execution with timing, progress, audit and classification.

``PromptExecutor.run_prompt`` is the one place where failures are caught.
Every inner step returns a ``Result``; ``run_prompt`` converts the final
outcome into either a ``PromptSuccess`` or a ``PromptFailure`` and never
raises for execution problems.

Execution steps:
1. Compose the full prompt (context, blank line, prompt).
2. Start the timer, pick a progress reporter, bind the audit logger.
3. Require ``OPENAI_API_KEY`` (config error, no network call).
4. Send one completion request (single turn).
5. Record the response in the audit session.
6. Re-check the reply for the spending-cap false-success pattern.
7. Report completion, or on any failure: audit the error, print a short
   summary, append a line to ``<source_dir>/error.log`` and return a
   classified failure.
"""

from __future__ import annotations

import json
import traceback
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import Any

import httpx
from rich.console import Console

from warden.backends.openai_api import Completion, OpenAIChatClient
from warden.core.config import (
    ExecutorOptions,
    get_api_key,
    get_execution_model,
    get_max_output_tokens,
)
from warden.core.constants import (
    ERROR_LOG_AGENT,
    ERROR_LOG_FILENAME,
    SINGLE_TURN,
    TRUNCATE_ERROR_LOG_PROMPT_CHARS,
    TRUNCATE_RESULT_PROMPT_CHARS,
    TRUNCATE_SPENDING_CAP_TEXT_CHARS,
    UNMETERED_CALL_COST,
)
from warden.core.errors import (
    ErrorCategory,
    WardenError,
    classify_category,
    detect_api_error,
    is_retryable_error,
    is_spending_cap_behavior,
)
from warden.core.logging import AgentContext, get_current_context, get_logger, with_context
from warden.core.result import Err, Ok, Result
from warden.execution.audit import AuditLogger, AuditSession
from warden.execution.output import (
    ExecutionContextInfo,
    detect_execution_context,
    format_completion_message,
    format_error_output,
)
from warden.execution.progress import Heartbeat, ProgressReporter, create_progress_reporter
from warden.execution.timing import Timer, timer_name_for
from warden.utils.time import format_timestamp

_logger = get_logger("executor")


def _truncate(text: str, limit: int) -> str:
    return text[:limit] + "..."


@dataclass(frozen=True)
class PromptSuccess:
    """A completed execution.

    Attributes:
        result_text: Model reply (empty string when the API sent none).
        duration_ms: Wall-clock duration.
        turn_count: Always 1; executions are single-turn.
        cost: Recorded cost (see ``UNMETERED_CALL_COST``).
        model: Model that actually served the request.
        partial_cost: Cost accrued so far; equals ``cost`` for a single turn.
        api_error_detected: The reply looks like an API error payload.
        tokens_used: ``usage.total_tokens`` when reported.
    """

    result_text: str
    duration_ms: float
    turn_count: int
    cost: float
    model: str
    partial_cost: float
    api_error_detected: bool = False
    tokens_used: int | None = None

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class PromptFailure:
    """A failed execution, already classified.

    Attributes:
        error_message: Message of the failure.
        error_type: Exception class name.
        prompt_preview: First characters of the full prompt, with ellipsis.
        duration_ms: Wall-clock duration until the failure.
        cost: Cost accrued before the failure.
        retryable: Whether the caller may retry with backoff.
        category: config, network or billing.
    """

    error_message: str
    error_type: str
    prompt_preview: str
    duration_ms: float
    cost: float
    retryable: bool
    category: ErrorCategory

    @property
    def success(self) -> bool:
        return False


PromptResult = PromptSuccess | PromptFailure


@dataclass(frozen=True)
class _Invocation:
    completion: Completion
    turn_count: int
    cost: float


def _error_code(error: BaseException) -> str | None:
    code = getattr(error, "code", None)
    if code is None:
        return None
    return str(getattr(code, "value", code))


def _error_status(error: BaseException) -> int | None:
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    status = getattr(error, "status", None)
    return status if isinstance(status, int) else None


def write_error_log(
    error: BaseException,
    source_dir: Path | str,
    full_prompt: str,
    duration_ms: float,
) -> bool:
    """Append one JSON line describing a failure to ``<source_dir>/error.log``.

    Best-effort: any problem writing the file is logged and swallowed.

    Returns:
        True if the line was written.
    """
    try:
        entry: dict[str, Any] = {
            "timestamp": format_timestamp(),
            "agent": ERROR_LOG_AGENT,
            "error": {
                "name": type(error).__name__,
                "message": str(error),
                "code": _error_code(error),
                "status": _error_status(error),
                "stack": "".join(traceback.format_exception(error)),
            },
            "context": {
                "sourceDir": str(source_dir),
                "prompt": _truncate(full_prompt, TRUNCATE_ERROR_LOG_PROMPT_CHARS),
                "retryable": is_retryable_error(error),
            },
            "duration": duration_ms,
        }
        log_path = Path(source_dir) / ERROR_LOG_FILENAME
        with log_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(entry, default=str) + "\n")
        return True
    except Exception as e:
        _logger.debug("error_log_write_failed", error_type=type(e).__name__, error=str(e))
        return False


class PromptExecutor:
    """Runs single prompts against the completions API.

    Example usage:
        async with PromptExecutor(options=ExecutorOptions(disable_loader=True)) as executor:
            result = await executor.run_prompt(prompt, repo, description="Recon agent")
            if not result.success and result.retryable:
                ...
    """

    def __init__(
        self,
        client: OpenAIChatClient | None = None,
        options: ExecutorOptions | None = None,
        console: Console | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            client: Completions client. One is built from ``options`` (and
                closed by ``close()``) when omitted.
            options: Runtime options; defaults apply when omitted.
            console: Console for progress and summaries.
        """
        self.options = options or ExecutorOptions()
        self.console = console or Console()
        self._owns_client = client is None
        self.client = client or OpenAIChatClient.from_options(self.options)

    async def close(self) -> None:
        if self._owns_client:
            await self.client.close()

    async def __aenter__(self) -> PromptExecutor:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _invoke(
        self,
        full_prompt: str,
        audit: AuditLogger,
        heartbeat: Heartbeat | None,
    ) -> Result[_Invocation, Exception]:
        api_key = get_api_key()
        if api_key is None:
            return Err(
                WardenError(
                    "OPENAI_API_KEY is not set. Configure OpenAI credentials before running agents.",
                    ErrorCategory.CONFIG,
                    False,
                )
            )

        max_tokens = get_max_output_tokens()
        if isinstance(max_tokens, Err):
            return max_tokens

        model = get_execution_model()
        _logger.debug("completion_options", model=model, max_tokens=max_tokens.value)

        if heartbeat is not None:
            heartbeat.tick()
        outcome = await self.client.complete(
            full_prompt,
            model=model,
            max_tokens=max_tokens.value,
            api_key=api_key,
        )
        if heartbeat is not None:
            heartbeat.tick()
        if isinstance(outcome, Err):
            return outcome

        completion = outcome.value
        await audit.log_llm_response(SINGLE_TURN, completion.text)
        return Ok(_Invocation(completion, SINGLE_TURN, UNMETERED_CALL_COST))

    @staticmethod
    def _check_spending_cap(invocation: _Invocation) -> WardenError | None:
        """Billing error when a completed call looks like a silent spending-cap stop."""
        text = invocation.completion.text
        if not is_spending_cap_behavior(invocation.turn_count, invocation.cost, text):
            return None
        return WardenError(
            f"Spending cap likely reached (turns={invocation.turn_count}, cost=$0): "
            f"{text[:TRUNCATE_SPENDING_CAP_TEXT_CHARS]}",
            ErrorCategory.BILLING,
            True,
            {"model": invocation.completion.model},
        )

    async def _fail(
        self,
        error: BaseException,
        *,
        timer: Timer,
        full_prompt: str,
        source_dir: Path,
        description: str,
        exec_context: ExecutionContextInfo,
        progress: ProgressReporter,
        audit: AuditLogger,
        turn_count: int,
    ) -> PromptFailure:
        duration_ms = timer.stop()
        retryable = is_retryable_error(error)
        category = classify_category(error)

        _logger.error(
            "prompt_failed",
            description=description,
            error_type=type(error).__name__,
            error=str(error),
            category=category.value,
            retryable=retryable,
            duration_ms=round(duration_ms, 1),
        )

        await audit.log_error(error, duration_ms, turn_count)
        progress.stop()
        for line in format_error_output(
            error, exec_context, description, duration_ms, source_dir, retryable
        ):
            self.console.print(line)
        write_error_log(error, source_dir, full_prompt, duration_ms)

        return PromptFailure(
            error_message=str(error),
            error_type=type(error).__name__,
            prompt_preview=_truncate(full_prompt, TRUNCATE_RESULT_PROMPT_CHARS),
            duration_ms=duration_ms,
            cost=UNMETERED_CALL_COST,
            retryable=retryable,
            category=category,
        )

    async def run_prompt(
        self,
        prompt: str,
        source_dir: Path | str,
        context: str = "",
        description: str = "LLM analysis",
        agent_name: str | None = None,
        audit_session: AuditSession | None = None,
    ) -> PromptResult:
        """Execute one prompt and return a structured result.

        Args:
            prompt: Task prompt.
            source_dir: Working directory of the agent; receives ``error.log``.
            context: Optional text placed before the prompt.
            description: Human-readable agent description, drives output style.
            agent_name: Agent identifier used for log correlation.
            audit_session: Externally owned audit sink; None disables auditing.

        Returns:
            PromptSuccess or PromptFailure. Never raises for execution failures.
        """
        source_dir = Path(source_dir)
        timer = Timer(timer_name_for(description))
        full_prompt = f"{context}\n\n{prompt}" if context else prompt

        exec_context = detect_execution_context(description)
        progress = create_progress_reporter(
            description,
            exec_context.use_clean_output,
            self.options.disable_loader,
            self.console,
        )
        audit = AuditLogger(audit_session)
        heartbeat = (
            Heartbeat(description, timer, self.console, self.options.heartbeat_interval_seconds)
            if self.options.disable_loader
            else None
        )

        agent = agent_name or exec_context.agent_key
        parent = get_current_context()
        log_context = (
            parent.with_agent(agent)
            if parent is not None
            else AgentContext(agent=agent, source_dir=str(source_dir))
        )

        with with_context(log_context):
            _logger.info(
                "prompt_started",
                description=description,
                timer=timer.name,
                prompt_length=len(full_prompt),
            )
            progress.start()

            try:
                outcome = await self._invoke(full_prompt, audit, heartbeat)
            except Exception as e:
                outcome = Err(e)

            if isinstance(outcome, Err):
                return await self._fail(
                    outcome.error,
                    timer=timer,
                    full_prompt=full_prompt,
                    source_dir=source_dir,
                    description=description,
                    exec_context=exec_context,
                    progress=progress,
                    audit=audit,
                    turn_count=0,
                )

            invocation = outcome.value
            spending_cap = self._check_spending_cap(invocation)
            if spending_cap is not None:
                return await self._fail(
                    spending_cap,
                    timer=timer,
                    full_prompt=full_prompt,
                    source_dir=source_dir,
                    description=description,
                    exec_context=exec_context,
                    progress=progress,
                    audit=audit,
                    turn_count=invocation.turn_count,
                )

            completion = invocation.completion
            duration_ms = timer.stop()
            api_error_detected = detect_api_error(completion.text)
            if api_error_detected:
                _logger.warning(
                    "api_error_in_response",
                    description=description,
                    hint="validate deliverables before treating as failure",
                )

            progress.finish(
                format_completion_message(
                    exec_context, description, invocation.turn_count, duration_ms
                )
            )
            _logger.info(
                "prompt_completed",
                description=description,
                model=completion.model,
                duration_ms=round(duration_ms, 1),
                tokens_used=completion.total_tokens,
            )

            return PromptSuccess(
                result_text=completion.text,
                duration_ms=duration_ms,
                turn_count=invocation.turn_count,
                cost=invocation.cost,
                model=completion.model,
                partial_cost=invocation.cost,
                api_error_detected=api_error_detected,
                tokens_used=completion.total_tokens,
            )


__all__ = [
    "PromptExecutor",
    "PromptFailure",
    "PromptResult",
    "PromptSuccess",
    "write_error_log",
]
