"""Agent output validation.

After an agent's prompt completes, its deliverables are checked by a
validator registered under the agent's name. Agents without a validator
pass as long as the execution itself succeeded and produced text.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterator
from pathlib import Path

from warden.core.logging import get_logger
from warden.execution.executor import PromptResult, PromptSuccess

_logger = get_logger("validation")

AgentValidator = Callable[[Path], Awaitable[bool]]
"""Async predicate over the agent's source directory."""


class ValidatorRegistry:
    """Maps agent names to output validators.

    Example usage:
        registry = ValidatorRegistry()

        @registry.validator("recon")
        async def recon_done(source_dir: Path) -> bool:
            return (source_dir / "deliverables" / "recon.md").is_file()
    """

    def __init__(self, validators: dict[str, AgentValidator] | None = None) -> None:
        self._validators: dict[str, AgentValidator] = dict(validators or {})

    def register(self, agent_name: str, validator: AgentValidator) -> None:
        self._validators[agent_name] = validator

    def validator(self, agent_name: str) -> Callable[[AgentValidator], AgentValidator]:
        """Decorator form of ``register``."""

        def decorator(func: AgentValidator) -> AgentValidator:
            self.register(agent_name, func)
            return func

        return decorator

    def get(self, agent_name: str | None) -> AgentValidator | None:
        if agent_name is None:
            return None
        return self._validators.get(agent_name)

    def __contains__(self, agent_name: object) -> bool:
        return agent_name in self._validators

    def __iter__(self) -> Iterator[str]:
        return iter(self._validators)

    def __len__(self) -> int:
        return len(self._validators)


def deliverables_exist(*relative_paths: str) -> AgentValidator:
    """Build a validator that requires files under the source directory."""

    async def _check(source_dir: Path) -> bool:
        missing = [p for p in relative_paths if not (source_dir / p).is_file()]
        if missing:
            _logger.info("deliverables_missing", missing=missing)
        return not missing

    return _check


async def validate_agent_output(
    result: PromptResult,
    agent_name: str | None,
    source_dir: Path | str,
    registry: ValidatorRegistry,
) -> bool:
    """Decide whether an agent run produced usable output.

    Args:
        result: Outcome of the agent's execution.
        agent_name: Registry key of the agent.
        source_dir: Directory the validator inspects.
        registry: Validators by agent name.

    Returns:
        False for failed or empty executions and for validator errors;
        True when no validator is registered; otherwise the validator's verdict.
    """
    log = _logger.bind(agent=agent_name)
    log.info("validation_started")

    if not isinstance(result, PromptSuccess) or not result.result_text:
        log.error("validation_failed", reason="execution unsuccessful or empty")
        return False

    validator = registry.get(agent_name)
    if validator is None:
        log.warning("validator_missing", hint="assuming success")
        return True

    try:
        passed = await validator(Path(source_dir))
    except Exception as e:
        log.error(
            "validation_failed",
            reason="validator raised",
            error_type=type(e).__name__,
            error=str(e),
        )
        return False

    if passed:
        log.info("validation_passed")
    else:
        log.error("validation_failed", reason="required deliverables missing")
    return bool(passed)


__all__ = [
    "AgentValidator",
    "ValidatorRegistry",
    "deliverables_exist",
    "validate_agent_output",
]
