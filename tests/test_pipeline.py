"""Tests for the sequential agent pipeline."""

import io
from pathlib import Path

import httpx
import pytest
from rich.console import Console

from tests.helpers import (
    RecordingTransport,
    completion_payload,
    make_client,
    respond_json,
    respond_text,
)
from warden.core.errors import ErrorCode
from warden.execution.executor import PromptExecutor, PromptFailure
from warden.execution.pipeline import AgentStep, PipelineRunner
from warden.execution.validation import ValidatorRegistry


def _runner(
    transport: httpx.AsyncBaseTransport, registry: ValidatorRegistry | None = None
) -> PipelineRunner:
    executor = PromptExecutor(client=make_client(transport), console=Console(file=io.StringIO()))
    return PipelineRunner(executor, registry)


STEPS = [
    AgentStep(name="a", prompt="first"),
    AgentStep(name="b", prompt="second"),
    AgentStep(name="c", prompt="third"),
]


class TestPipelineRunner:
    @pytest.mark.asyncio
    async def test_preflight_failure_runs_no_steps(self, tmp_path: Path, api_key: str) -> None:
        transport = respond_json(completion_payload())
        runner = _runner(transport)

        report = await runner.run(tmp_path / "missing", STEPS)

        assert report.success is False
        assert report.preflight_error is not None
        assert report.preflight_error.code is ErrorCode.REPO_NOT_FOUND
        assert report.steps == []
        assert report.failed_step is None
        assert transport.call_count == 0

    @pytest.mark.asyncio
    async def test_all_steps_pass(self, git_repo: Path, api_key: str) -> None:
        transport = respond_json(completion_payload("done"))
        runner = _runner(transport)

        report = await runner.run(git_repo, STEPS[:2])

        assert report.success is True
        assert [s.step.name for s in report.steps] == ["a", "b"]
        assert all(s.validated for s in report.steps)
        # credential ping plus one call per step
        assert transport.call_count == 3

    @pytest.mark.asyncio
    async def test_step_failure_stops_pipeline(self, git_repo: Path, api_key: str) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            prompt = request.content.decode()
            if "second" in prompt:
                return httpx.Response(503, text="unavailable")
            return httpx.Response(200, json=completion_payload("done"))

        transport = RecordingTransport(handler)
        runner = _runner(transport)

        report = await runner.run(git_repo, STEPS)

        assert report.success is False
        assert [s.step.name for s in report.steps] == ["a", "b"]
        failed = report.failed_step
        assert failed is not None
        assert failed.step.name == "b"
        assert isinstance(failed.result, PromptFailure)
        assert failed.result.retryable is True
        assert failed.validated is False

    @pytest.mark.asyncio
    async def test_validation_failure_stops_pipeline(self, git_repo: Path, api_key: str) -> None:
        registry = ValidatorRegistry()

        @registry.validator("a")
        async def never(source_dir: Path) -> bool:
            return False

        runner = _runner(respond_json(completion_payload("done")), registry)

        report = await runner.run(git_repo, STEPS)

        assert [s.step.name for s in report.steps] == ["a"]
        assert report.steps[0].result.success is True
        assert report.steps[0].validated is False
        assert report.failed_step is report.steps[0]

    @pytest.mark.asyncio
    async def test_credential_failure_is_preflight_error(self, git_repo: Path, api_key: str) -> None:
        runner = _runner(respond_text("bad key", 401))

        report = await runner.run(git_repo, STEPS)

        assert report.preflight_error is not None
        assert report.preflight_error.code is ErrorCode.AUTH_FAILED
        assert report.steps == []
