"""Tests for the audit logger and the JSONL audit session."""

import json
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from warden.core.errors import ApiStatusError
from warden.execution.audit import AuditLogger, AuditSession, JsonlAuditSession


def _session_mock() -> AsyncMock:
    session = AsyncMock()
    session.log_llm_response = AsyncMock()
    session.log_error = AsyncMock()
    return session


class TestAuditLogger:
    """Tests for AuditLogger."""

    @pytest.mark.asyncio
    async def test_no_session_is_noop(self) -> None:
        audit = AuditLogger(None)
        assert audit.enabled is False
        await audit.log_llm_response(1, "pong")
        await audit.log_error(RuntimeError("x"), 10.0, 0)

    @pytest.mark.asyncio
    async def test_forwards_to_session(self) -> None:
        session = _session_mock()
        audit = AuditLogger(session)
        error = RuntimeError("x")

        await audit.log_llm_response(1, "pong")
        await audit.log_error(error, 12.5, 1)

        assert audit.enabled is True
        session.log_llm_response.assert_awaited_once_with(1, "pong")
        session.log_error.assert_awaited_once_with(error, 12.5, 1)

    @pytest.mark.asyncio
    async def test_session_failures_are_absorbed(self) -> None:
        session = _session_mock()
        session.log_llm_response.side_effect = OSError("disk full")
        session.log_error.side_effect = RuntimeError("closed")
        audit = AuditLogger(session)

        await audit.log_llm_response(1, "pong")
        await audit.log_error(RuntimeError("x"), 1.0, 0)

        session.log_llm_response.assert_awaited_once()
        session.log_error.assert_awaited_once()


class TestJsonlAuditSession:
    """Tests for JsonlAuditSession."""

    def test_satisfies_protocol(self, tmp_path: Path) -> None:
        assert isinstance(JsonlAuditSession(tmp_path / "audit.jsonl"), AuditSession)

    @pytest.mark.asyncio
    async def test_appends_records(self, tmp_path: Path) -> None:
        path = tmp_path / "audit" / "run.jsonl"
        session = JsonlAuditSession(path, agent="recon")

        await session.log_llm_response(1, "pong")
        await session.log_error(ApiStatusError(429, "slow"), 1234.5678, 0)

        first, second = [json.loads(line) for line in path.read_text().splitlines()]
        assert first["event"] == "llm_response"
        assert first["agent"] == "recon"
        assert first["turn"] == 1
        assert first["response"] == "pong"
        assert first["timestamp"].endswith("Z")

        assert second["event"] == "error"
        assert second["error_type"] == "ApiStatusError"
        assert second["message"] == "OpenAI API error (429): slow"
        assert second["duration_ms"] == 1234.568
        assert second["turn_count"] == 0

    @pytest.mark.asyncio
    async def test_agent_omitted_when_unset(self, tmp_path: Path) -> None:
        path = tmp_path / "audit.jsonl"
        await JsonlAuditSession(path).log_llm_response(1, "x")
        assert "agent" not in json.loads(path.read_text())
