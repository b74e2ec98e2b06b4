"""Audit trail for LLM executions.

The execution pipeline records each model response and each failure into
an externally owned ``AuditSession``. ``AuditLogger`` wraps an optional
session: without one every call is a no-op, and a failing session is
logged and ignored so the execution outcome is never replaced by an audit
problem.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from warden.core.logging import get_logger
from warden.utils.time import format_timestamp

_logger = get_logger("audit")


@runtime_checkable
class AuditSession(Protocol):
    """Append-only sink for audit records."""

    async def log_llm_response(self, turn: int, response: str) -> None: ...

    async def log_error(self, error: BaseException, duration_ms: float, turn_count: int) -> None: ...


class JsonlAuditSession:
    """Audit session that appends one JSON object per event to a file.

    Example record:
        {"timestamp": "2025-01-31T12:00:00.123Z", "event": "llm_response",
         "agent": "recon", "turn": 1, "response": "..."}
    """

    def __init__(self, path: Path, agent: str | None = None) -> None:
        self.path = path
        self.agent = agent

    def _append(self, record: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, default=str) + "\n")

    def _record(self, event: str, **fields: Any) -> dict[str, Any]:
        record: dict[str, Any] = {"timestamp": format_timestamp(), "event": event}
        if self.agent is not None:
            record["agent"] = self.agent
        record.update(fields)
        return record

    async def log_llm_response(self, turn: int, response: str) -> None:
        self._append(self._record("llm_response", turn=turn, response=response))

    async def log_error(self, error: BaseException, duration_ms: float, turn_count: int) -> None:
        self._append(
            self._record(
                "error",
                error_type=type(error).__name__,
                message=str(error),
                duration_ms=round(duration_ms, 3),
                turn_count=turn_count,
            )
        )


class AuditLogger:
    """Best-effort facade over an optional ``AuditSession``."""

    def __init__(self, session: AuditSession | None = None) -> None:
        self.session = session

    @property
    def enabled(self) -> bool:
        return self.session is not None

    async def log_llm_response(self, turn: int, response: str) -> None:
        if self.session is None:
            return
        try:
            await self.session.log_llm_response(turn, response)
        except Exception as e:
            _logger.warning(
                "audit_write_failed",
                record="llm_response",
                error_type=type(e).__name__,
                error=str(e),
            )

    async def log_error(self, error: BaseException, duration_ms: float, turn_count: int) -> None:
        if self.session is None:
            return
        try:
            await self.session.log_error(error, duration_ms, turn_count)
        except Exception as e:
            _logger.warning(
                "audit_write_failed",
                record="error",
                error_type=type(e).__name__,
                error=str(e),
            )


__all__ = ["AuditLogger", "AuditSession", "JsonlAuditSession"]
