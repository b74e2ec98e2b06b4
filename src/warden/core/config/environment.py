"""Runtime settings resolved from the process environment.

The environment is read at call time and never cached: the credential
check and every execution see the current values. Flags that change how
output is rendered are carried explicitly in ``ExecutorOptions`` instead of
module-level globals.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from warden.core.constants import (
    DEFAULT_API_BASE_URL,
    DEFAULT_CONNECT_TIMEOUT_SECONDS,
    DEFAULT_EXECUTION_MODEL,
    DEFAULT_MAX_OUTPUT_TOKENS,
    DEFAULT_PREFLIGHT_MODEL,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    ENV_API_KEY,
    ENV_BASE_URL,
    ENV_MAX_OUTPUT_TOKENS,
    ENV_MODEL,
    HEARTBEAT_INTERVAL_SECONDS,
)
from warden.core.errors import ErrorCategory, WardenError
from warden.core.result import Err, Ok, Result


def _env(env: Mapping[str, str] | None) -> Mapping[str, str]:
    return os.environ if env is None else env


def get_api_key(env: Mapping[str, str] | None = None) -> str | None:
    """Return the API key, or None when unset or empty."""
    return _env(env).get(ENV_API_KEY) or None


def get_execution_model(env: Mapping[str, str] | None = None) -> str:
    return _env(env).get(ENV_MODEL) or DEFAULT_EXECUTION_MODEL


def get_preflight_model(env: Mapping[str, str] | None = None) -> str:
    return _env(env).get(ENV_MODEL) or DEFAULT_PREFLIGHT_MODEL


def get_base_url(env: Mapping[str, str] | None = None) -> str:
    return (_env(env).get(ENV_BASE_URL) or DEFAULT_API_BASE_URL).rstrip("/")


def get_max_output_tokens(env: Mapping[str, str] | None = None) -> Result[int, WardenError]:
    """Resolve the output token budget.

    Returns:
        Ok(budget), or Err(config error) when the override is not a positive integer.
    """
    raw = _env(env).get(ENV_MAX_OUTPUT_TOKENS)
    if not raw:
        return Ok(DEFAULT_MAX_OUTPUT_TOKENS)
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value <= 0:
        return Err(
            WardenError(
                f"{ENV_MAX_OUTPUT_TOKENS} must be a positive integer, got {raw!r}",
                ErrorCategory.CONFIG,
                False,
                {"variable": ENV_MAX_OUTPUT_TOKENS},
            )
        )
    return Ok(value)


@dataclass(frozen=True)
class ExecutorOptions:
    """Explicit runtime options threaded into the execution pipeline.

    Attributes:
        disable_loader: Replace the interactive spinner with heartbeat log
            lines (for CI, log capture, or parallel agents).
        request_timeout_seconds: Upper bound on one completion request.
        connect_timeout_seconds: Upper bound on establishing the connection.
        heartbeat_interval_seconds: Minimum gap between heartbeat lines.
        base_url: API base URL override; defaults to OPENAI_BASE_URL or the
            public endpoint.
    """

    disable_loader: bool = False
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    connect_timeout_seconds: float = DEFAULT_CONNECT_TIMEOUT_SECONDS
    heartbeat_interval_seconds: float = HEARTBEAT_INTERVAL_SECONDS
    base_url: str | None = None

    def resolved_base_url(self, env: Mapping[str, str] | None = None) -> str:
        return self.base_url.rstrip("/") if self.base_url else get_base_url(env)


__all__ = [
    "ExecutorOptions",
    "get_api_key",
    "get_base_url",
    "get_execution_model",
    "get_max_output_tokens",
    "get_preflight_model",
]
