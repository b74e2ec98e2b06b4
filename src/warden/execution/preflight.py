"""Preflight checks run before any agent execution.

Catches configuration and credential problems while they are still cheap
to detect. Checks run sequentially, cheapest first, and stop at the first
failure:

1. Repository path exists, is a directory and contains ``.git``
   (filesystem only).
2. Configuration file parses and validates, when one is given
   (filesystem and CPU).
3. API credentials are accepted by the provider (one minimal API
   round-trip).

Failures are returned as ``Err(WardenError)``, never raised.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from warden.backends.openai_api import OpenAIChatClient
from warden.core.config import ExecutorOptions, get_api_key, get_preflight_model, parse_config
from warden.core.constants import PREFLIGHT_PING_MAX_TOKENS, PREFLIGHT_PING_PROMPT
from warden.core.errors import ErrorCategory, ErrorCode, WardenError, is_retryable_error
from warden.core.logging import get_logger
from warden.core.result import Err, Ok, Result

_logger = get_logger("preflight")

_AUTH_TYPE = "OpenAI API key"


def _repo_error(message: str, repo_path: Path | str) -> Err[WardenError]:
    return Err(
        WardenError(
            message,
            ErrorCategory.CONFIG,
            False,
            {"repo_path": str(repo_path)},
            ErrorCode.REPO_NOT_FOUND,
        )
    )


def _is_dir(path: Path) -> bool | None:
    """True/False for an existing path, None when it cannot be stat'ed."""
    try:
        return path.is_dir() if path.exists() else None
    except OSError:
        return None


async def check_repository(repo_path: Path | str) -> Result[None, WardenError]:
    """Verify the target repository is a git checkout."""
    _logger.info("repository_check_started", repo_path=str(repo_path))

    # Path("") would resolve to the working directory
    if not str(repo_path).strip():
        return _repo_error(f"Repository path does not exist: {repo_path}", repo_path)

    path = Path(repo_path)
    is_dir = await asyncio.to_thread(_is_dir, path)
    if is_dir is None:
        return _repo_error(f"Repository path does not exist: {path}", path)
    if not is_dir:
        return _repo_error(f"Repository path is not a directory: {path}", path)

    if not await asyncio.to_thread(_is_dir, path / ".git"):
        return _repo_error(f"Not a git repository (no .git directory): {path}", path)

    _logger.info("repository_check_passed", repo_path=str(path))
    return Ok(None)


async def check_config(config_path: Path) -> Result[None, WardenError]:
    """Verify the configuration file parses and validates."""
    _logger.info("config_check_started", config_path=str(config_path))

    try:
        parsed = await asyncio.to_thread(parse_config, config_path)
    except Exception as e:
        return Err(
            WardenError(
                f"Configuration validation failed: {e}",
                ErrorCategory.CONFIG,
                False,
                {"config_path": str(config_path)},
                ErrorCode.CONFIG_VALIDATION_FAILED,
            )
        )

    if isinstance(parsed, Err):
        return parsed

    _logger.info("config_check_passed", config_path=str(config_path))
    return Ok(None)


async def check_credentials(client: OpenAIChatClient) -> Result[None, WardenError]:
    """Verify the API key with a minimal completion request.

    A missing key fails without any network call.
    """
    api_key = get_api_key()
    if api_key is None:
        return Err(
            WardenError(
                "No API credentials found. Set OPENAI_API_KEY in .env",
                ErrorCategory.CONFIG,
                False,
                {},
                ErrorCode.AUTH_FAILED,
            )
        )

    model = get_preflight_model()
    _logger.info("credential_check_started", auth_type=_AUTH_TYPE, model=model)

    try:
        result = await client.complete(
            PREFLIGHT_PING_PROMPT,
            model=model,
            max_tokens=PREFLIGHT_PING_MAX_TOKENS,
            api_key=api_key,
        )
    except Exception as e:
        # e.g. a key that cannot be encoded into the Authorization header
        result = Err(e)
    if isinstance(result, Ok):
        _logger.info("credential_check_passed", auth_type=_AUTH_TYPE)
        return Ok(None)

    error = result.error
    retryable = is_retryable_error(error)
    _logger.warning(
        "credential_check_failed",
        auth_type=_AUTH_TYPE,
        retryable=retryable,
        error_type=type(error).__name__,
    )
    if retryable:
        return Err(
            WardenError(
                "Failed to reach OpenAI API. Check your network connection.",
                ErrorCategory.NETWORK,
                True,
                {"auth_type": _AUTH_TYPE},
            )
        )
    return Err(
        WardenError(
            f"{_AUTH_TYPE} validation failed: {error}",
            ErrorCategory.CONFIG,
            False,
            {"auth_type": _AUTH_TYPE},
            ErrorCode.AUTH_FAILED,
        )
    )


async def run_preflight_checks(
    repo_path: Path | str,
    config_path: Path | str | None = None,
    *,
    client: OpenAIChatClient | None = None,
) -> Result[None, WardenError]:
    """Run all preflight checks, returning on the first failure.

    Args:
        repo_path: Target repository directory.
        config_path: Optional YAML configuration file.
        client: Completions client for the credential ping. A temporary
            client built from default ``ExecutorOptions`` is used (and
            closed) when omitted.

    Returns:
        Ok(None) when every check passed, otherwise the first Err.
    """
    repo_result = await check_repository(repo_path)
    if isinstance(repo_result, Err):
        return repo_result

    if config_path:
        config_result = await check_config(Path(config_path))
        if isinstance(config_result, Err):
            return config_result

    if client is not None:
        cred_result = await check_credentials(client)
    else:
        async with OpenAIChatClient.from_options(ExecutorOptions()) as owned_client:
            cred_result = await check_credentials(owned_client)
    if isinstance(cred_result, Err):
        return cred_result

    _logger.info("preflight_passed")
    return Ok(None)


__all__ = [
    "check_config",
    "check_credentials",
    "check_repository",
    "run_preflight_checks",
]
