"""Pattern-based error classification.

Pure functions that decide whether a failure is transient (safe to retry)
and that detect the spending-cap false-success pattern. None of them read
external state: the answer depends only on the error's type, status, code
and message, or on the (turns, cost, text) triple of a completed call.
"""

from __future__ import annotations

import re

import httpx

from warden.core.constants import (
    BILLING_BACKOFF_MIN_SECONDS,
    NETWORK_BACKOFF_SECONDS,
    SPENDING_CAP_MAX_TEXT_CHARS,
)

from .codes import ErrorCategory
from .models import ApiStatusError, WardenError

# =============================================================================
# Default pattern strings.
# Kept at module scope so they are easy to review and test as data.
# =============================================================================

_RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({408, 409, 425, 429})

_NON_RETRYABLE_PATTERNS: list[str] = [
    r"authentication",
    r"unauthorized",
    r"invalid.?api.?key",
    r"incorrect api key",
    r"permission.?denied",
    r"out of memory",
    r"invalid.?prompt",
    r"session limit reached",
]

_RETRYABLE_PATTERNS: list[str] = [
    r"network",
    r"connection",
    r"timed?.?out",
    r"ECONNRESET",
    r"ENOTFOUND",
    r"ECONNREFUSED",
    r"ETIMEDOUT",
    r"rate.?limit",
    r"\b429\b",
    r"too many requests",
    r"server error",
    r"service.?unavailable",
    r"bad gateway",
    r"gateway timeout",
    r"overloaded",
    r"model.{0,10}unavailable",
    r"temporarily unavailable",
    r"terminated",
]

# A provider that silently stops a session at its spending limit returns
# a normal-looking reply whose text is one of these placeholders.
_SPENDING_CAP_PATTERNS: list[str] = [
    r"spending.?cap",
    r"spending.?limit",
    r"usage.?limit",
    r"budget.{0,10}(exceeded|exhausted|reached)",
    r"insufficient.{0,10}(credit|quota|funds|balance)",
    r"credit balance.{0,20}too low",
    r"quota.{0,10}exceeded",
    r"exceeded.{0,20}quota",
    r"billing.{0,10}(limit|cap|issue|error|hard limit)",
    r"nothing to show",
]

_API_ERROR_PATTERNS: list[str] = [
    r"^\s*API Error",
    r"invalid_request_error",
    r"\"type\"\s*:\s*\"(server_error|api_error|rate_limit_error)\"",
    r"^\s*\{\s*\"error\"\s*:",
]


def _compile_patterns(strings: list[str]) -> list[re.Pattern[str]]:
    """Compile a list of regex strings into case-insensitive Pattern objects."""
    return [re.compile(p, re.IGNORECASE) for p in strings]


_NON_RETRYABLE_RE = _compile_patterns(_NON_RETRYABLE_PATTERNS)
_RETRYABLE_RE = _compile_patterns(_RETRYABLE_PATTERNS)
_SPENDING_CAP_RE = _compile_patterns(_SPENDING_CAP_PATTERNS)
_API_ERROR_RE = [re.compile(p, re.IGNORECASE | re.MULTILINE) for p in _API_ERROR_PATTERNS]


def _matches_any(text: str, patterns: list[re.Pattern[str]]) -> bool:
    return any(p.search(text) for p in patterns)


def _is_retryable_status(status: int) -> bool:
    return status in _RETRYABLE_STATUS_CODES or 500 <= status < 600


def is_retryable_error(error: BaseException) -> bool:
    """Classify a failure as transient (retryable) or not.

    Resolution order:
        1. ``WardenError`` - already classified, trust its flag.
        2. ``ApiStatusError`` - by HTTP status (408/409/425/429/5xx retryable).
        3. httpx transport errors - timeouts, connect/read failures.
        4. Message substrings - non-retryable patterns win over retryable ones.

    Args:
        error: The raised failure.

    Returns:
        True if the caller may retry with backoff.
    """
    if isinstance(error, WardenError):
        return error.retryable

    if isinstance(error, ApiStatusError):
        return _is_retryable_status(error.status)

    if isinstance(error, httpx.HTTPStatusError):
        return _is_retryable_status(error.response.status_code)

    if isinstance(error, httpx.TransportError):
        # Covers TimeoutException, NetworkError, RemoteProtocolError, ProxyError
        return not isinstance(error, httpx.UnsupportedProtocol)

    status = getattr(error, "status", None)
    if isinstance(status, int):
        return _is_retryable_status(status)

    message = f"{type(error).__name__}: {error}"
    if _matches_any(message, _NON_RETRYABLE_RE):
        return False
    return _matches_any(message, _RETRYABLE_RE)


def classify_category(error: BaseException) -> ErrorCategory:
    """Map any failure onto the config/network/billing taxonomy."""
    if isinstance(error, WardenError):
        return error.category
    return ErrorCategory.NETWORK if is_retryable_error(error) else ErrorCategory.CONFIG


def is_spending_cap_behavior(turn_count: int, cost: float, result_text: str) -> bool:
    """Detect a spending-cap termination disguised as a thin success.

    Provider-level error signaling for exhausted spending limits is
    unreliable, so a completed call is re-checked here: at least one turn,
    zero cost, and a short reply matching a billing placeholder pattern.
    Long replies are real work product even if they mention billing.

    Args:
        turn_count: Turns completed by the call.
        cost: Cost recorded for the call.
        result_text: Response body text.

    Returns:
        True if the triple looks like a spending-cap stop.
    """
    if turn_count <= 0 or cost != 0:
        return False
    if not result_text or not result_text.strip():
        return False
    if len(result_text) > SPENDING_CAP_MAX_TEXT_CHARS:
        return False
    return _matches_any(result_text, _SPENDING_CAP_RE)


def detect_api_error(result_text: str | None) -> bool:
    """Check whether a successful response body is really an API error payload."""
    if not result_text:
        return False
    return _matches_any(result_text, _API_ERROR_RE)


def suggested_backoff(error: BaseException) -> float:
    """Recommended wait before retrying, in seconds.

    Billing failures get the lower bound of the extended window (5-30 min);
    non-retryable failures return 0.
    """
    if not is_retryable_error(error):
        return 0.0
    if classify_category(error) is ErrorCategory.BILLING:
        return BILLING_BACKOFF_MIN_SECONDS
    return NETWORK_BACKOFF_SECONDS


__all__ = [
    "classify_category",
    "detect_api_error",
    "is_retryable_error",
    "is_spending_cap_behavior",
    "suggested_backoff",
]
