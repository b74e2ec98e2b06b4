"""Error codes and categories.

Contains the classification enums used by the preflight gate and the
execution pipeline.

Error Taxonomy
==============

| Category | Retriable | Meaning |
|----------|-----------|---------|
| config   | No        | Missing or malformed setup: repository, config file, credentials |
| network  | Yes       | Transient connectivity or API-side failures |
| billing  | Yes       | Spending cap exhausted; retry after an extended backoff |

Stable machine-readable codes exist only where callers branch on them:

| Code | Category | Raised by |
|------|----------|-----------|
| REPO_NOT_FOUND | config | repository preflight check |
| CONFIG_VALIDATION_FAILED | config | config preflight check / config parser |
| AUTH_FAILED | config | credential preflight check |

Generic network and billing failures carry no code.
"""

from __future__ import annotations

from enum import Enum


class ErrorCategory(str, Enum):
    """Categories of errors with different retry behaviors."""

    CONFIG = "config"
    """Non-retriable - configuration needs user intervention."""

    NETWORK = "network"
    """Retriable with backoff - connectivity or transient API issues."""

    BILLING = "billing"
    """Retriable with long wait - provider spending cap reached."""

    @property
    def default_retryable(self) -> bool:
        return self is not ErrorCategory.CONFIG


class ErrorCode(str, Enum):
    """Stable error codes for programmatic handling of preflight failures."""

    REPO_NOT_FOUND = "REPO_NOT_FOUND"
    """Repository path missing, not a directory, or not a git checkout."""

    CONFIG_VALIDATION_FAILED = "CONFIG_VALIDATION_FAILED"
    """Configuration file could not be read, parsed, or validated."""

    AUTH_FAILED = "AUTH_FAILED"
    """API credentials missing or rejected by the provider."""


__all__ = ["ErrorCategory", "ErrorCode"]
