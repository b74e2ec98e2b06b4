"""Exception types for classified failures.

``WardenError`` is the single classified error used across the project: it
carries a category, a retry flag, free-form context and an optional stable
code. ``ApiStatusError`` represents a non-2xx response from the completions
API and is classified by status code.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .codes import ErrorCategory, ErrorCode


class WardenError(Exception):
    """A failure that has already been classified.

    Attributes:
        message: Human-readable description.
        category: Error category (config, network, billing).
        retryable: Whether the caller may retry with backoff.
        context: Extra diagnostic fields (paths, auth type, ...).
        code: Stable machine-readable code, if any.
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory,
        retryable: bool,
        context: Mapping[str, Any] | None = None,
        code: ErrorCode | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category
        self.retryable = retryable
        self.context: dict[str, Any] = dict(context or {})
        self.code = code

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, "
            f"category={self.category.value!r}, retryable={self.retryable}, "
            f"code={self.code.value if self.code else None!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
            "context": self.context,
            "code": self.code.value if self.code else None,
        }


class ApiStatusError(Exception):
    """Non-success HTTP response from the completions API.

    The response body is embedded verbatim in the message.
    """

    def __init__(self, status: int, body: str, provider: str = "OpenAI") -> None:
        super().__init__(f"{provider} API error ({status}): {body}")
        self.status = status
        self.body = body
        self.provider = provider

    @property
    def code(self) -> str:
        return f"HTTP_{self.status}"


__all__ = ["ApiStatusError", "WardenError"]
