"""Error classification and handling.

Re-exports all public symbols.
"""

from warden.core.errors.codes import ErrorCategory, ErrorCode
from warden.core.errors.models import ApiStatusError, WardenError
from warden.core.errors.classifier import (
    classify_category,
    detect_api_error,
    is_retryable_error,
    is_spending_cap_behavior,
    suggested_backoff,
)

__all__ = [
    "ApiStatusError",
    "ErrorCategory",
    "ErrorCode",
    "WardenError",
    "classify_category",
    "detect_api_error",
    "is_retryable_error",
    "is_spending_cap_behavior",
    "suggested_backoff",
]
