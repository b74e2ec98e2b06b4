"""Core domain models, errors, configuration and logging."""

from warden.core.errors import ErrorCategory, ErrorCode, WardenError
from warden.core.result import Err, Ok, Result

__all__ = [
    "Err",
    "ErrorCategory",
    "ErrorCode",
    "Ok",
    "Result",
    "WardenError",
]
