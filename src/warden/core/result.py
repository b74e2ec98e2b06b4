"""Result type for explicit success/failure at module boundaries.

Checks and clients return ``Ok`` or ``Err`` instead of raising, so callers
branch on the value and only the outermost execution boundary catches
exceptions.

Example:
    outcome = await run_preflight_checks(repo)
    if isinstance(outcome, Err):
        console.print(outcome.error.message)
"""

from __future__ import annotations

import dataclasses
from typing import Generic, TypeVar

T = TypeVar("T")
E = TypeVar("E", bound=Exception)


@dataclasses.dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """A successful outcome carrying a value."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclasses.dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """A failed outcome carrying the error."""

    error: E

    @property
    def ok(self) -> bool:
        return False


Result = Ok[T] | Err[E]

__all__ = ["Err", "Ok", "Result"]
