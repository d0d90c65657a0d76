"""Result type and error taxonomy shared by the aggregator, router and routes.

Public operations on the aggregator and the intent router never raise for
expected failures; they return a :class:`Result` carrying either the value
or one of the errors below.  ``unwrap()`` converts back to an exception for
callers that prefer one.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")


class OrchestrationError(Exception):
    """A failure while composing upstream data into a domain object.

    Always wraps the underlying cause (usually an ``IntakeQAPIError``) so
    callers never have to know about transport-level error types.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.__cause__ = cause

    @classmethod
    def wrap(cls, prefix: str, cause: BaseException) -> OrchestrationError:
        return cls(f"{prefix}: {cause}", cause)


class ValidationFailure(Exception):
    """Required caller input was missing; raised before any upstream call."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class Result(Generic[T]):
    """Success-or-error outcome of an operation."""

    value: T | None = None
    error: Exception | None = None

    @classmethod
    def success(cls, value: T | None = None) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: Exception) -> Result[T]:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def map(self, fn: Callable[[T], U]) -> Result[U]:
        """Apply *fn* to a successful value; failures pass through unchanged."""
        if self.error is not None:
            return Result.failure(self.error)
        return Result.success(fn(self.value))  # type: ignore[arg-type]

    def unwrap(self) -> T:
        """Return the value, or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


def require_text(value: str | None, message: str) -> Result[str]:
    """Validate that *value* has non-whitespace content."""
    if value is None or not value.strip():
        return Result.failure(ValidationFailure(message))
    return Result.success(value)
