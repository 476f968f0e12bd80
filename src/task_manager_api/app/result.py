"""Two-case result type returned by every mutating service operation.

Beginner terms used in this file:
- Success: the operation worked; ``value`` holds the payload.
- Failure: an expected business-rule violation; ``code`` is machine-readable,
  ``message`` is shown to API clients.
- Unexpected faults are not Results: they are raised as ordinary exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

T = TypeVar("T")

ErrorCode = Literal[
    "empty_title",
    "title_too_long",
    "description_too_long",
    "missing_parent",
    "parent_not_found",
    "missing_recurrence",
    "not_found",
    "terminal_completed",
    "terminal_cancelled",
    "has_subtasks",
    "invalid_priority",
    "invalid_status",
    "invalid_type",
    "invalid_recurrence",
]


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    code: ErrorCode
    message: str

    @property
    def ok(self) -> bool:
        return False


Result = Success[T] | Failure
