"""
Tagged outcomes returned by provider adapters and response strategies.

A provider call never raises into the orchestrator; it returns either a
Success carrying its value or a Failure carrying the reason.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar, Union

from .codes import ErrorCode

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """A stage that produced a value."""

    value: T
    source: str = ""

    ok = True


@dataclass(frozen=True)
class Failure:
    """A stage that could not produce a value.

    Attributes:
        reason: Short human-readable reason (logged, never sent to clients)
        code: ErrorCode categorizing the failure
        source: Name of the adapter or strategy that failed
        error: Original exception, if any
    """

    reason: str
    code: ErrorCode = ErrorCode.INTERNAL_UNEXPECTED
    source: str = ""
    error: Optional[BaseException] = field(default=None, compare=False, repr=False)

    ok = False


Outcome = Union[Success[Any], Failure]
