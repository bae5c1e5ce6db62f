"""
Result envelope for callers that would rather branch than catch.

Generated interface stubs deliver one bundle per transaction; some of them
want a value back no matter what and log failures themselves. Ok/Err gives
them that without hiding which decode error happened.

Examples:
    >>> from parcelspine.core.result import Ok, Err
    >>> match Ok(5):
    ...     case Ok(value):
    ...         print(value)
    ...     case Err(error):
    ...         print(error)
    5

    >>> Err(ValueError("boom")).unwrap_or(0)
    0

Guardrails:
    ❌ DON'T: Use try_result around code that is not decoding a buffer
    ✅ DO: Let programming errors propagate; only ParcelError becomes Err
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from parcelspine.core.errors import ParcelError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result containing a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the value. Safe for Ok."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """Transform the value if Ok."""
        return Ok(f(self.value))

    def to_dict(self) -> dict[str, Any]:
        return {"ok": True, "value": self.value}


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """Failed result carrying the exception that caused it."""

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Re-raise the wrapped error."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, f: Callable[[T], U]) -> Result[U]:
        return Err(self.error)

    def to_dict(self) -> dict[str, Any]:
        if isinstance(self.error, ParcelError):
            return {"ok": False, "error": self.error.to_dict()}
        return {
            "ok": False,
            "error": {"error_type": type(self.error).__name__, "message": str(self.error)},
        }


Result = Union[Ok[T], Err[T]]


def try_result(f: Callable[[], T]) -> Result[T]:
    """
    Run a decode and wrap its outcome.

    Only ParcelError subclasses are turned into Err; anything else is a bug
    and propagates.

    Args:
        f: Zero-argument callable, usually a lambda around a decode call

    Returns:
        Ok with the return value, or Err with the ParcelError raised
    """
    try:
        return Ok(f())
    except ParcelError as e:
        return Err(e)


__all__ = ["Ok", "Err", "Result", "try_result"]
