"""
Structured error types for parcel decoding.

Every failure raised while turning a byte buffer into values is a
ParcelError subclass. Each error carries a category, a recoverable flag and
an ErrorContext describing where in the buffer the decode stopped, so a
caller can log it as a structured event and decide whether to drop the whole
message.

Manifesto:
    - **Typed taxonomy:** framing, truncation, unknown type, unsupported
      value and encoding failures are distinct classes
    - **Fail loudly:** malformed input never resyncs, the first error aborts
    - **Rich context:** buffer position, tag and type name travel with the error
    - **Error chaining:** the original exception is kept as cause

Architecture:
    ::

        ┌───────────────────────────────────────────────────────────┐
        │                        ParcelError                         │
        │            (category, recoverable, context, cause)         │
        ├───────────────────────────────────────────────────────────┤
        │  FramingError         TruncationError    EncodingError     │
        │  (FRAMING)            (TRUNCATION)       (ENCODING)        │
        │     │                                                      │
        │  LengthMismatchError  CreatorNotFoundError                 │
        │  ResultCodeError      (UNKNOWN_TYPE, recoverable)          │
        │                                                            │
        │  UnsupportedValueError (UNSUPPORTED)                       │
        └───────────────────────────────────────────────────────────┘

Examples:
    >>> err = TruncationError("need 4 bytes", position=12)
    >>> err.category
    <ErrorCategory.TRUNCATION: 'TRUNCATION'>
    >>> err.context.position
    12

    >>> err = CreatorNotFoundError("android.os.Unknown")
    >>> err.recoverable
    True

Guardrails:
    ❌ DON'T: Raise plain ValueError from decoding code
    ✅ DO: Pick the ParcelError subclass matching the violation

    ❌ DON'T: Catch a ParcelError and keep reading the same buffer
    ✅ DO: Treat the whole message as untrustworthy

Tags:
    error-handling, exception-hierarchy, parcel, decoding, parcelspine
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and log routing."""

    FRAMING = "FRAMING"            # Presence flag, negative length, prefix mismatch
    TRUNCATION = "TRUNCATION"      # Cursor underrun, counts beyond the buffer
    UNKNOWN_TYPE = "UNKNOWN_TYPE"  # No creator registered for a type name
    UNSUPPORTED = "UNSUPPORTED"    # Value tag not decoded by this library
    ENCODING = "ENCODING"          # Invalid UTF-8, missing terminator
    CONFIG = "CONFIG"              # Invalid decoder settings
    INTERNAL = "INTERNAL"          # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Where in the buffer a decode failed.

    Only fields that were set show up in to_dict(), so log lines stay short.

    Attributes:
        position: Cursor offset at the moment of failure
        tag: Value tag being decoded, if any
        type_name: Parcelable type name being resolved, if any
        key: Bundle key whose value was being decoded, if any
        metadata: Additional key-value pairs
    """

    position: int | None = None
    tag: int | None = None
    type_name: str | None = None
    key: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for name in ["position", "tag", "type_name", "key"]:
            value = getattr(self, name)
            if value is not None:
                result[name] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class ParcelError(Exception):
    """
    Base exception for all parcel decoding errors.

    Subclasses set ``default_category`` and ``default_recoverable``; the
    constructor accepts the most common context fields as keywords so call
    sites stay one line long.

    Examples:
        >>> err = ParcelError("bad state")
        >>> err.to_dict()["category"]
        'INTERNAL'
        >>> err.with_context(key="ids").context.key
        'ids'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_recoverable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        recoverable: bool | None = None,
        position: int | None = None,
        tag: int | None = None,
        type_name: str | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.recoverable = (
            recoverable if recoverable is not None else self.default_recoverable
        )
        self.context = context or ErrorContext()
        if position is not None:
            self.context.position = position
        if tag is not None:
            self.context.tag = tag
        if type_name is not None:
            self.context.type_name = type_name
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ParcelError:
        """
        Add context to this error (fluent API).

        Usage:
            raise FramingError("bad flag").with_context(position=0)
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for structured logging."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "recoverable": self.recoverable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# FRAMING ERRORS
# =============================================================================


class FramingError(ParcelError):
    """
    The buffer violates the structural contract of the format.

    Presence flags, negative lengths or counts, null keys and records of an
    unexpected type all land here. Never recoverable.
    """

    default_category = ErrorCategory.FRAMING


class LengthMismatchError(FramingError):
    """A length-prefixed value did not end where its prefix said it would."""

    def __init__(self, expected_end: int, actual_end: int, **kwargs: Any):
        self.expected_end = expected_end
        self.actual_end = actual_end
        super().__init__(
            f"Length prefix mismatch: expected to end at {expected_end}, ended at {actual_end}",
            **kwargs,
        )


class ResultCodeError(FramingError):
    """A result receiver was sent a code other than success."""

    def __init__(self, code: int):
        self.code = code
        super().__init__(f"Unexpected result code {code}")


# =============================================================================
# TRUNCATION ERRORS
# =============================================================================


class TruncationError(ParcelError):
    """A read or declared count goes past the end of the buffer."""

    default_category = ErrorCategory.TRUNCATION


# =============================================================================
# TYPE RESOLUTION ERRORS
# =============================================================================


class CreatorNotFoundError(ParcelError):
    """
    No creator is registered for a parcelable type name.

    Recoverable at the caller's discretion: registering the missing creator
    and decoding the message again is a legitimate response.
    """

    default_category = ErrorCategory.UNKNOWN_TYPE
    default_recoverable = True

    def __init__(self, type_name: str, **kwargs: Any):
        self.type_name = type_name
        super().__init__(
            f"No creator registered for `{type_name}`", type_name=type_name, **kwargs
        )


class UnsupportedValueError(ParcelError):
    """A value tag that the protocol knows but this library does not decode."""

    default_category = ErrorCategory.UNSUPPORTED

    def __init__(self, tag: int, name: str | None = None, **kwargs: Any):
        self.tag = tag
        if name is None:
            message = f"Unknown parcel value type {tag}"
        else:
            message = f"Unsupported parcel value type {name} ({tag})"
        super().__init__(message, tag=tag, **kwargs)


# =============================================================================
# ENCODING ERRORS
# =============================================================================


class EncodingError(ParcelError):
    """Invalid UTF-8 or a missing NUL terminator in a string field."""

    default_category = ErrorCategory.ENCODING


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(ParcelError):
    """Decoder settings or creator registrations are invalid."""

    default_category = ErrorCategory.CONFIG


def is_recoverable(error: Exception) -> bool:
    """Check if a decode error may be retried after fixing caller state."""
    if isinstance(error, ParcelError):
        return error.recoverable
    return False


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, ParcelError):
        return error.category
    if isinstance(error, UnicodeDecodeError):
        return ErrorCategory.ENCODING
    return ErrorCategory.INTERNAL


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "ParcelError",
    "FramingError",
    "LengthMismatchError",
    "ResultCodeError",
    "TruncationError",
    "CreatorNotFoundError",
    "UnsupportedValueError",
    "EncodingError",
    "ConfigError",
    "is_recoverable",
    "categorize_error",
]
