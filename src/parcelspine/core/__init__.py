"""Parcelspine Core -- errors, logging, settings and result primitives.

Architecture::

    errors.py      Decode error taxonomy (ParcelError and subclasses)
    result.py      Ok / Err envelope (try_result)
    logging.py     Structured logging via structlog
    settings.py    DecoderSettings (pydantic-settings, PARCEL_ prefix)
"""

from parcelspine.core.errors import (
    CreatorNotFoundError,
    EncodingError,
    ErrorCategory,
    ErrorContext,
    FramingError,
    LengthMismatchError,
    ParcelError,
    ResultCodeError,
    TruncationError,
    UnsupportedValueError,
)
from parcelspine.core.result import Err, Ok, Result, try_result

__all__ = [
    "CreatorNotFoundError",
    "EncodingError",
    "ErrorCategory",
    "ErrorContext",
    "FramingError",
    "LengthMismatchError",
    "ParcelError",
    "ResultCodeError",
    "TruncationError",
    "UnsupportedValueError",
    "Err",
    "Ok",
    "Result",
    "try_result",
]
