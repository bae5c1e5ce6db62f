"""
Dynamically tagged parcel values and the tag dispatcher.

A value on the wire is an ``i32`` tag followed by a payload whose layout the
tag selects. Container-like tags additionally carry an ``i32`` byte length
right after the tag so that readers which do not understand them could skip
them; this module checks that length instead of trusting it.

Architecture:
    ::

        read_value(cursor, registry)
            │
            ├─ tag = read_i32()
            ├─ tag in LENGTH_PREFIXED_TYPES?
            │     length = read_i32(); start = position()
            │     value = read_value_payload(...)
            │     position() == start + length  or LengthMismatchError
            └─ otherwise read_value_payload(...)

        read_value_payload
            PARCELABLEARRAY → ParcelableArray   (creator registry lookups)
            LONGARRAY       → LongArray
            BOOLEANARRAY    → BooleanArray | Null
            anything else   → UnsupportedValueError(tag)

Examples:
    >>> from parcelspine.parcel.cursor import ParcelCursor
    >>> import struct
    >>> data = struct.pack("<iiqq", ValueType.LONGARRAY, 2, 7, 42)
    >>> read_value(ParcelCursor(data))
    LongArray(values=(7, 42))

Guardrails:
    ❌ DON'T: Guess the layout of a tag that has no routine here
    ✅ DO: Raise UnsupportedValueError carrying the tag

    ❌ DON'T: Allocate from a count read off the wire before checking it
    ✅ DO: Compare counts against data_avail() first
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import TypeVar, Union

from parcelspine.core.errors import (
    FramingError,
    LengthMismatchError,
    TruncationError,
    UnsupportedValueError,
)
from parcelspine.core.logging import get_logger
from parcelspine.parcel.creators import CreatorRegistry, default_registry
from parcelspine.parcel.cursor import WORD_SIZE, ParcelReader
from parcelspine.parcel.records import Parcelable
from parcelspine.parcel.strings import read_required_string

logger = get_logger(__name__)

P = TypeVar("P", bound=Parcelable)

_LONG_SIZE = 8


class ValueType(IntEnum):
    """Value tags, in sync with the platform's ParcelValTypes table."""

    NULL = -1
    STRING = 0
    INTEGER = 1
    MAP = 2  # length-prefixed
    BUNDLE = 3
    PARCELABLE = 4  # length-prefixed
    SHORT = 5
    LONG = 6
    FLOAT = 7
    DOUBLE = 8
    BOOLEAN = 9
    CHARSEQUENCE = 10
    LIST = 11  # length-prefixed
    SPARSEARRAY = 12  # length-prefixed
    BYTEARRAY = 13
    STRINGARRAY = 14
    IBINDER = 15
    PARCELABLEARRAY = 16  # length-prefixed
    OBJECTARRAY = 17  # length-prefixed
    INTARRAY = 18
    LONGARRAY = 19
    BYTE = 20
    SERIALIZABLE = 21  # length-prefixed
    SPARSEBOOLEANARRAY = 22
    BOOLEANARRAY = 23
    CHARSEQUENCEARRAY = 24
    PERSISTABLEBUNDLE = 25
    SIZE = 26
    SIZEF = 27
    DOUBLEARRAY = 28
    CHAR = 29
    SHORTARRAY = 30
    CHARARRAY = 31
    FLOATARRAY = 32


# Custom types and containers of custom types. BUNDLE is excluded because a
# bundle already carries its own length.
LENGTH_PREFIXED_TYPES = frozenset(
    {
        ValueType.MAP,
        ValueType.PARCELABLE,
        ValueType.LIST,
        ValueType.SPARSEARRAY,
        ValueType.PARCELABLEARRAY,
        ValueType.OBJECTARRAY,
        ValueType.SERIALIZABLE,
    }
)


def is_length_prefixed(tag: int) -> bool:
    return tag in LENGTH_PREFIXED_TYPES


# =============================================================================
# VALUE VARIANTS
# =============================================================================


@dataclass(frozen=True)
class Null:
    """Absent value, also produced for an out-of-range boolean array."""


@dataclass(frozen=True)
class ParcelableArray:
    """Ordered records, each decoded by the creator named in the stream."""

    items: tuple[Parcelable, ...]

    def __len__(self) -> int:
        return len(self.items)

    def of_type(self, cls: type[P]) -> list[P]:
        """Return the items as ``cls`` instances.

        Raises:
            FramingError: If any item is not a ``cls``
        """
        for item in self.items:
            if not isinstance(item, cls):
                raise FramingError(
                    f"Expected {cls.__name__} records, found {type(item).__name__}",
                    type_name=item.type_name,
                )
        return list(self.items)


@dataclass(frozen=True)
class BooleanArray:
    values: tuple[bool, ...]


@dataclass(frozen=True)
class LongArray:
    values: tuple[int, ...]


DynamicValue = Union[Null, ParcelableArray, BooleanArray, LongArray]


# =============================================================================
# PAYLOAD ROUTINES
# =============================================================================


def _read_count(cursor: ParcelReader, element_size: int, what: str) -> int:
    position = cursor.position()
    count = cursor.read_i32()
    if count < 0:
        raise FramingError(f"Negative {what} count {count}", position=position)
    if count > cursor.data_avail() // element_size:
        raise TruncationError(
            f"{what} count {count} exceeds remaining parcel data "
            f"({cursor.data_avail()} bytes)",
            position=position,
        )
    return count


def _read_parcelable_array(
    cursor: ParcelReader, registry: CreatorRegistry
) -> ParcelableArray:
    # Every element starts with at least its type name length word.
    count = _read_count(cursor, WORD_SIZE, "parcelable array")
    items: list[Parcelable] = []
    for _ in range(count):
        position = cursor.position()
        type_name = read_required_string(cursor, "parcelable type name")
        creator = registry.lookup(type_name)
        try:
            items.append(creator.create_from_parcel(cursor))
        except FramingError as e:
            if e.context.type_name is None:
                e.with_context(type_name=type_name)
            raise
        logger.debug("parcelable_read", type_name=type_name, position=position)
    return ParcelableArray(tuple(items))


def _read_long_array(cursor: ParcelReader) -> LongArray:
    count = _read_count(cursor, _LONG_SIZE, "long array")
    return LongArray(tuple(cursor.read_i64() for _ in range(count)))


def _read_boolean_array(cursor: ParcelReader) -> BooleanArray | Null:
    position = cursor.position()
    count = cursor.read_i32()
    if count < 0 or count > cursor.data_avail() // WORD_SIZE:
        logger.debug(
            "boolean_array_out_of_range",
            count=count,
            available=cursor.data_avail(),
            position=position,
        )
        return Null()
    return BooleanArray(tuple(cursor.read_i32() != 0 for _ in range(count)))


def read_value_payload(
    cursor: ParcelReader, tag: int, registry: CreatorRegistry | None = None
) -> DynamicValue:
    """Decode the payload of an already-read tag (and length, if prefixed)."""
    if tag == ValueType.PARCELABLEARRAY:
        return _read_parcelable_array(
            cursor, registry if registry is not None else default_registry()
        )
    if tag == ValueType.LONGARRAY:
        return _read_long_array(cursor)
    if tag == ValueType.BOOLEANARRAY:
        return _read_boolean_array(cursor)
    try:
        name = ValueType(tag).name
    except ValueError:
        name = None
    raise UnsupportedValueError(tag, name, position=cursor.position())


def read_value(
    cursor: ParcelReader, registry: CreatorRegistry | None = None
) -> DynamicValue:
    """Read one tagged value, including its length prefix when it has one."""
    tag_position = cursor.position()
    tag = cursor.read_i32()
    if not is_length_prefixed(tag):
        return read_value_payload(cursor, tag, registry)

    length_position = cursor.position()
    length = cursor.read_i32()
    if length < 0:
        raise FramingError(
            f"Negative length prefix {length}", position=length_position, tag=tag
        )
    start = cursor.position()
    value = read_value_payload(cursor, tag, registry)
    end = cursor.position()
    if end != start + length:
        raise LengthMismatchError(start + length, end, position=tag_position, tag=tag)
    return value


__all__ = [
    "ValueType",
    "LENGTH_PREFIXED_TYPES",
    "is_length_prefixed",
    "Null",
    "ParcelableArray",
    "BooleanArray",
    "LongArray",
    "DynamicValue",
    "read_value",
    "read_value_payload",
]
