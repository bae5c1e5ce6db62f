"""String field decoders.

Two string encodings share the wire:

    String8 : u32 len | len UTF-8 bytes | NUL | pad to word
              occupies 4 * ceil((len + 1) / 4) bytes after the length
    string  : i32 len | len UTF-8 bytes | pad to word
              occupies 4 * ceil(len / 4) bytes; len == -1 is a null string

Bundle keys and parcelable type names use the plain form; record fields
written with writeString8 use String8.
"""

from __future__ import annotations

from parcelspine.core.errors import EncodingError, FramingError, TruncationError
from parcelspine.parcel.cursor import WORD_SIZE, ParcelReader

NULL_STRING_LENGTH = -1


def _decode_utf8(raw: bytes, position: int) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise EncodingError(
            "String field is not valid UTF-8", position=position, cause=e
        ) from e


def read_string8(cursor: ParcelReader) -> str:
    """Read a NUL-terminated, word-padded String8 field."""
    start = cursor.position()
    length = cursor.read_u32()
    words = (length + 1 + WORD_SIZE - 1) // WORD_SIZE
    if words * WORD_SIZE > cursor.data_avail():
        raise TruncationError(
            f"String8 of length {length} overruns parcel", position=start
        )
    chars = cursor.read_words(words)
    if chars[length] != 0:
        raise EncodingError(
            f"String8 of length {length} is missing its NUL terminator",
            position=start,
        )
    return _decode_utf8(chars[:length], start)


def read_string(cursor: ParcelReader) -> str | None:
    """Read a length-prefixed, word-padded string; ``None`` for a null string.

    ``len`` counts UTF-8 bytes and no terminator follows them. This is the
    layout of this format's wire table, not the transport's native string
    encoding: buffers captured from a platform binder, whose strings are
    UTF-16 with a NUL, need that transport's own reader for keys and type
    names.
    """
    start = cursor.position()
    length = cursor.read_i32()
    if length == NULL_STRING_LENGTH:
        return None
    if length < 0:
        raise FramingError(f"Bad string length {length}", position=start)
    words = (length + WORD_SIZE - 1) // WORD_SIZE
    if words * WORD_SIZE > cursor.data_avail():
        raise TruncationError(f"String of length {length} overruns parcel", position=start)
    return _decode_utf8(cursor.read_words(words)[:length], start)


def read_required_string(cursor: ParcelReader, what: str = "string") -> str:
    """Read a plain string that must not be null."""
    start = cursor.position()
    value = read_string(cursor)
    if value is None:
        raise FramingError(f"Unexpected null {what}", position=start)
    return value


__all__ = ["read_string8", "read_string", "read_required_string", "NULL_STRING_LENGTH"]
