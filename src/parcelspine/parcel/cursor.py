"""Positioned, bounds-checked reader over a received parcel buffer.

Wire format:
    Little-endian, every field starts on a 4-byte boundary. 32-bit reads
    consume one word, 64-bit reads two.

The transport hands over the whole buffer before decoding starts, so reads
never block; running off the end is a malformed message and raises
TruncationError instead of returning short data.
"""

from __future__ import annotations

import struct
from typing import Protocol, runtime_checkable

from parcelspine.core.errors import FramingError, TruncationError

_I32 = struct.Struct("<i")
_U32 = struct.Struct("<I")
_I64 = struct.Struct("<q")

WORD_SIZE = _I32.size


@runtime_checkable
class ParcelReader(Protocol):
    """Structural contract every decoder reads through."""

    def read_i32(self) -> int: ...

    def read_u32(self) -> int: ...

    def read_i64(self) -> int: ...

    def read_words(self, count: int) -> bytes: ...

    def read_bytes(self, size: int) -> bytes: ...

    def position(self) -> int: ...

    def set_position(self, position: int) -> None: ...

    def data_size(self) -> int: ...

    def data_avail(self) -> int: ...


class ParcelCursor:
    """Reader over an immutable byte buffer.

    Example:
        >>> cursor = ParcelCursor(b"\\x01\\x00\\x00\\x00")
        >>> cursor.read_i32()
        1
        >>> cursor.data_avail()
        0
    """

    __slots__ = ("_data", "_pos")

    def __init__(self, data: bytes | bytearray | memoryview, position: int = 0):
        self._data = memoryview(bytes(data))
        self._pos = 0
        self.set_position(position)

    def __repr__(self) -> str:
        return f"ParcelCursor(position={self._pos}, size={len(self._data)})"

    def position(self) -> int:
        return self._pos

    def set_position(self, position: int) -> None:
        if position < 0 or position > len(self._data):
            raise FramingError(
                f"Cannot seek to {position} in a {len(self._data)} byte parcel",
                position=self._pos,
            )
        self._pos = position

    def data_size(self) -> int:
        return len(self._data)

    def data_avail(self) -> int:
        return len(self._data) - self._pos

    def _take(self, size: int) -> memoryview:
        if size < 0:
            raise FramingError(f"Negative read size {size}", position=self._pos)
        if size > self.data_avail():
            raise TruncationError(
                f"Read of {size} bytes overruns parcel ({self.data_avail()} remaining)",
                position=self._pos,
            )
        view = self._data[self._pos : self._pos + size]
        self._pos += size
        return view

    def read_i32(self) -> int:
        return _I32.unpack(self._take(_I32.size))[0]

    def read_u32(self) -> int:
        return _U32.unpack(self._take(_U32.size))[0]

    def read_i64(self) -> int:
        return _I64.unpack(self._take(_I64.size))[0]

    def read_words(self, count: int) -> bytes:
        """Read ``count`` whole 32-bit words as raw bytes."""
        return bytes(self._take(count * WORD_SIZE))

    def read_bytes(self, size: int) -> bytes:
        """Read exactly ``size`` bytes; the caller handles any padding."""
        return bytes(self._take(size))


def padded_size(size: int) -> int:
    """Round ``size`` up to the next word boundary."""
    return (size + WORD_SIZE - 1) // WORD_SIZE * WORD_SIZE


__all__ = ["ParcelReader", "ParcelCursor", "WORD_SIZE", "padded_size"]
