"""
Bundle decoding: length-prefixed maps from string keys to parcel values.

Wire format (as written by writeTypedObject):

    i32 present   must be 1
    i32 length    bytes after this field; 0 means empty, nothing follows
    i32 magic     'BNDL' (Java) or 'BNDN' (native)
    i32 count
    count × ( string key | tagged value )

Examples:
    >>> bundle = Bundle.from_bytes(payload, registry)      # doctest: +SKIP
    >>> bundle["timestamps"]                               # doctest: +SKIP
    LongArray(values=(1000, 2000))

Guardrails:
    - Duplicate keys keep the last value
    - An empty bundle leaves whatever follows it unread
    - Iteration order is not part of the contract
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from parcelspine.core.errors import FramingError, LengthMismatchError, ParcelError
from parcelspine.core.logging import get_logger
from parcelspine.core.result import Result, try_result
from parcelspine.core.settings import DecoderSettings, get_settings
from parcelspine.parcel.creators import CreatorRegistry, default_registry
from parcelspine.parcel.cursor import ParcelCursor, ParcelReader
from parcelspine.parcel.strings import read_required_string
from parcelspine.parcel.values import DynamicValue, read_value

logger = get_logger(__name__)

BUNDLE_MAGIC = 0x4C444E42  # 'B' 'N' 'D' 'L'
BUNDLE_MAGIC_NATIVE = 0x4C444E44  # 'B' 'N' 'D' 'N'
KNOWN_MAGICS = frozenset({BUNDLE_MAGIC, BUNDLE_MAGIC_NATIVE})


class Bundle(Mapping[str, DynamicValue]):
    """Read-only mapping of decoded bundle entries."""

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, DynamicValue] | None = None):
        self._entries: dict[str, DynamicValue] = dict(entries or {})

    def __getitem__(self, key: str) -> DynamicValue:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Bundle):
            return self._entries == other._entries
        if isinstance(other, Mapping):
            return self._entries == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Bundle({self._entries!r})"

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        registry: CreatorRegistry | None = None,
        settings: DecoderSettings | None = None,
    ) -> Bundle:
        """Decode a bundle from the start of ``data``."""
        return read_bundle(ParcelCursor(data), registry, settings)


def read_bundle(
    cursor: ParcelReader,
    registry: CreatorRegistry | None = None,
    settings: DecoderSettings | None = None,
) -> Bundle:
    """Read a nullable-wrapped bundle at the cursor.

    Args:
        cursor: Reader positioned at the presence flag
        registry: Creators for parcelable entries (default registry if None)
        settings: Strictness knobs (process settings if None)

    Raises:
        FramingError: Presence flag, negative length/count, null key,
            unknown magic under strict_magic, length mismatch under
            verify_bundle_length
        TruncationError, EncodingError, CreatorNotFoundError,
        UnsupportedValueError: Propagated from entry decoding
    """
    settings = settings if settings is not None else get_settings()
    registry = registry if registry is not None else default_registry()

    position = cursor.position()
    present = cursor.read_i32()
    if present != 1:
        raise FramingError(
            f"Bundle presence flag must be 1, got {present}", position=position
        )

    position = cursor.position()
    length = cursor.read_i32()
    if length < 0:
        raise FramingError(f"Bad bundle length {length}", position=position)
    if length == 0:
        return Bundle()
    start = cursor.position()

    magic = cursor.read_i32()
    if magic not in KNOWN_MAGICS:
        if settings.strict_magic:
            raise FramingError(
                f"Bad bundle magic {magic:#x}", position=start
            ).with_context(magic=magic)
        logger.debug("bundle_magic_unknown", magic=magic, position=start)

    position = cursor.position()
    count = cursor.read_i32()
    if count < 0:
        raise FramingError(f"Negative bundle entry count {count}", position=position)

    entries: dict[str, DynamicValue] = {}
    for _ in range(count):
        key = read_required_string(cursor, "bundle key")
        try:
            entries[key] = read_value(cursor, registry)
        except ParcelError as e:
            if e.context.key is None:
                e.with_context(key=key)
            raise

    end = cursor.position()
    if settings.verify_bundle_length and end != start + length:
        raise LengthMismatchError(start + length, end, position=start)

    logger.debug("bundle_decoded", entries=len(entries), length=length)
    return Bundle(entries)


def decode_bundle_result(
    data: bytes,
    registry: CreatorRegistry | None = None,
    settings: DecoderSettings | None = None,
) -> Result[Bundle]:
    """Decode a bundle, returning Ok(bundle) or Err(ParcelError)."""
    result = try_result(lambda: Bundle.from_bytes(data, registry, settings))
    if result.is_err():
        logger.warning("bundle_decode_failed", **result.to_dict()["error"])
    return result


__all__ = [
    "BUNDLE_MAGIC",
    "BUNDLE_MAGIC_NATIVE",
    "KNOWN_MAGICS",
    "Bundle",
    "read_bundle",
    "decode_bundle_result",
]
