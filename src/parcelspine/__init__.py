"""parcelspine -- decoder for self-describing parcel values and bundles.

Turns raw IPC reply buffers into typed values without knowing every
possible entry up front; polymorphic records are resolved by the type name
written inline in the stream.

    >>> from parcelspine import Bundle, build_registry
    >>> bundle = Bundle.from_bytes(buffer, build_registry())   # doctest: +SKIP
"""

from parcelspine.parcel import (
    BooleanArray,
    Bundle,
    CreatorRegistry,
    LongArray,
    Null,
    ParcelableArray,
    ParcelCursor,
    PowerMonitor,
    ValueType,
    build_registry,
    decode_bundle_result,
    default_registry,
    read_bundle,
    read_value,
)

__version__ = "0.1.0"

__all__ = [
    "BooleanArray",
    "Bundle",
    "CreatorRegistry",
    "LongArray",
    "Null",
    "ParcelableArray",
    "ParcelCursor",
    "PowerMonitor",
    "ValueType",
    "build_registry",
    "decode_bundle_result",
    "default_registry",
    "read_bundle",
    "read_value",
]
