"""Parcel value and bundle decoding.

Architecture::

    cursor.py     ParcelCursor: bounds-checked little-endian reads
    strings.py    String8 and plain string fields
    records.py    Parcelable records (PowerMonitor, OpaqueParcelable)
    creators.py   CreatorRegistry: type name -> creator
    values.py     Tagged values and the tag dispatcher
    bundle.py     Bundle decoding
"""

from parcelspine.parcel.bundle import (
    BUNDLE_MAGIC,
    BUNDLE_MAGIC_NATIVE,
    Bundle,
    decode_bundle_result,
    read_bundle,
)
from parcelspine.parcel.creators import (
    CreatorRegistry,
    ParcelableCreator,
    build_registry,
    default_registry,
)
from parcelspine.parcel.cursor import ParcelCursor, ParcelReader
from parcelspine.parcel.records import (
    OpaqueCreator,
    OpaqueParcelable,
    Parcelable,
    PowerMonitor,
    PowerMonitorType,
)
from parcelspine.parcel.strings import read_string, read_string8
from parcelspine.parcel.values import (
    BooleanArray,
    DynamicValue,
    LongArray,
    Null,
    ParcelableArray,
    ValueType,
    read_value,
)

__all__ = [
    "BUNDLE_MAGIC",
    "BUNDLE_MAGIC_NATIVE",
    "Bundle",
    "decode_bundle_result",
    "read_bundle",
    "CreatorRegistry",
    "ParcelableCreator",
    "build_registry",
    "default_registry",
    "ParcelCursor",
    "ParcelReader",
    "OpaqueCreator",
    "OpaqueParcelable",
    "Parcelable",
    "PowerMonitor",
    "PowerMonitorType",
    "read_string",
    "read_string8",
    "BooleanArray",
    "DynamicValue",
    "LongArray",
    "Null",
    "ParcelableArray",
    "ValueType",
    "read_value",
]
