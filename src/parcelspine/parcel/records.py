"""Parcelable records decoded through the creator registry.

Each record class is its own creator: ``create_from_parcel`` is a
classmethod, so ``registry.register(PowerMonitor.TYPE_NAME, PowerMonitor)``
is enough. Callers recover the concrete type with ``match`` or
``isinstance`` on these classes.

Records that are known to appear but have no model here can be captured
with ``OpaqueCreator``, which keeps their word-aligned payload as bytes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import ClassVar

from parcelspine.core.errors import ConfigError, FramingError
from parcelspine.parcel.cursor import WORD_SIZE, ParcelReader, padded_size
from parcelspine.parcel.strings import read_string8


class Parcelable:
    """Base class of every record a parcelable array can hold."""

    TYPE_NAME: ClassVar[str] = ""

    @property
    def type_name(self) -> str:
        return self.TYPE_NAME


class PowerMonitorType(IntEnum):
    """Kind of power monitor reported by the power stats service."""

    # Subsystem-level monitor; may be a pass-through rail or a modeled value.
    CONSUMER = 0
    # Directly measured, device-specific power rail.
    MEASUREMENT = 1


@dataclass(frozen=True)
class PowerMonitor(Parcelable):
    """``android.os.PowerMonitor``: index, type, String8 name."""

    TYPE_NAME: ClassVar[str] = "android.os.PowerMonitor"

    index: int
    type: PowerMonitorType
    name: str

    @classmethod
    def create_from_parcel(cls, cursor: ParcelReader) -> PowerMonitor:
        index = cursor.read_i32()
        position = cursor.position()
        raw_type = cursor.read_i32()
        try:
            monitor_type = PowerMonitorType(raw_type)
        except ValueError as e:
            raise FramingError(
                f"Unknown PowerMonitorType {raw_type}",
                position=position,
                type_name=cls.TYPE_NAME,
                cause=e,
            ) from e
        return cls(index=index, type=monitor_type, name=read_string8(cursor))


@dataclass(frozen=True)
class OpaqueParcelable(Parcelable):
    """A record kept as raw bytes because no model exists for it."""

    name: str
    payload: bytes

    @property
    def type_name(self) -> str:
        return self.name


class OpaqueCreator:
    """Creator for fixed-size records that should be carried, not parsed."""

    def __init__(self, type_name: str, size: int):
        if size < 0:
            raise ConfigError(
                f"Record size must be non-negative, got {size}", type_name=type_name
            )
        self.type_name = type_name
        self.size = padded_size(size)

    def __repr__(self) -> str:
        return f"OpaqueCreator({self.type_name!r}, size={self.size})"

    def create_from_parcel(self, cursor: ParcelReader) -> OpaqueParcelable:
        payload = cursor.read_words(self.size // WORD_SIZE)
        return OpaqueParcelable(name=self.type_name, payload=payload)


__all__ = [
    "Parcelable",
    "PowerMonitor",
    "PowerMonitorType",
    "OpaqueParcelable",
    "OpaqueCreator",
]
