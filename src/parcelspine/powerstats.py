"""Payload extraction for the power stats service's result receivers.

``IPowerStatsService`` answers ``getSupportedPowerMonitors`` and
``getPowerMonitorReadings`` by calling ``IResultReceiver.send(code, bundle)``.
The stub layer decodes the bundle with ``read_bundle`` and hands it here.
"""

from __future__ import annotations

from dataclasses import dataclass

from parcelspine.core.errors import FramingError, ResultCodeError
from parcelspine.core.logging import get_logger
from parcelspine.parcel.bundle import Bundle
from parcelspine.parcel.records import PowerMonitor
from parcelspine.parcel.values import DynamicValue, LongArray, ParcelableArray

logger = get_logger(__name__)

KEY_MONITORS = "monitors"
KEY_TIMESTAMPS = "timestamps"
KEY_ENERGY = "energy"

RESULT_OK = 0


@dataclass(frozen=True)
class PowerMonitorReadings:
    """Parallel timestamp/energy series, one slot per requested monitor."""

    timestamps_ms: tuple[int, ...]
    energy_uws: tuple[int, ...]

    def __post_init__(self) -> None:
        if len(self.timestamps_ms) != len(self.energy_uws):
            raise FramingError(
                f"{len(self.timestamps_ms)} timestamps but {len(self.energy_uws)} energy values"
            )

    def pairs(self) -> list[tuple[int, int]]:
        return list(zip(self.timestamps_ms, self.energy_uws))


def _check_code(code: int) -> None:
    if code != RESULT_OK:
        logger.warning("result_receiver_error", code=code)
        raise ResultCodeError(code)


def _entry(bundle: Bundle, key: str, expected: type) -> DynamicValue:
    if key not in bundle:
        raise FramingError(f"Bundle has no `{key}` entry").with_context(key=key)
    value = bundle[key]
    if not isinstance(value, expected):
        raise FramingError(
            f"Bundle entry `{key}` must be {expected.__name__}, got {type(value).__name__}"
        ).with_context(key=key)
    return value


def supported_power_monitors(code: int, bundle: Bundle) -> list[PowerMonitor]:
    """Monitors announced in reply to getSupportedPowerMonitors."""
    _check_code(code)
    monitors = _entry(bundle, KEY_MONITORS, ParcelableArray)
    return monitors.of_type(PowerMonitor)


def power_monitor_readings(code: int, bundle: Bundle) -> PowerMonitorReadings:
    """Readings sent in reply to getPowerMonitorReadings."""
    _check_code(code)
    timestamps = _entry(bundle, KEY_TIMESTAMPS, LongArray)
    energy = _entry(bundle, KEY_ENERGY, LongArray)
    return PowerMonitorReadings(timestamps_ms=timestamps.values, energy_uws=energy.values)


__all__ = [
    "KEY_MONITORS",
    "KEY_TIMESTAMPS",
    "KEY_ENERGY",
    "PowerMonitorReadings",
    "supported_power_monitors",
    "power_monitor_readings",
]
