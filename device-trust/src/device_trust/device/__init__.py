"""One-shot device snapshot reads."""

from __future__ import annotations

from device_trust.device.snapshot import (
    check_sensor,
    get_battery_info,
    get_ram_info,
    get_sensors_info,
    get_storage_info,
)

__all__ = [
    "check_sensor",
    "get_battery_info",
    "get_ram_info",
    "get_sensors_info",
    "get_storage_info",
]
