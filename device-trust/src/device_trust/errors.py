"""Exception hierarchy for device-trust.

Local failures (one probe, one package) never surface as exceptions; they are
converted to unknown signals or skipped records at the smallest boundary.
Only the conditions below cross the public API.
"""

from __future__ import annotations


class DeviceTrustError(RuntimeError):
    """Base class for all device-trust errors."""


class DeviceUnavailableError(DeviceTrustError):
    """Raised when the device shell cannot be reached at all."""


class InventoryUnavailableError(DeviceTrustError):
    """Raised when the installed-package list cannot be obtained."""


class ConfigError(DeviceTrustError):
    """Raised when a config file is missing, malformed or fails validation."""


__all__ = [
    "ConfigError",
    "DeviceTrustError",
    "DeviceUnavailableError",
    "InventoryUnavailableError",
]
