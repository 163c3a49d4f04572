"""Android runtime helpers for device-trust.

This package contains *thin* wrappers around adb so that probes and the
inventory scanner read real device state through one bounded, auditable
surface.
"""

from __future__ import annotations

from device_trust.runtime.android.controller import (
    AdbResult,
    AndroidController,
    AndroidControllerError,
)

__all__ = ["AdbResult", "AndroidController", "AndroidControllerError"]
