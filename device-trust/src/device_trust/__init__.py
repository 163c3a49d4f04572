"""Device trust diagnostics.

Provides:
- trust signal probes over adb (root, boot, build, SELinux, mounts, ...)
- an integrity score derived from those signals
- an installed-application inventory (storage footprint, sensitive grants)

Every operation is read-only; nothing is written to the device.
"""

__all__ = [
    "api",
    "cli",
    "config",
    "device",
    "errors",
    "inventory",
    "probes",
    "runtime",
    "trust",
]
