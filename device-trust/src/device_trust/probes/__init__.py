"""Trust probes.

The stable entrypoints are `get_probes` / `available_probes`; probe modules
register themselves under the signal name they produce.
"""

from __future__ import annotations

from device_trust.probes.base import (
    KIND_BOOLEAN,
    KIND_ENUM,
    KIND_TEXT,
    Probe,
    ProbeContext,
    ProbeResult,
    TrustSignal,
)
from device_trust.probes.markers import DEFAULT_MARKERS, MarkerTables
from device_trust.probes.registry import available_probes, get_probes, register_probe

__all__ = [
    "DEFAULT_MARKERS",
    "KIND_BOOLEAN",
    "KIND_ENUM",
    "KIND_TEXT",
    "MarkerTables",
    "Probe",
    "ProbeContext",
    "ProbeResult",
    "TrustSignal",
    "available_probes",
    "get_probes",
    "register_probe",
]
