"""Probe registry.

Adding a new signal should not require changing the aggregator: probe modules
register themselves here under the signal name they produce.
"""

from __future__ import annotations

import importlib
from typing import Callable, Dict, Iterable, List

from device_trust.probes.base import Probe

_REGISTRY: Dict[str, Probe] = {}
_BUILTIN_PROBE_MODULES = [
    "device_trust.probes.root",
    "device_trust.probes.boot",
    "device_trust.probes.developer",
    "device_trust.probes.build",
    "device_trust.probes.mounts",
    "device_trust.probes.selinux",
    "device_trust.probes.modification",
    "device_trust.probes.encryption",
]
_BUILTINS_LOADED = False


def register_probe(signal_name: str) -> Callable[[Probe], Probe]:
    """Decorator to register the probe producing `signal_name`."""

    def _decorator(probe: Probe) -> Probe:
        if signal_name in _REGISTRY:
            raise ValueError(f"duplicate probe for signal: {signal_name}")
        _REGISTRY[signal_name] = probe
        return probe

    return _decorator


def available_probes() -> Dict[str, Probe]:
    load_builtin_probes()
    return dict(_REGISTRY)


def get_probes(signal_names: Iterable[str]) -> List[tuple[str, Probe]]:
    """Resolve signal names to probes, preserving the requested order."""

    load_builtin_probes()
    out: List[tuple[str, Probe]] = []
    for name in signal_names:
        probe = _REGISTRY.get(name)
        if probe is None:
            raise ValueError(f"unknown signal: {name}")
        out.append((name, probe))
    return out


def load_builtin_probes() -> None:
    """Import built-in probe modules so they can register themselves."""

    global _BUILTINS_LOADED
    if _BUILTINS_LOADED:
        return

    for module_name in _BUILTIN_PROBE_MODULES:
        importlib.import_module(module_name)
    _BUILTINS_LOADED = True
