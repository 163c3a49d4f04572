"""Probe interfaces.

A probe checks one trust-relevant fact and yields a `TrustSignal`, or `None`
when the fact cannot be evaluated on this device ("unknown"). Probes are
read-only and must not depend on each other's results.

A probe may let a controller transport error escape; the aggregator turns it
into "unknown" for that signal alone.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

from device_trust.probes.markers import DEFAULT_MARKERS, MarkerTables

KIND_BOOLEAN = "boolean"
KIND_ENUM = "enum"
KIND_TEXT = "text"

SignalValue = Union[bool, str]


@dataclass(frozen=True)
class TrustSignal:
    name: str
    kind: str
    value: SignalValue

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "kind": self.kind, "value": self.value}


def boolean_signal(name: str, value: bool) -> TrustSignal:
    return TrustSignal(name=name, kind=KIND_BOOLEAN, value=bool(value))


def enum_signal(name: str, value: str) -> TrustSignal:
    return TrustSignal(name=name, kind=KIND_ENUM, value=str(value))


def text_signal(name: str, value: str) -> TrustSignal:
    return TrustSignal(name=name, kind=KIND_TEXT, value=str(value))


@dataclass(frozen=True)
class ProbeContext:
    """Inputs passed to a probe."""

    controller: Any
    markers: MarkerTables = field(default=DEFAULT_MARKERS)
    selinux_fallback_timeout_s: float = 5.0


ProbeResult = Optional[TrustSignal]
Probe = Callable[[ProbeContext], ProbeResult]


_BOOL_TRUE = {"1", "true", "on", "enabled", "yes"}
_BOOL_FALSE = {"0", "false", "off", "disabled", "no"}


def parse_boolish(text: Optional[str]) -> Optional[bool]:
    val = str(text or "").strip().lower()
    if val in _BOOL_TRUE:
        return True
    if val in _BOOL_FALSE:
        return False
    return None
