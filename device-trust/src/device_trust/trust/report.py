"""TrustReport value object."""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from device_trust.probes.base import SignalValue, TrustSignal
from device_trust.trust.scorer import Deduction, score_signals


@dataclass(frozen=True)
class TrustReport:
    """Known signals plus the derived score; unknown signals are absent."""

    signals: Mapping[str, TrustSignal]
    score: int
    deductions: Tuple[Deduction, ...] = field(default_factory=tuple)
    unknown: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_signals(
        cls, signals: Mapping[str, TrustSignal], *, unknown: Tuple[str, ...] = ()
    ) -> "TrustReport":
        score, deductions = score_signals(signals)
        return cls(
            signals=MappingProxyType(dict(signals)),
            score=score,
            deductions=deductions,
            unknown=tuple(unknown),
        )

    def value(self, name: str, default: Optional[SignalValue] = None) -> Optional[SignalValue]:
        sig = self.signals.get(name)
        return default if sig is None else sig.value

    def is_known(self, name: str) -> bool:
        return name in self.signals

    def digest(self) -> str:
        """SHA-256 over the known signal values; probe order does not matter."""

        values = {name: sig.value for name, sig in self.signals.items()}
        encoded = json.dumps(values, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(encoded.encode("utf-8")).hexdigest()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "signals": {name: sig.to_dict() for name, sig in sorted(self.signals.items())},
            "score": self.score,
            "deductions": [d.to_dict() for d in self.deductions],
            "unknown": list(self.unknown),
        }
