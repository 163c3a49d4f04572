"""Integrity scorer.

A pure fold over independent rules: each rule inspects one signal and, when
its condition holds, contributes a fixed deduction. Rule order only affects
the order of the explanation list, never the score. An absent (unknown)
signal never triggers a rule.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Tuple

from device_trust.probes.base import TrustSignal

MAX_SCORE = 100
MIN_SCORE = 0


@dataclass(frozen=True)
class Deduction:
    reason: str
    points: int

    def to_dict(self) -> dict[str, Any]:
        return {"reason": self.reason, "points": self.points}


@dataclass(frozen=True)
class ScoreRule:
    reason: str
    signal: str
    triggered_when: bool
    points: int

    def applies(self, signals: Mapping[str, TrustSignal]) -> bool:
        sig = signals.get(self.signal)
        if sig is None or not isinstance(sig.value, bool):
            return False
        return sig.value is self.triggered_when


SCORE_RULES: Tuple[ScoreRule, ...] = (
    ScoreRule("system_partition_writable", "systemReadOnly", False, 25),
    ScoreRule("unofficial_build_keys", "officialBuild", False, 20),
    ScoreRule("selinux_not_enforcing", "seLinuxEnforcing", False, 20),
    ScoreRule("system_modified", "systemModified", True, 25),
    ScoreRule("storage_not_encrypted", "isEncrypted", False, 10),
)

SCORED_SIGNALS: Tuple[str, ...] = tuple(rule.signal for rule in SCORE_RULES)


def score_signals(
    signals: Mapping[str, TrustSignal],
    *,
    rules: Tuple[ScoreRule, ...] = SCORE_RULES,
) -> Tuple[int, Tuple[Deduction, ...]]:
    """Return `(score, deductions)` for a signal map."""

    deductions = tuple(
        Deduction(reason=rule.reason, points=rule.points)
        for rule in rules
        if rule.applies(signals)
    )
    score = MAX_SCORE - sum(d.points for d in deductions)
    return max(MIN_SCORE, min(MAX_SCORE, score)), deductions
