"""Device trust & integrity diagnostics (aggregator + scorer)."""

from __future__ import annotations

from device_trust.trust.aggregator import (
    INTEGRITY_SIGNALS,
    SECURITY_SIGNALS,
    build_trust_report,
    collect_signals,
)
from device_trust.trust.report import TrustReport
from device_trust.trust.scorer import SCORE_RULES, Deduction, ScoreRule, score_signals

__all__ = [
    "INTEGRITY_SIGNALS",
    "SCORE_RULES",
    "SECURITY_SIGNALS",
    "Deduction",
    "ScoreRule",
    "TrustReport",
    "build_trust_report",
    "collect_signals",
    "score_signals",
]
