"""Signal aggregator.

Runs a fixed set of probes and collects every signal that could be evaluated.
Failures stay local: a probe that raises contributes nothing, its siblings
are unaffected.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from device_trust.probes.base import ProbeContext, ProbeResult, TrustSignal
from device_trust.probes.registry import get_probes
from device_trust.trust.report import TrustReport

logger = logging.getLogger(__name__)

SECURITY_SIGNALS: Tuple[str, ...] = (
    "isRooted",
    "rootMethod",
    "isBootloaderUnlocked",
    "verifiedBootState",
    "isDeveloperOptionsEnabled",
    "isUsbDebuggingEnabled",
    "buildTags",
    "isTestBuild",
    "securityPatchLevel",
)

INTEGRITY_SIGNALS: Tuple[str, ...] = SECURITY_SIGNALS + (
    "systemReadOnly",
    "officialBuild",
    "seLinuxStatus",
    "seLinuxEnforcing",
    "systemModified",
    "isEncrypted",
)


def _run_probe(name: str, bound: Callable[[], ProbeResult]) -> Optional[TrustSignal]:
    try:
        result = bound()
    except Exception as e:
        logger.debug("probe %s failed: %s: %s", name, type(e).__name__, e)
        return None
    if result is not None and result.name != name:
        logger.debug("probe %s returned mismatched signal %s", name, result.name)
        return None
    return result


def collect_signals(
    ctx: ProbeContext, signal_names: Iterable[str] = INTEGRITY_SIGNALS
) -> Tuple[Dict[str, TrustSignal], List[str]]:
    """Run probes; return `(known_signals, unknown_names)`."""

    known: Dict[str, TrustSignal] = {}
    unknown: List[str] = []
    for name, probe in get_probes(signal_names):
        signal = _run_probe(name, partial(probe, ctx))
        if signal is None:
            unknown.append(name)
        else:
            known[name] = signal
    return known, unknown


def build_trust_report(
    ctx: ProbeContext, signal_names: Iterable[str] = INTEGRITY_SIGNALS
) -> TrustReport:
    known, unknown = collect_signals(ctx, signal_names)
    report = TrustReport.from_signals(known, unknown=tuple(unknown))
    logger.info(
        "trust report: %d known, %d unknown, score=%d",
        len(known),
        len(unknown),
        report.score,
    )
    return report
