"""Mandatory-access-control (SELinux) probes.

The kernel flag is preferred; `getenforce` is the fallback. The fallback shells
out, so it runs with its own short timeout.
"""

from __future__ import annotations

import logging
from typing import Optional

from device_trust.probes.base import ProbeContext, ProbeResult, boolean_signal, enum_signal
from device_trust.probes.registry import register_probe

logger = logging.getLogger(__name__)

ENFORCE_PATH = "/sys/fs/selinux/enforce"

STATUS_ENFORCING = "Enforcing"
STATUS_PERMISSIVE = "Permissive"
STATUS_UNKNOWN = "Unknown"

_FLAG_TO_STATUS = {"1": STATUS_ENFORCING, "0": STATUS_PERMISSIVE}


def _status_from_getenforce(text: str) -> Optional[str]:
    val = str(text or "").strip().lower()
    if val == "enforcing":
        return STATUS_ENFORCING
    if val in {"permissive", "disabled"}:
        return STATUS_PERMISSIVE
    return None


def read_selinux_status(ctx: ProbeContext) -> Optional[str]:
    controller = ctx.controller
    flag = controller.read_text(ENFORCE_PATH)
    if flag is not None:
        status = _FLAG_TO_STATUS.get(flag.strip()[:1])
        if status is not None:
            return status

    try:
        res = controller.adb_shell(
            "getenforce", timeout_s=ctx.selinux_fallback_timeout_s, check=False
        )
    except Exception as e:
        logger.debug("getenforce fallback failed: %s", e)
        return None
    if not res.ok():
        return None
    return _status_from_getenforce(res.stdout)


@register_probe("seLinuxStatus")
def probe_selinux_status(ctx: ProbeContext) -> ProbeResult:
    status = read_selinux_status(ctx)
    if status is None:
        return None
    return enum_signal("seLinuxStatus", status)


@register_probe("seLinuxEnforcing")
def probe_selinux_enforcing(ctx: ProbeContext) -> ProbeResult:
    status = read_selinux_status(ctx)
    if status is None:
        return None
    return boolean_signal("seLinuxEnforcing", status == STATUS_ENFORCING)
