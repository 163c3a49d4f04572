"""Bridge-facing calls.

Each call builds its report from scratch and returns a plain JSON-ready dict
with camelCase keys. Trust calls on an unreachable device resolve to default
values plus an `error` field; inventory calls raise
`InventoryUnavailableError` when no package list can be obtained.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Any, Callable, Dict, Optional

from device_trust.config import DiagnosticsConfig
from device_trust.device import snapshot
from device_trust.errors import DeviceTrustError, DeviceUnavailableError
from device_trust.inventory.scanner import scan_sensitive_permissions, scan_storage_inventory
from device_trust.probes.base import ProbeContext
from device_trust.probes.selinux import STATUS_UNKNOWN
from device_trust.trust.aggregator import INTEGRITY_SIGNALS, SECURITY_SIGNALS, build_trust_report
from device_trust.trust.report import TrustReport

logger = logging.getLogger(__name__)

UNKNOWN_TEXT = "unknown"

SECURITY_DEFAULTS: Dict[str, Any] = {
    "isRooted": None,
    "rootMethod": None,
    "isBootloaderUnlocked": None,
    "verifiedBootState": UNKNOWN_TEXT,
    "isDeveloperOptionsEnabled": None,
    "isUsbDebuggingEnabled": None,
    "buildTags": UNKNOWN_TEXT,
    "isTestBuild": None,
    "securityPatchLevel": UNKNOWN_TEXT,
}

INTEGRITY_DEFAULTS: Dict[str, Any] = {
    **SECURITY_DEFAULTS,
    "systemReadOnly": None,
    "officialBuild": None,
    "seLinuxStatus": STATUS_UNKNOWN,
    "seLinuxEnforcing": None,
    "systemModified": None,
    "isEncrypted": None,
    "integrityScore": None,
    "deductions": [],
    "unknownSignals": [],
}


def _config(config: Optional[DiagnosticsConfig]) -> DiagnosticsConfig:
    return config if config is not None else DiagnosticsConfig()


def _require_device(controller: Any) -> None:
    if not controller.is_responsive():
        raise DeviceUnavailableError(
            f"device {getattr(controller, 'serial', None) or '<default>'} is not reachable over adb"
        )


def _probe_context(controller: Any, config: DiagnosticsConfig) -> ProbeContext:
    return ProbeContext(
        controller=controller,
        markers=config.markers,
        selinux_fallback_timeout_s=config.selinux_fallback_timeout_s,
    )


def _flatten(report: TrustReport, defaults: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(defaults)
    for name in defaults:
        if report.is_known(name):
            out[name] = report.value(name)
    return out


def _error_result(defaults: Dict[str, Any], error: Exception) -> Dict[str, Any]:
    out = dict(defaults)
    out["error"] = str(error)
    return out


def get_security_status(controller: Any, *, config: Optional[DiagnosticsConfig] = None) -> Dict[str, Any]:
    cfg = _config(config)
    try:
        _require_device(controller)
        report = build_trust_report(_probe_context(controller, cfg), SECURITY_SIGNALS)
    except DeviceTrustError as e:
        logger.error("security status unavailable: %s", e)
        return _error_result(SECURITY_DEFAULTS, e)
    return _flatten(report, SECURITY_DEFAULTS)


def check_system_integrity(controller: Any, *, config: Optional[DiagnosticsConfig] = None) -> Dict[str, Any]:
    cfg = _config(config)
    try:
        _require_device(controller)
        report = build_trust_report(_probe_context(controller, cfg), INTEGRITY_SIGNALS)
    except DeviceTrustError as e:
        logger.error("integrity check unavailable: %s", e)
        return _error_result(INTEGRITY_DEFAULTS, e)

    out = _flatten(report, INTEGRITY_DEFAULTS)
    out["integrityScore"] = report.score
    out["deductions"] = [d.to_dict() for d in report.deductions]
    out["unknownSignals"] = list(report.unknown)
    out["signalsDigest"] = report.digest()
    return out


def get_installed_apps_storage(
    controller: Any,
    *,
    limit: Optional[int] = None,
    config: Optional[DiagnosticsConfig] = None,
) -> Dict[str, Any]:
    cfg = _config(config)
    inventory = scan_storage_inventory(
        controller,
        limit=cfg.inventory_limit if limit is None else limit,
        aapt_path=cfg.aapt_path,
        user_id=cfg.user_id,
    )
    return {
        "apps": [r.storage_dict() for r in inventory.records],
        "totalScanned": inventory.total_scanned,
        "skipped": list(inventory.skipped),
    }


def get_dangerous_permissions(controller: Any, *, config: Optional[DiagnosticsConfig] = None) -> Dict[str, Any]:
    cfg = _config(config)
    inventory = scan_sensitive_permissions(
        controller,
        sensitive=cfg.markers.sensitive_permissions,
        aapt_path=cfg.aapt_path,
        user_id=cfg.user_id,
    )
    return {
        "apps": [r.permissions_dict() for r in inventory.records],
        "totalScanned": inventory.total_scanned,
        "skipped": list(inventory.skipped),
    }


def _snapshot_call(read: Callable[[Any], Dict[str, Any]], controller: Any) -> Dict[str, Any]:
    try:
        return read(controller)
    except (DeviceTrustError, ValueError, OSError, subprocess.SubprocessError) as e:
        logger.error("%s failed: %s", read.__name__, e)
        return {"error": str(e)}


def get_storage_info(controller: Any) -> Dict[str, Any]:
    return _snapshot_call(snapshot.get_storage_info, controller)


def get_ram_info(controller: Any) -> Dict[str, Any]:
    return _snapshot_call(snapshot.get_ram_info, controller)


def get_battery_info(controller: Any) -> Dict[str, Any]:
    return _snapshot_call(snapshot.get_battery_info, controller)


def get_sensors_info(controller: Any) -> Dict[str, Any]:
    return _snapshot_call(snapshot.get_sensors_info, controller)


def test_sensor(controller: Any, sensor_type: str) -> Dict[str, Any]:
    try:
        return {"working": snapshot.check_sensor(controller, sensor_type)}
    except (DeviceTrustError, OSError, subprocess.SubprocessError) as e:
        return {"working": False, "error": str(e)}
