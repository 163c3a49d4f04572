"""Static marker tables used by the probes and the permission extractor.

Probe logic never embeds these literals; `MarkerTables.from_mapping` lets a
config file extend or replace any table without touching the probes.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Tuple

ROOT_METHOD_MAGISK = "magisk"
ROOT_METHOD_LEGACY_SU_MANAGER = "legacy-su-manager"
ROOT_METHOD_GENERIC_SU_BINARY = "generic-su-binary"
ROOT_METHOD_NONE = "none"

# Fixed priority; the first matching method wins regardless of discovery order.
ROOT_METHOD_PRIORITY: Tuple[str, ...] = (
    ROOT_METHOD_MAGISK,
    ROOT_METHOD_LEGACY_SU_MANAGER,
    ROOT_METHOD_GENERIC_SU_BINARY,
)

SU_BINARY_PATHS: Tuple[str, ...] = (
    "/system/bin/su",
    "/system/xbin/su",
    "/sbin/su",
    "/system/su",
    "/system/bin/.ext/.su",
    "/system/usr/we-need-root/su-backup",
    "/system/xbin/mu",
    "/system/sd/xbin/su",
    "/system/bin/failsafe/su",
    "/data/local/su",
    "/data/local/bin/su",
    "/data/local/xbin/su",
    "/su/bin/su",
    "/cache/su",
    "/dev/su",
)

ROOT_FRAMEWORK_PATHS: Tuple[str, ...] = (
    "/sbin/.magisk",
    "/data/adb/magisk",
    "/data/adb/magisk.db",
    "/data/adb/modules",
    "/cache/.disable_magisk",
    "/dev/.magisk.unblock",
    "/system/app/Superuser.apk",
    "/system/app/SuperSU.apk",
)

# Framework marker paths that identify magisk specifically; the rest count
# towards the legacy su-manager method.
MAGISK_PATH_PREFIXES: Tuple[str, ...] = (
    "/sbin/.magisk",
    "/data/adb/",
    "/cache/.disable_magisk",
    "/dev/.magisk",
)

ROOT_MANAGEMENT_PACKAGES: Mapping[str, str] = {
    "com.topjohnwu.magisk": ROOT_METHOD_MAGISK,
    "io.github.huskydg.magisk": ROOT_METHOD_MAGISK,
    "io.github.vvb2060.magisk": ROOT_METHOD_MAGISK,
    "eu.chainfire.supersu": ROOT_METHOD_LEGACY_SU_MANAGER,
    "com.noshufou.android.su": ROOT_METHOD_LEGACY_SU_MANAGER,
    "com.noshufou.android.su.elite": ROOT_METHOD_LEGACY_SU_MANAGER,
    "com.koushikdutta.superuser": ROOT_METHOD_LEGACY_SU_MANAGER,
    "com.thirdparty.superuser": ROOT_METHOD_LEGACY_SU_MANAGER,
    "com.yellowes.su": ROOT_METHOD_LEGACY_SU_MANAGER,
    "com.kingroot.kinguser": ROOT_METHOD_LEGACY_SU_MANAGER,
    "com.kingo.root": ROOT_METHOD_LEGACY_SU_MANAGER,
}

INSTRUMENTATION_PATHS: Tuple[str, ...] = (
    "/system/framework/XposedBridge.jar",
    "/system/lib/libxposed_art.so",
    "/system/lib64/libxposed_art.so",
    "/system/xposed.prop",
    "/system/bin/app_process.orig",
    "/system/bin/app_process32_xposed",
    "/system/bin/app_process64_xposed",
    "/data/local/tmp/frida-server",
    "/data/local/tmp/re.frida.server",
)

SYSTEM_CONFIG_FILE = "/system/build.prop"

SENSITIVE_PERMISSIONS: Tuple[str, ...] = (
    "android.permission.READ_CONTACTS",
    "android.permission.WRITE_CONTACTS",
    "android.permission.GET_ACCOUNTS",
    "android.permission.READ_SMS",
    "android.permission.SEND_SMS",
    "android.permission.RECEIVE_SMS",
    "android.permission.READ_CALL_LOG",
    "android.permission.WRITE_CALL_LOG",
    "android.permission.ACCESS_FINE_LOCATION",
    "android.permission.ACCESS_COARSE_LOCATION",
    "android.permission.ACCESS_BACKGROUND_LOCATION",
    "android.permission.CAMERA",
    "android.permission.RECORD_AUDIO",
    "android.permission.READ_EXTERNAL_STORAGE",
    "android.permission.WRITE_EXTERNAL_STORAGE",
    "android.permission.READ_PHONE_STATE",
    "android.permission.CALL_PHONE",
    "android.permission.READ_CALENDAR",
    "android.permission.WRITE_CALENDAR",
)


def framework_path_method(path: str) -> str:
    if any(path.startswith(prefix) for prefix in MAGISK_PATH_PREFIXES):
        return ROOT_METHOD_MAGISK
    return ROOT_METHOD_LEGACY_SU_MANAGER


@dataclass(frozen=True)
class MarkerTables:
    su_binary_paths: Tuple[str, ...] = SU_BINARY_PATHS
    root_framework_paths: Tuple[str, ...] = ROOT_FRAMEWORK_PATHS
    root_management_packages: Mapping[str, str] = field(
        default_factory=lambda: dict(ROOT_MANAGEMENT_PACKAGES)
    )
    instrumentation_paths: Tuple[str, ...] = INSTRUMENTATION_PATHS
    system_config_file: str = SYSTEM_CONFIG_FILE
    sensitive_permissions: Tuple[str, ...] = SENSITIVE_PERMISSIONS

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any] | None) -> "MarkerTables":
        """Build tables from a config `markers:` section.

        List values replace the default table; `extra_<name>` lists extend it.
        """

        tables = cls()
        if not cfg:
            return tables

        updates: dict[str, Any] = {}
        for name in (
            "su_binary_paths",
            "root_framework_paths",
            "instrumentation_paths",
            "sensitive_permissions",
        ):
            base = tuple(cfg[name]) if name in cfg else getattr(tables, name)
            extra = tuple(cfg.get(f"extra_{name}") or ())
            updates[name] = tuple(dict.fromkeys(str(v) for v in base + extra))

        packages = dict(
            cfg["root_management_packages"]
            if "root_management_packages" in cfg
            else tables.root_management_packages
        )
        packages.update(cfg.get("extra_root_management_packages") or {})
        for pkg, method in packages.items():
            if method not in ROOT_METHOD_PRIORITY:
                raise ValueError(f"unknown root method for {pkg}: {method}")
        updates["root_management_packages"] = packages

        if cfg.get("system_config_file"):
            updates["system_config_file"] = str(cfg["system_config_file"])

        return replace(tables, **updates)


DEFAULT_MARKERS = MarkerTables()
