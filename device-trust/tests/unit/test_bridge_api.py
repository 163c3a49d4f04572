from __future__ import annotations

import pytest
from device_fakes import FakeController, clean_device

from device_trust import api
from device_trust.config import DiagnosticsConfig
from device_trust.errors import InventoryUnavailableError
from device_trust.probes.markers import MarkerTables


def test_security_status_on_clean_device() -> None:
    out = api.get_security_status(clean_device())

    assert out == {
        "isRooted": False,
        "rootMethod": "none",
        "isBootloaderUnlocked": False,
        "verifiedBootState": "green",
        "isDeveloperOptionsEnabled": False,
        "isUsbDebuggingEnabled": True,
        "buildTags": "release-keys",
        "isTestBuild": False,
        "securityPatchLevel": "2024-05-01",
    }


def test_security_status_unknown_signals_use_defaults() -> None:
    dev = clean_device()
    del dev.props["ro.build.tags"]

    out = api.get_security_status(dev)

    assert out["buildTags"] == "unknown"
    assert out["isTestBuild"] is None
    assert "error" not in out


def test_unreachable_device_returns_error_flagged_defaults() -> None:
    dev = clean_device(responsive=False)

    security = api.get_security_status(dev)
    integrity = api.check_system_integrity(dev)

    assert security["isRooted"] is None
    assert security["verifiedBootState"] == "unknown"
    assert "not reachable" in security["error"]
    assert integrity["integrityScore"] is None
    assert integrity["seLinuxStatus"] == "Unknown"
    assert integrity["error"]


def test_integrity_report_on_rooted_test_build() -> None:
    dev = clean_device(existing={"/sbin/.magisk"})
    dev.props["ro.build.tags"] = "test-keys"
    dev.files["/sys/fs/selinux/enforce"] = "0"

    out = api.check_system_integrity(dev)

    assert out["isRooted"] is True
    assert out["rootMethod"] == "magisk"
    assert out["officialBuild"] is False
    assert out["seLinuxStatus"] == "Permissive"
    assert out["integrityScore"] == 60
    assert {d["reason"] for d in out["deductions"]} == {
        "unofficial_build_keys",
        "selinux_not_enforcing",
    }
    assert out["unknownSignals"] == []
    assert len(out["signalsDigest"]) == 64


def test_config_markers_reach_the_probes() -> None:
    dev = clean_device(existing={"/vendor/bin/su"})
    cfg = DiagnosticsConfig(
        markers=MarkerTables.from_mapping({"extra_su_binary_paths": ["/vendor/bin/su"]})
    )

    assert api.get_security_status(dev)["isRooted"] is False
    assert api.get_security_status(dev, config=cfg)["isRooted"] is True


def test_installed_apps_storage_shape() -> None:
    dev = FakeController(
        props={"ro.build.version.sdk": "25"},
        packages=[("com.a", "/data/app/a/base.apk"), ("com.b", "/data/app/b/base.apk")],
        system_packages=[],
        sizes={"/data/app/a/base.apk": 1024 * 1024, "/data/app/b/base.apk": 3 * 1024 * 1024},
    )

    out = api.get_installed_apps_storage(dev, limit=1, config=DiagnosticsConfig(aapt_path=None))

    assert out["totalScanned"] == 2
    assert out["skipped"] == []
    assert len(out["apps"]) == 1
    app = out["apps"][0]
    assert app["packageName"] == "com.b"
    assert app["appName"] == "com.b"
    assert app["totalBytes"] == 3 * 1024 * 1024
    assert app["totalSizeMb"] == pytest.approx(3.0)
    assert app["sourceTier"] == "degraded-file-size"


def test_installed_apps_storage_propagates_global_failure() -> None:
    with pytest.raises(InventoryUnavailableError):
        api.get_installed_apps_storage(FakeController(packages=None))


def test_dangerous_permissions_shape(fixture_text) -> None:
    dev = FakeController(
        packages=[("com.example.social", "/data/app/social/base.apk")],
        system_packages=[],
        dumpsys={"package com.example.social": fixture_text("dumpsys_package_modern.txt")},
    )

    out = api.get_dangerous_permissions(dev, config=DiagnosticsConfig(aapt_path=None))

    assert out["apps"] == [
        {
            "packageName": "com.example.social",
            "appName": "com.example.social",
            "permissions": ["READ_CONTACTS", "CAMERA", "RECORD_AUDIO"],
            "permissionCount": 3,
            "isSystemApp": False,
        }
    ]


def test_snapshot_wrappers_flag_errors() -> None:
    dev = FakeController()

    assert "error" in api.get_storage_info(dev)
    assert "error" in api.get_ram_info(dev)
    result = api.test_sensor(dev, "gps")
    assert result["working"] is False
    assert "error" in result


def test_dangerous_permissions_raises_when_service_is_denied_for_all() -> None:
    denied = "Permission Denial: can't dump package\n"
    dev = FakeController(
        packages=[("com.a", "/data/app/a/base.apk"), ("com.b", "/data/app/b/base.apk")],
        system_packages=[],
        dumpsys={"package com.a": denied, "package com.b": denied},
    )

    with pytest.raises(InventoryUnavailableError):
        api.get_dangerous_permissions(dev, config=DiagnosticsConfig(aapt_path=None))
