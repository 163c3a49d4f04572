from __future__ import annotations

from device_fakes import FakeController

from device_trust.inventory.permissions import (
    effective_granted_permissions,
    extract_sensitive_permissions,
    parse_dumpsys_package_permissions,
    sensitive_grants,
    short_permission_name,
)
from device_trust.probes.markers import SENSITIVE_PERMISSIONS


def test_modern_dump_counts_only_granted_for_user(fixture_text) -> None:
    parsed = parse_dumpsys_package_permissions(fixture_text("dumpsys_package_modern.txt"))
    granted = effective_granted_permissions(parsed)

    assert parsed["ok"] is True
    assert "android.permission.CAMERA" in granted
    assert "android.permission.ACCESS_FINE_LOCATION" not in granted
    assert "android.permission.READ_SMS" not in granted
    assert sensitive_grants(granted, SENSITIVE_PERMISSIONS) == (
        "READ_CONTACTS",
        "CAMERA",
        "RECORD_AUDIO",
    )


def test_runtime_grants_are_per_user(fixture_text) -> None:
    parsed = parse_dumpsys_package_permissions(
        fixture_text("dumpsys_package_modern.txt"), user_id=10
    )

    assert sensitive_grants(effective_granted_permissions(parsed), SENSITIVE_PERMISSIONS) == (
        "READ_SMS",
    )


def test_legacy_granted_list_excludes_requested_only(fixture_text) -> None:
    parsed = parse_dumpsys_package_permissions(fixture_text("dumpsys_package_legacy.txt"))
    granted = effective_granted_permissions(parsed)

    assert "android.permission.READ_PHONE_STATE" in granted
    assert "android.permission.READ_CALL_LOG" not in granted


def test_short_permission_name() -> None:
    assert short_permission_name("android.permission.CAMERA") == "CAMERA"
    assert short_permission_name("CAMERA") == "CAMERA"


def test_extractor_drops_empty_and_skips_unreadable(fixture_text) -> None:
    dev = FakeController(
        dumpsys={
            "package com.example.social": fixture_text("dumpsys_package_modern.txt"),
            "package com.example.legacy": fixture_text("dumpsys_package_legacy.txt"),
            "package com.example.quiet": "Packages:\n  Package [com.example.quiet]\n"
            "    install permissions:\n      android.permission.INTERNET: granted=true\n",
            "package com.example.denied": "Permission Denial: can't dump package\n",
        }
    )

    grants, skipped = extract_sensitive_permissions(
        dev,
        [
            "com.example.social",
            "com.example.legacy",
            "com.example.quiet",
            "com.example.denied",
            "com.example.gone",
        ],
        sensitive=SENSITIVE_PERMISSIONS,
    )

    assert grants == {
        "com.example.social": ("READ_CONTACTS", "CAMERA", "RECORD_AUDIO"),
        "com.example.legacy": ("READ_PHONE_STATE",),
    }
    assert skipped == ["com.example.denied", "com.example.gone"]


def test_custom_sensitive_table_is_respected(fixture_text) -> None:
    dev = FakeController(
        dumpsys={"package com.example.social": fixture_text("dumpsys_package_modern.txt")}
    )

    grants, _ = extract_sensitive_permissions(
        dev, ["com.example.social"], sensitive=["android.permission.RECORD_AUDIO"]
    )

    assert grants == {"com.example.social": ("RECORD_AUDIO",)}
