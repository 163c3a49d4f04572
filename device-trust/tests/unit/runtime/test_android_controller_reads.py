from __future__ import annotations

import subprocess
from types import SimpleNamespace

import pytest

from device_trust.probes.base import ProbeContext
from device_trust.probes.root import probe_is_rooted
from device_trust.runtime.android.controller import AndroidController, AndroidControllerError


def _scripted_run(monkeypatch, answers: dict[str, tuple[str, int]]) -> list[list[str]]:
    calls: list[list[str]] = []

    def fake_run(cmd, **kwargs):
        calls.append(list(cmd))
        stdout, rc = answers.get(cmd[-1], ("", 1))
        return SimpleNamespace(stdout=stdout, stderr="", returncode=rc)

    monkeypatch.setattr(subprocess, "run", fake_run)
    return calls


def test_adb_shell_passes_serial_and_timeout(monkeypatch) -> None:
    seen: list[dict] = []

    def fake_run(cmd, **kwargs):
        seen.append({"cmd": cmd, "kwargs": kwargs})
        return SimpleNamespace(stdout="", stderr="", returncode=0)

    monkeypatch.setattr(subprocess, "run", fake_run)

    ctr = AndroidController(adb_path="adb", serial="emulator-5554", timeout_s=12.0)
    ctr.adb_shell("echo ok", timeout_ms=2500, check=False)
    ctr.adb_shell("echo ok", check=False)

    assert seen[0]["cmd"] == ["adb", "-s", "emulator-5554", "shell", "echo ok"]
    assert seen[0]["kwargs"]["timeout"] == 2.5
    assert seen[1]["kwargs"]["timeout"] == 12.0


def test_adb_check_raises_on_nonzero_exit(monkeypatch) -> None:
    _scripted_run(monkeypatch, {})
    ctr = AndroidController()
    with pytest.raises(AndroidControllerError):
        ctr.adb_shell("false", check=True)


def test_read_platform_property_maps_empty_to_none(monkeypatch) -> None:
    _scripted_run(
        monkeypatch,
        {
            "getprop ro.build.tags": ("release-keys\n", 0),
            "getprop ro.crypto.state": ("\n", 0),
        },
    )
    ctr = AndroidController()

    assert ctr.read_platform_property("ro.build.tags") == "release-keys"
    assert ctr.read_platform_property("ro.crypto.state") is None
    assert ctr.read_platform_property("ro.missing") is None


def test_read_platform_property_swallows_transport_errors(monkeypatch) -> None:
    def fake_run(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, 1)

    monkeypatch.setattr(subprocess, "run", fake_run)
    ctr = AndroidController()

    assert ctr.read_platform_property("ro.build.tags") is None
    assert ctr.read_setting("global", "adb_enabled") is None
    assert ctr.read_text("/proc/mounts") is None
    assert ctr.is_responsive() is False


def test_read_setting_treats_null_as_unset(monkeypatch) -> None:
    _scripted_run(
        monkeypatch,
        {
            "settings get global adb_enabled": ("1\n", 0),
            "settings get global development_settings_enabled": ("null\n", 0),
        },
    )
    ctr = AndroidController()

    assert ctr.read_setting("global", "adb_enabled") == "1"
    assert ctr.read_setting("global", "development_settings_enabled") is None


def test_path_checks_and_file_size(monkeypatch) -> None:
    _scripted_run(
        monkeypatch,
        {
            "test -e /system/xbin/su && echo 1 || echo 0": ("1\n", 0),
            "test -e /sbin/su && echo 1 || echo 0": ("0\n", 0),
            "test -r /system/build.prop && echo 1 || echo 0": ("1\n", 0),
            "stat -c %s /data/app/base.apk": ("1048576\n", 0),
            "stat -c %s /data/app/broken.apk": ("stat: No such file\n", 0),
        },
    )
    ctr = AndroidController()

    assert ctr.path_exists("/system/xbin/su") is True
    assert ctr.path_exists("/sbin/su") is False
    assert ctr.path_readable("/system/build.prop") is True
    assert ctr.file_size("/data/app/base.apk") == 1048576
    assert ctr.file_size("/data/app/broken.apk") is None


def test_android_api_level_and_responsiveness(monkeypatch) -> None:
    _scripted_run(
        monkeypatch,
        {
            "getprop ro.build.version.sdk": ("34\n", 0),
            "echo __device_trust_ok__": ("__device_trust_ok__\n", 0),
        },
    )
    ctr = AndroidController()

    assert ctr.android_api_level() == 34
    assert ctr.is_responsive() is True


def test_list_packages_quotes_flags(monkeypatch) -> None:
    calls = _scripted_run(monkeypatch, {"pm list packages -f": ("package:/a.apk=com.a\n", 0)})
    ctr = AndroidController(serial="s1")

    res = ctr.list_packages("-f")

    assert res.stdout == "package:/a.apk=com.a\n"
    assert calls[-1] == ["adb", "-s", "s1", "shell", "pm list packages -f"]


def test_path_checks_ignore_exit_status_from_old_adb_shells(monkeypatch) -> None:
    # Pre-N adb shells report rc=0 even when the remote command failed.
    def fake_run(cmd, **kwargs):
        return SimpleNamespace(stdout="0\n", stderr="", returncode=0)

    monkeypatch.setattr(subprocess, "run", fake_run)
    ctr = AndroidController()

    assert ctr.path_exists("/system/xbin/su") is False
    assert ctr.path_readable("/system/build.prop") is False


def test_empty_output_with_zero_exit_is_not_a_match(monkeypatch) -> None:
    def fake_run(cmd, **kwargs):
        return SimpleNamespace(stdout="", stderr="", returncode=0)

    monkeypatch.setattr(subprocess, "run", fake_run)
    ctr = AndroidController()

    assert ctr.path_exists("/system/xbin/su") is False
    assert ctr.file_size("/data/app/x/base.apk") is None


def test_read_text_reports_missing_file_as_none(monkeypatch) -> None:
    _scripted_run(
        monkeypatch,
        {
            "test -r /proc/mounts && cat /proc/mounts || echo __device_trust_unreadable__": (
                "/dev/block/dm-0 /system ext4 ro 0 0\n",
                0,
            ),
            "test -r /sys/fs/selinux/enforce && cat /sys/fs/selinux/enforce "
            "|| echo __device_trust_unreadable__": ("__device_trust_unreadable__\n", 0),
        },
    )
    ctr = AndroidController()

    assert ctr.read_text("/proc/mounts") == "/dev/block/dm-0 /system ext4 ro 0 0\n"
    assert ctr.read_text("/sys/fs/selinux/enforce") is None


def test_root_probe_over_old_adb_shell_sees_no_markers(monkeypatch) -> None:
    def fake_run(cmd, **kwargs):
        return SimpleNamespace(stdout="0\n", stderr="", returncode=0)

    monkeypatch.setattr(subprocess, "run", fake_run)

    signal = probe_is_rooted(ProbeContext(controller=AndroidController()))

    assert signal.value is False
