from __future__ import annotations

import json

import pytest
import yaml
from device_fakes import FakeController, clean_device

from device_trust.cli import diagnose


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for name in ("DEVICE_TRUST_ADB", "ANDROID_SERIAL", "DEVICE_TRUST_TIMEOUT_S"):
        monkeypatch.delenv(name, raising=False)


def _use_device(monkeypatch, device) -> list:
    configs: list = []

    def fake_make_controller(cfg):
        configs.append(cfg)
        return device

    monkeypatch.setattr(diagnose, "make_controller", fake_make_controller)
    return configs


def test_integrity_command_prints_json(monkeypatch, capsys) -> None:
    configs = _use_device(monkeypatch, clean_device())

    rc = diagnose.main(["integrity", "--serial", "emulator-5554", "--timeout", "7"])

    assert rc == 0
    out = json.loads(capsys.readouterr().out)
    assert out["integrityScore"] == 100
    assert configs[0].serial == "emulator-5554"
    assert configs[0].timeout_s == 7.0


def test_security_command_yaml_to_file(monkeypatch, tmp_path) -> None:
    _use_device(monkeypatch, clean_device())
    out_path = tmp_path / "reports" / "security.yaml"

    rc = diagnose.main(["security", "--format", "yaml", "--out", str(out_path)])

    assert rc == 0
    data = yaml.safe_load(out_path.read_text(encoding="utf-8"))
    assert data["rootMethod"] == "none"


def test_apps_command_respects_limit(monkeypatch, capsys) -> None:
    dev = FakeController(
        packages=[("com.a", "/data/app/a.apk"), ("com.b", "/data/app/b.apk")],
        system_packages=[],
        sizes={"/data/app/a.apk": 10, "/data/app/b.apk": 20},
    )
    configs = _use_device(monkeypatch, dev)

    rc = diagnose.main(["apps", "--limit", "1"])

    assert rc == 0
    out = json.loads(capsys.readouterr().out)
    assert [a["packageName"] for a in out["apps"]] == ["com.b"]
    assert configs[0].inventory_limit == 1


def test_inventory_failure_exits_2(monkeypatch, capsys) -> None:
    _use_device(monkeypatch, FakeController(packages=None))

    rc = diagnose.main(["permissions"])

    assert rc == 2
    assert capsys.readouterr().out.startswith("ERROR:")


def test_bad_config_exits_2(monkeypatch, tmp_path, capsys) -> None:
    _use_device(monkeypatch, clean_device())
    cfg = tmp_path / "bad.yaml"
    cfg.write_text("timeout_s: -3\n", encoding="utf-8")

    assert diagnose.main(["security", "--config", str(cfg)]) == 2


def test_negative_limit_is_a_usage_error(monkeypatch) -> None:
    _use_device(monkeypatch, clean_device())

    with pytest.raises(SystemExit) as exc:
        diagnose.main(["apps", "--limit", "-1"])
    assert exc.value.code == 2


def test_all_command_collects_every_section(monkeypatch) -> None:
    dev = clean_device(
        packages=[("com.a", "/data/app/a.apk")],
        dumpsys={
            "package com.a": "Packages:\n    install permissions:\n"
            "      android.permission.CAMERA: granted=true\n"
        },
    )

    payload = diagnose.run_command("all", dev, diagnose.load_config(environ={}))

    assert set(payload) == {"security", "integrity", "apps", "permissions", "device"}
    assert "error" in payload["device"]["storage"]


def test_permission_service_denied_everywhere_exits_2(monkeypatch, capsys) -> None:
    dev = FakeController(
        packages=[("com.a", "/data/app/a.apk")],
        system_packages=[],
        dumpsys={"package com.a": "Permission Denial: can't dump package\n"},
    )
    _use_device(monkeypatch, dev)

    assert diagnose.main(["permissions"]) == 2
    assert "permission state" in capsys.readouterr().out
