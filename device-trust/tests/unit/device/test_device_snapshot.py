from __future__ import annotations

import pytest
from device_fakes import FakeController

from device_trust.device.snapshot import (
    check_sensor,
    get_battery_info,
    get_ram_info,
    get_sensors_info,
    get_storage_info,
    parse_df,
    parse_dumpsys_battery,
    parse_meminfo,
)
from device_trust.errors import DeviceTrustError

DF = (
    "Filesystem      1K-blocks    Used Available Use% Mounted on\n"
    "/dev/block/dm-5  115102200 74089860  41012340  65% /data\n"
)
MEMINFO = "MemTotal:        7838400 kB\nMemFree:          312000 kB\nMemAvailable:    3919200 kB\n"
BATTERY = """Current Battery Service state:
  AC powered: false
  USB powered: true
  Wireless powered: false
  status: 2
  health: 2
  present: true
  level: 81
  scale: 100
  voltage: 4213
  temperature: 284
  technology: Li-ion
"""
SENSORSERVICE = """Sensor List:
0x0000000b) BMI160 Accelerometer | Bosch | ver: 1 | type: android.sensor.accelerometer(1)
0x0000000c) AK09918 Magnetometer | AKM | ver: 1 | type: android.sensor.magnetic_field(2)
"""
FEATURES = "feature:android.hardware.camera.any\nfeature:android.hardware.location.gps\n"


def _device() -> FakeController:
    return FakeController(
        shell={
            "df -k /data": DF,
            "cat /proc/meminfo": MEMINFO,
            "dumpsys battery": BATTERY,
            "dumpsys sensorservice": SENSORSERVICE,
            "pm list features": FEATURES,
        }
    )


def test_parse_df() -> None:
    info = parse_df(DF)

    assert info["totalBytes"] == 115102200 * 1024
    assert info["availableBytes"] == 41012340 * 1024
    assert info["percentUsed"] == pytest.approx(64.37, abs=0.01)


def test_parse_meminfo_prefers_available() -> None:
    info = parse_meminfo(MEMINFO)

    assert info["totalMb"] == 7654
    assert info["availableMb"] == 3827
    assert info["usedMb"] == 7654 - 3827


def test_parse_meminfo_requires_total() -> None:
    with pytest.raises(ValueError):
        parse_meminfo("MemFree: 1 kB\n")


def test_parse_battery() -> None:
    info = parse_dumpsys_battery(BATTERY)

    assert info["level"] == 81.0
    assert info["isCharging"] is True
    assert info["temperature"] == pytest.approx(28.4)
    assert info["health"] == "good"
    assert info["plugged"] == "usb"
    assert info["technology"] == "Li-ion"


def test_snapshot_reads_over_controller() -> None:
    dev = _device()

    assert get_storage_info(dev)["usedBytes"] == 74089860 * 1024
    assert get_ram_info(dev)["totalMb"] == 7654
    assert get_battery_info(dev)["voltage"] == 4213


def test_sensor_availability() -> None:
    sensors = get_sensors_info(_device())

    assert sensors["accelerometer"] == {"available": True, "name": "Accelerometer"}
    assert sensors["magnetometer"]["available"] is True
    assert sensors["gyroscope"]["available"] is False
    assert sensors["gps"]["available"] is True
    assert sensors["microphone"]["available"] is False


def test_check_sensor() -> None:
    dev = _device()

    assert check_sensor(dev, "Camera") is True
    assert check_sensor(dev, "barometer") is False
    assert check_sensor(dev, "tricorder") is False


def test_failed_shell_read_raises() -> None:
    with pytest.raises(DeviceTrustError):
        get_storage_info(FakeController())
