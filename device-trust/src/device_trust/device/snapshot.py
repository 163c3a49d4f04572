"""One-shot device snapshot reads (storage, memory, battery, sensors).

These are read-only summaries parsed from shell tools; they carry no trust
semantics and are independent of the probe set.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Mapping, Optional, Set

from device_trust.errors import DeviceTrustError

_GB = 1024.0 * 1024.0 * 1024.0
_KEY_VALUE_RE = re.compile(r"^\s*(?P<key>[A-Za-z][A-Za-z ]*?)\s*:\s*(?P<value>.+?)\s*$")

BATTERY_HEALTH = {
    2: "good",
    3: "overheat",
    4: "dead",
    5: "over_voltage",
    6: "unspecified_failure",
    7: "cold",
}
BATTERY_STATUS_CHARGING = 2
BATTERY_STATUS_FULL = 5

SENSOR_TYPES: Mapping[str, str] = {
    "accelerometer": "android.sensor.accelerometer",
    "gyroscope": "android.sensor.gyroscope",
    "magnetometer": "android.sensor.magnetic_field",
    "proximity": "android.sensor.proximity",
    "light": "android.sensor.light",
    "barometer": "android.sensor.pressure",
}
FEATURE_SENSORS: Mapping[str, str] = {
    "gps": "android.hardware.location.gps",
    "microphone": "android.hardware.microphone",
    "camera": "android.hardware.camera.any",
}
SENSOR_LABELS: Mapping[str, str] = {
    "gps": "GPS",
    "accelerometer": "Accelerometer",
    "gyroscope": "Gyroscope",
    "magnetometer": "Magnetometer",
    "proximity": "Proximity",
    "light": "Light sensor",
    "barometer": "Barometer",
    "microphone": "Microphone",
    "camera": "Camera",
}


def _shell_stdout(controller: Any, cmd: str) -> str:
    res = controller.adb_shell(cmd, check=False)
    if not res.ok():
        raise DeviceTrustError(f"{cmd!r} failed (rc={res.returncode}): {(res.stderr or '')[:200]}")
    return res.stdout or ""


def parse_df(text: str) -> Dict[str, Any]:
    """Parse `df -k <path>` (last data row, 1K blocks)."""

    rows = [line.split() for line in str(text or "").splitlines() if line.strip()]
    data_rows = [r for r in rows[1:] if len(r) >= 4]
    if not data_rows:
        raise ValueError("df output has no data rows")
    row = data_rows[-1]
    total = int(row[1]) * 1024
    used = int(row[2]) * 1024
    available = int(row[3]) * 1024
    return {
        "totalBytes": total,
        "availableBytes": available,
        "usedBytes": used,
        "totalGb": total / _GB,
        "availableGb": available / _GB,
        "usedGb": used / _GB,
        "percentUsed": (used * 100.0) / total if total else 0.0,
    }


def parse_meminfo(text: str) -> Dict[str, Any]:
    values: Dict[str, int] = {}
    for line in str(text or "").splitlines():
        m = re.match(r"^(?P<key>\w+):\s+(?P<kb>\d+)\s*kB", line)
        if m:
            values[m.group("key")] = int(m.group("kb"))
    if "MemTotal" not in values:
        raise ValueError("meminfo has no MemTotal")
    total_mb = values["MemTotal"] // 1024
    available_mb = values.get("MemAvailable", values.get("MemFree", 0)) // 1024
    used_mb = total_mb - available_mb
    return {
        "totalMb": total_mb,
        "availableMb": available_mb,
        "usedMb": used_mb,
        "percentUsed": (used_mb * 100.0) / total_mb if total_mb else 0.0,
    }


def parse_dumpsys_battery(text: str) -> Dict[str, Any]:
    fields: Dict[str, str] = {}
    for line in str(text or "").splitlines():
        m = _KEY_VALUE_RE.match(line)
        if m:
            fields[m.group("key").strip().lower()] = m.group("value")

    def _int(key: str) -> Optional[int]:
        try:
            return int(fields[key])
        except (KeyError, ValueError):
            return None

    out: Dict[str, Any] = {}
    level, scale = _int("level"), _int("scale")
    if level is not None and scale:
        out["level"] = level * 100.0 / scale
    status = _int("status")
    out["isCharging"] = status in (BATTERY_STATUS_CHARGING, BATTERY_STATUS_FULL)
    temperature = _int("temperature")
    if temperature is not None:
        out["temperature"] = temperature / 10.0
    voltage = _int("voltage")
    if voltage is not None:
        out["voltage"] = voltage
    if "technology" in fields:
        out["technology"] = fields["technology"]
    out["health"] = BATTERY_HEALTH.get(_int("health") or -1, "unknown")

    plugged = "none"
    for key, name in (("ac powered", "ac"), ("usb powered", "usb"), ("wireless powered", "wireless")):
        if fields.get(key, "").lower() == "true":
            plugged = name
            break
    out["plugged"] = plugged
    return out


def parse_features(text: str) -> Set[str]:
    return {
        line.strip()[len("feature:") :]
        for line in str(text or "").splitlines()
        if line.strip().startswith("feature:")
    }


def _available_sensors(controller: Any) -> Dict[str, bool]:
    sensorservice = _shell_stdout(controller, "dumpsys sensorservice").lower()
    features = parse_features(_shell_stdout(controller, "pm list features"))
    out = {name: type_id in sensorservice for name, type_id in SENSOR_TYPES.items()}
    out.update({name: feature in features for name, feature in FEATURE_SENSORS.items()})
    return out


def get_storage_info(controller: Any) -> Dict[str, Any]:
    return parse_df(_shell_stdout(controller, "df -k /data"))


def get_ram_info(controller: Any) -> Dict[str, Any]:
    return parse_meminfo(_shell_stdout(controller, "cat /proc/meminfo"))


def get_battery_info(controller: Any) -> Dict[str, Any]:
    return parse_dumpsys_battery(_shell_stdout(controller, "dumpsys battery"))


def get_sensors_info(controller: Any) -> Dict[str, Any]:
    return {
        name: {"available": available, "name": SENSOR_LABELS[name]}
        for name, available in _available_sensors(controller).items()
    }


def check_sensor(controller: Any, sensor_type: str) -> bool:
    """Presence check for one sensor; unknown types are reported absent."""

    key = str(sensor_type or "").strip().lower()
    if key not in SENSOR_LABELS:
        return False
    return _available_sensors(controller)[key]
