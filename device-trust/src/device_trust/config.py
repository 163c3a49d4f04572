"""Diagnostics configuration.

Precedence, lowest to highest: built-in defaults, a YAML/JSON config file,
environment variables, explicit overrides (CLI flags).

Environment:
- DEVICE_TRUST_ADB: adb binary (default: adb)
- ANDROID_SERIAL: target device serial
- DEVICE_TRUST_TIMEOUT_S: per-adb-call timeout in seconds
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from jsonschema import Draft202012Validator

from device_trust.errors import ConfigError
from device_trust.inventory.ranking import DEFAULT_LIMIT
from device_trust.probes.markers import DEFAULT_MARKERS, MarkerTables

_SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "config.schema.json"


@dataclass(frozen=True)
class DiagnosticsConfig:
    adb_path: str = "adb"
    serial: Optional[str] = None
    timeout_s: float = 30.0
    selinux_fallback_timeout_s: float = 5.0
    aapt_path: Optional[str] = "aapt"
    inventory_limit: int = DEFAULT_LIMIT
    user_id: int = 0
    markers: MarkerTables = field(default=DEFAULT_MARKERS)

    def with_overrides(self, **overrides: Any) -> "DiagnosticsConfig":
        """Return a copy with every non-None override applied."""

        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def load_yaml_or_json(path: Path) -> Dict[str, Any]:
    """Load a YAML/JSON file into a dict (top-level must be an object)."""

    if not path.exists():
        raise ConfigError(f"config file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in {".yaml", ".yml"}:
            data = yaml.safe_load(text)
        elif path.suffix.lower() == ".json":
            data = json.loads(text)
        else:
            raise ConfigError(f"Unsupported config file extension: {path}")
    except (yaml.YAMLError, ValueError) as e:
        raise ConfigError(f"cannot parse config {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Top-level config must be an object: {path}")
    return data


def load_schema(schema_path: Path = _SCHEMA_PATH) -> Dict[str, Any]:
    schema = json.loads(schema_path.read_text(encoding="utf-8"))
    if not isinstance(schema, dict):
        raise ConfigError(f"Schema must be an object: {schema_path}")
    return schema


def validate_against_schema(
    instance: Mapping[str, Any],
    schema: Mapping[str, Any],
    *,
    where: str,
) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: list(e.path))
    if errors:
        msgs = []
        for e in errors[:20]:
            loc = "/".join([str(p) for p in e.path])
            msgs.append(f"- {where}:{loc}: {e.message}")
        if len(errors) > 20:
            msgs.append(f"... ({len(errors)-20} more)")
        raise ConfigError("\n".join(msgs))


def config_from_mapping(data: Mapping[str, Any], *, where: str = "config") -> DiagnosticsConfig:
    validate_against_schema(data, load_schema(), where=where)
    try:
        markers = MarkerTables.from_mapping(data.get("markers"))
    except ValueError as e:
        raise ConfigError(f"{where}:markers: {e}") from e
    plain = {k: v for k, v in data.items() if k != "markers"}
    return DiagnosticsConfig(markers=markers, **plain)


def _env_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    adb = (environ.get("DEVICE_TRUST_ADB") or "").strip()
    if adb:
        out["adb_path"] = adb
    serial = (environ.get("ANDROID_SERIAL") or "").strip()
    if serial:
        out["serial"] = serial
    timeout = (environ.get("DEVICE_TRUST_TIMEOUT_S") or "").strip()
    if timeout:
        try:
            out["timeout_s"] = float(timeout)
        except ValueError as e:
            raise ConfigError(f"DEVICE_TRUST_TIMEOUT_S is not a number: {timeout!r}") from e
    return out


def load_config(
    path: Optional[Path] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> DiagnosticsConfig:
    """Resolve the effective config from file, environment and overrides."""

    cfg = DiagnosticsConfig()
    if path is not None:
        cfg = config_from_mapping(load_yaml_or_json(Path(path)), where=str(path))
    cfg = cfg.with_overrides(**_env_overrides(os.environ if environ is None else environ))
    return cfg.with_overrides(**overrides)
