from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import yaml

from device_trust import api
from device_trust.config import DiagnosticsConfig, load_config
from device_trust.errors import DeviceTrustError
from device_trust.runtime.android.controller import AndroidController

logger = logging.getLogger("device_trust.cli")

COMMANDS = ("security", "integrity", "apps", "permissions", "device", "all")

EXIT_OK = 0
EXIT_FAILURE = 2


def make_controller(cfg: DiagnosticsConfig) -> AndroidController:
    return AndroidController(adb_path=cfg.adb_path, serial=cfg.serial, timeout_s=cfg.timeout_s)


def _device_snapshot(controller: Any) -> Dict[str, Any]:
    return {
        "storage": api.get_storage_info(controller),
        "ram": api.get_ram_info(controller),
        "battery": api.get_battery_info(controller),
        "sensors": api.get_sensors_info(controller),
    }


def run_command(command: str, controller: Any, cfg: DiagnosticsConfig) -> Dict[str, Any]:
    if command == "security":
        return api.get_security_status(controller, config=cfg)
    if command == "integrity":
        return api.check_system_integrity(controller, config=cfg)
    if command == "apps":
        return api.get_installed_apps_storage(controller, config=cfg)
    if command == "permissions":
        return api.get_dangerous_permissions(controller, config=cfg)
    if command == "device":
        return _device_snapshot(controller)
    if command == "all":
        return {name: run_command(name, controller, cfg) for name in COMMANDS if name != "all"}
    raise ValueError(f"unknown command: {command}")


def render(payload: Dict[str, Any], fmt: str) -> str:
    if fmt == "yaml":
        return yaml.safe_dump(payload, sort_keys=False, allow_unicode=True).rstrip()
    return json.dumps(payload, ensure_ascii=False, indent=2)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Read-only device trust and installed-app diagnostics over adb."
    )
    parser.add_argument("command", choices=COMMANDS, help="Which report to produce.")
    parser.add_argument("--serial", type=str, default=None, help="adb device serial.")
    parser.add_argument("--adb", type=str, default=None, help="Path to the adb binary.")
    parser.add_argument(
        "--config", type=Path, default=None, help="YAML/JSON config file (markers, timeouts, ...)."
    )
    parser.add_argument(
        "--limit", type=int, default=None, help="Max apps in the storage ranking (default: 50)."
    )
    parser.add_argument(
        "--timeout", type=float, default=None, help="Per-adb-call timeout in seconds."
    )
    parser.add_argument(
        "--format", type=str, default="json", choices=["json", "yaml"], help="Output format."
    )
    parser.add_argument("--out", type=Path, default=None, help="Write the report to a file.")
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level, format="[%(levelname)s] %(name)s: %(message)s")

    if args.limit is not None and args.limit < 0:
        parser.error("--limit must be >= 0")

    try:
        cfg = load_config(
            args.config,
            adb_path=args.adb,
            serial=args.serial,
            timeout_s=args.timeout,
            inventory_limit=args.limit,
        )
        payload = run_command(args.command, make_controller(cfg), cfg)
    except DeviceTrustError as e:
        logger.error("%s", e)
        print(f"ERROR: {e}")
        return EXIT_FAILURE

    text = render(payload, args.format)
    if args.out is not None:
        args.out.parent.mkdir(parents=True, exist_ok=True)
        args.out.write_text(text + "\n", encoding="utf-8")
        logger.info("wrote %s", args.out)
    else:
        print(text)
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
