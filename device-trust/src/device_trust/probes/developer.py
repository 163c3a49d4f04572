"""Developer/debug exposure probes (`settings get global ...`)."""

from __future__ import annotations

from device_trust.probes.base import ProbeContext, ProbeResult, boolean_signal, parse_boolish
from device_trust.probes.registry import register_probe


def _global_flag(ctx: ProbeContext, key: str, signal_name: str) -> ProbeResult:
    parsed = parse_boolish(ctx.controller.read_setting("global", key))
    if parsed is None:
        return None
    return boolean_signal(signal_name, parsed)


@register_probe("isDeveloperOptionsEnabled")
def probe_developer_options(ctx: ProbeContext) -> ProbeResult:
    return _global_flag(ctx, "development_settings_enabled", "isDeveloperOptionsEnabled")


@register_probe("isUsbDebuggingEnabled")
def probe_usb_debugging(ctx: ProbeContext) -> ProbeResult:
    return _global_flag(ctx, "adb_enabled", "isUsbDebuggingEnabled")
