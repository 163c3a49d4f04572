"""System-modification probe (instrumentation frameworks, core config file)."""

from __future__ import annotations

from device_trust.probes.base import ProbeContext, ProbeResult, boolean_signal
from device_trust.probes.registry import register_probe


@register_probe("systemModified")
def probe_system_modified(ctx: ProbeContext) -> ProbeResult:
    controller = ctx.controller
    for path in ctx.markers.instrumentation_paths:
        if controller.path_exists(path):
            return boolean_signal("systemModified", True)
    readable = controller.path_readable(ctx.markers.system_config_file)
    return boolean_signal("systemModified", not readable)
