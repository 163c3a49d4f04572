"""Elevated-access (root) probes.

Three independent evidence classes:
  (a) superuser binaries on known paths
  (b) rooting-framework marker paths
  (c) installed rooting-management packages

`isRooted` is a short-circuit OR over (a), (b), (c). `rootMethod` names the
first method matching in fixed priority order (magisk, legacy su manager,
generic su binary) so that discovery order never changes the answer.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Set

from device_trust.probes.base import ProbeContext, ProbeResult, boolean_signal, enum_signal
from device_trust.probes.markers import (
    ROOT_METHOD_GENERIC_SU_BINARY,
    ROOT_METHOD_LEGACY_SU_MANAGER,
    ROOT_METHOD_MAGISK,
    ROOT_METHOD_NONE,
    ROOT_METHOD_PRIORITY,
    framework_path_method,
)
from device_trust.probes.registry import register_probe

logger = logging.getLogger(__name__)


def installed_package_names(controller) -> Optional[Set[str]]:
    """Package identifiers from `pm list packages`, None when unavailable."""

    try:
        res = controller.list_packages()
    except Exception as e:
        logger.debug("pm list packages failed: %s", e)
        return None
    names: Set[str] = set()
    for line in (res.stdout or "").splitlines():
        line = line.strip()
        if line.startswith("package:"):
            names.add(line[len("package:") :].strip())
    return names


def _first_existing(controller, paths: Iterable[str]) -> Optional[str]:
    for path in paths:
        if controller.path_exists(path):
            return path
    return None


def _su_binary_present(ctx: ProbeContext) -> bool:
    return _first_existing(ctx.controller, ctx.markers.su_binary_paths) is not None


def _framework_paths_for(ctx: ProbeContext, method: str) -> list[str]:
    return [p for p in ctx.markers.root_framework_paths if framework_path_method(p) == method]


def _packages_for(ctx: ProbeContext, method: str) -> Set[str]:
    return {
        pkg for pkg, tag in ctx.markers.root_management_packages.items() if tag == method
    }


def _method_matches(ctx: ProbeContext, method: str, installed: Optional[Set[str]]) -> bool:
    if method == ROOT_METHOD_GENERIC_SU_BINARY:
        return _su_binary_present(ctx)

    if installed is not None and installed & _packages_for(ctx, method):
        return True
    return _first_existing(ctx.controller, _framework_paths_for(ctx, method)) is not None


@register_probe("isRooted")
def probe_is_rooted(ctx: ProbeContext) -> ProbeResult:
    if _su_binary_present(ctx):
        return boolean_signal("isRooted", True)
    if _first_existing(ctx.controller, ctx.markers.root_framework_paths) is not None:
        return boolean_signal("isRooted", True)

    installed = installed_package_names(ctx.controller)
    if installed is None:
        # Package class could not be evaluated; "not rooted" would be unfounded.
        return None
    if installed & set(ctx.markers.root_management_packages):
        return boolean_signal("isRooted", True)
    return boolean_signal("isRooted", False)


@register_probe("rootMethod")
def probe_root_method(ctx: ProbeContext) -> ProbeResult:
    installed = installed_package_names(ctx.controller)
    for method in ROOT_METHOD_PRIORITY:
        if _method_matches(ctx, method, installed):
            return enum_signal("rootMethod", method)
    if installed is None:
        return None
    return enum_signal("rootMethod", ROOT_METHOD_NONE)


__all__ = [
    "ROOT_METHOD_GENERIC_SU_BINARY",
    "ROOT_METHOD_LEGACY_SU_MANAGER",
    "ROOT_METHOD_MAGISK",
    "installed_package_names",
    "probe_is_rooted",
    "probe_root_method",
]
