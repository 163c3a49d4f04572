"""Sensitive-permission extractor via `dumpsys package <pkg>`.

Only *granted* permissions count. Grant state is read from, in order of
precedence, the per-user runtime section, the install section and the legacy
`grantedPermissions` list; a permission that is merely requested is ignored.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)

_SECTION_RE = re.compile(
    r"^\s*(?P<section>requested permissions|install permissions|runtime permissions|"
    r"granted\s*permissions)\s*:\s*$",
    flags=re.IGNORECASE,
)
_USER_RE = re.compile(r"^\s*User\s+(?P<user_id>\d+)\s*:", flags=re.IGNORECASE)
_PERM_GRANTED_RE = re.compile(
    r"^\s*(?P<perm>[A-Za-z0-9_.]+)\s*:\s*granted=(?P<granted>true|false)\b",
    flags=re.IGNORECASE,
)


def _package_missing(stdout: str) -> bool:
    lowered = str(stdout or "").lower()
    return "unable to find package" in lowered or lowered.strip().startswith("error: package")


def _dumpsys_ok(res: Any) -> bool:
    if res is None or res.returncode != 0:
        return False
    lowered = str(res.stdout or "").lower()
    if "permission denial" in lowered or "securityexception" in lowered:
        return False
    if lowered.strip().startswith("error:") or _package_missing(lowered):
        return False
    return True


def parse_dumpsys_package_permissions(text: str, *, user_id: int = 0) -> Dict[str, Any]:
    """Parse permission state (best-effort) from `dumpsys package <pkg>` output."""

    requested: Set[str] = set()
    granted_list: Set[str] = set()
    install: Dict[str, bool] = {}
    runtime: Dict[str, bool] = {}
    sections_seen = {
        "requested": False,
        "granted_permissions": False,
        "install": False,
        "runtime": False,
    }

    current_section: Optional[str] = None
    current_user: Optional[int] = None

    for line in str(text or "").replace("\r", "").splitlines():
        user_match = _USER_RE.match(line)
        if user_match:
            current_user = int(user_match.group("user_id"))

        section_match = _SECTION_RE.match(line)
        if section_match:
            section = re.sub(r"\s+", " ", section_match.group("section").strip().lower())
            if section == "requested permissions":
                current_section = "requested"
            elif section == "install permissions":
                current_section = "install"
            elif section == "runtime permissions":
                current_section = "runtime"
            else:
                current_section = "granted_permissions"
            sections_seen[current_section] = True
            continue

        if current_section in {"install", "runtime"}:
            m = _PERM_GRANTED_RE.match(line)
            if not m:
                continue
            perm = m.group("perm").strip()
            granted = m.group("granted").lower() == "true"
            if current_section == "install":
                install[perm] = granted
            elif current_user == int(user_id):
                runtime[perm] = granted
            continue

        if current_section in {"requested", "granted_permissions"}:
            perm = line.strip()
            if not perm or " " in perm or perm.endswith(":"):
                continue
            if perm.lower().startswith("android.permission-group."):
                continue
            if current_section == "requested":
                requested.add(perm)
            else:
                granted_list.add(perm)

    return {
        "ok": any(sections_seen.values()),
        "user_id": int(user_id),
        "sections_seen": sections_seen,
        "requested_permissions": sorted(requested),
        "granted_permissions": sorted(granted_list),
        "install_permissions": install,
        "runtime_permissions": runtime,
    }


def effective_granted_permissions(parsed: Dict[str, Any]) -> Set[str]:
    """Permissions whose effective state is granted."""

    state: Dict[str, bool] = {perm: True for perm in parsed.get("granted_permissions") or []}
    state.update(parsed.get("install_permissions") or {})
    state.update(parsed.get("runtime_permissions") or {})
    return {perm for perm, granted in state.items() if granted}


def short_permission_name(permission: str) -> str:
    return permission.rsplit(".", 1)[-1]


def sensitive_grants(granted: Iterable[str], sensitive: Iterable[str]) -> Tuple[str, ...]:
    """Short names of granted permissions in the closed sensitive set.

    Ordered by the sensitive table so output is deterministic.
    """

    granted_set = set(granted)
    return tuple(short_permission_name(p) for p in sensitive if p in granted_set)


def read_granted_permissions(controller: Any, package: str, *, user_id: int = 0) -> Optional[Set[str]]:
    """Granted permissions of one package, None when unreadable."""

    try:
        res = controller.dumpsys("package", package, check=False)
    except Exception as e:
        logger.debug("dumpsys package %s failed: %s", package, e)
        return None
    if not _dumpsys_ok(res):
        return None
    parsed = parse_dumpsys_package_permissions(res.stdout, user_id=user_id)
    if not parsed["ok"]:
        return None
    return effective_granted_permissions(parsed)


def extract_sensitive_permissions(
    controller: Any,
    packages: Iterable[str],
    *,
    sensitive: Iterable[str],
    user_id: int = 0,
) -> Tuple[Dict[str, Tuple[str, ...]], List[str]]:
    """Map package -> sensitive short names, dropping empty intersections.

    Returns `(grants, skipped)`; skipped packages had unreadable metadata.
    """

    sensitive_table = tuple(sensitive)
    grants: Dict[str, Tuple[str, ...]] = {}
    skipped: List[str] = []
    for package in packages:
        granted = read_granted_permissions(controller, package, user_id=user_id)
        if granted is None:
            logger.warning("skipping %s: permission state unreadable", package)
            skipped.append(package)
            continue
        names = sensitive_grants(granted, sensitive_table)
        if names:
            grants[package] = names
    return grants, skipped
