"""Package enumerator.

Lists installed packages via `pm list packages -f` and resolves, per package,
a display name and the system/user classification. A malformed entry or a
per-package failure skips only that package; failing to obtain the list at
all is a global failure (`InventoryUnavailableError`).
"""

from __future__ import annotations

import logging
import re
import shlex
from dataclasses import dataclass, field
from typing import Any, List, Optional, Set, Tuple

from device_trust.errors import InventoryUnavailableError
from device_trust.inventory.models import PackageRecord

logger = logging.getLogger(__name__)

_PACKAGE_PREFIX = "package:"
_LABEL_RE = re.compile(r"^application-label:'(?P<label>.*)'\s*$", flags=re.MULTILINE)

# Used only when `pm list packages -s` is unavailable.
SYSTEM_CODE_PATH_PREFIXES: Tuple[str, ...] = (
    "/system/",
    "/system_ext/",
    "/product/",
    "/vendor/",
    "/odm/",
    "/apex/",
)


def parse_package_list(stdout: str) -> Tuple[List[Tuple[str, Optional[str]]], List[str]]:
    """Parse `pm list packages [-f]` output.

    Returns `(entries, malformed)` where each entry is `(package, code_path)`;
    code_path is None for plain `pm list packages` output.
    """

    entries: List[Tuple[str, Optional[str]]] = []
    malformed: List[str] = []
    for raw in str(stdout or "").replace("\r", "").splitlines():
        line = raw.strip()
        if not line:
            continue
        if not line.startswith(_PACKAGE_PREFIX):
            malformed.append(line)
            continue
        payload = line[len(_PACKAGE_PREFIX) :]
        if "=" in payload:
            path, _, pkg = payload.rpartition("=")
            path = path.strip() or None
        else:
            path, pkg = None, payload
        pkg = pkg.strip()
        if not pkg:
            malformed.append(line)
            continue
        entries.append((pkg, path))
    return entries, malformed


def is_system_code_path(code_path: Optional[str]) -> bool:
    if not code_path:
        return False
    return any(code_path.startswith(prefix) for prefix in SYSTEM_CODE_PATH_PREFIXES)


@dataclass
class LabelResolver:
    """Resolve application labels with `aapt dump badging` on the device.

    Disables itself for the rest of the scan once the tool turns out to be
    missing; every failure falls back to the package identifier.
    """

    controller: Any
    aapt_path: Optional[str] = "aapt"
    _disabled: bool = field(default=False, init=False)

    def resolve(self, package: str, code_path: Optional[str]) -> str:
        if self._disabled or not self.aapt_path or not code_path:
            return package
        cmd = f"{shlex.quote(self.aapt_path)} dump badging {shlex.quote(code_path)}"
        try:
            res = self.controller.adb_shell(cmd, check=False)
        except Exception as e:
            logger.debug("label lookup for %s failed: %s", package, e)
            return package

        combined = f"{res.stdout or ''}\n{res.stderr or ''}".lower()
        if res.returncode == 127 or "not found" in combined:
            logger.debug("aapt unavailable at %s; using package names", self.aapt_path)
            self._disabled = True
            return package

        m = _LABEL_RE.search(res.stdout or "")
        label = (m.group("label") if m else "").strip()
        return label or package


def _system_packages(controller: Any) -> Optional[Set[str]]:
    try:
        res = controller.list_packages("-s")
    except Exception as e:
        logger.debug("pm list packages -s failed: %s", e)
        return None
    entries, _ = parse_package_list(res.stdout)
    return {pkg for pkg, _ in entries}


@dataclass(frozen=True)
class Enumeration:
    records: Tuple[PackageRecord, ...]
    skipped: Tuple[str, ...]


def enumerate_packages(controller: Any, *, aapt_path: Optional[str] = "aapt") -> Enumeration:
    """List installed packages as bare PackageRecords (footprint unresolved)."""

    try:
        res = controller.list_packages("-f")
    except Exception as e:
        logger.exception("cannot obtain the installed package list")
        raise InventoryUnavailableError(f"cannot list installed packages: {e}") from e

    entries, malformed = parse_package_list(res.stdout)
    if not entries and not (res.stdout or "").strip():
        raise InventoryUnavailableError("package manager returned an empty package list")

    skipped: List[str] = list(malformed)
    for line in malformed:
        logger.warning("skipping malformed package entry: %r", line[:120])

    system_set = _system_packages(controller)
    labels = LabelResolver(controller=controller, aapt_path=aapt_path)

    records: List[PackageRecord] = []
    seen: Set[str] = set()
    for pkg, code_path in entries:
        if pkg in seen:
            continue
        seen.add(pkg)
        try:
            if system_set is not None:
                is_system = pkg in system_set
            else:
                is_system = is_system_code_path(code_path)
            records.append(
                PackageRecord(
                    package_name=pkg,
                    app_name=labels.resolve(pkg, code_path),
                    is_system_app=is_system,
                    code_path=code_path,
                )
            )
        except Exception as e:
            logger.warning("skipping package %s: %s", pkg, e)
            skipped.append(pkg)

    return Enumeration(records=tuple(records), skipped=tuple(skipped))
