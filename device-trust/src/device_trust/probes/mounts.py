"""System-partition mutability probe (live mount table).

Only an explicit `/system` entry is inspected. Devices that mount the system
image at `/` (system-as-root, the norm since Android 10) have no such entry,
so the signal falls back to read-only there and the writable-system deduction
never fires on them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from device_trust.probes.base import ProbeContext, ProbeResult, boolean_signal
from device_trust.probes.registry import register_probe

logger = logging.getLogger(__name__)

MOUNT_TABLE_PATH = "/proc/mounts"
SYSTEM_MOUNT_POINT = "/system"
READ_ONLY_OPTION = "ro"


@dataclass(frozen=True)
class MountEntry:
    device: str
    mount_point: str
    fs_type: str
    options: Tuple[str, ...]


def parse_mount_table(text: str) -> List[MountEntry]:
    """Parse `/proc/mounts` lines (`device mount_point fs_type options ...`)."""

    entries: List[MountEntry] = []
    for line in str(text or "").replace("\r", "").splitlines():
        fields = line.split()
        if len(fields) < 4:
            continue
        entries.append(
            MountEntry(
                device=fields[0],
                mount_point=fields[1],
                fs_type=fields[2],
                options=tuple(fields[3].split(",")),
            )
        )
    return entries


def system_read_only(mount_table: Optional[str], *, mount_point: str = SYSTEM_MOUNT_POINT) -> bool:
    """True iff the system entry carries the `ro` option.

    An unreadable table or a missing entry is treated as read-only.
    """

    if mount_table is None:
        return True
    for entry in parse_mount_table(mount_table):
        if entry.mount_point == mount_point:
            return READ_ONLY_OPTION in entry.options
    return True


@register_probe("systemReadOnly")
def probe_system_read_only(ctx: ProbeContext) -> ProbeResult:
    table = ctx.controller.read_text(MOUNT_TABLE_PATH)
    if table is None:
        logger.debug("mount table unreadable; defaulting to read-only")
    return boolean_signal("systemReadOnly", system_read_only(table))
