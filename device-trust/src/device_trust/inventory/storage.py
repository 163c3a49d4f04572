"""Storage resolver.

Per-package footprint with an ordered fallback:

1. precise: platform storage statistics (`dumpsys diskstats`), keyed by
   storage volume, package and user; needs API 26+.
2. degraded-file-size: size of the installed base APK.
3. unavailable: all zero.

A failing or unsupported source degrades a single record, never the scan.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from device_trust.inventory.models import PackageRecord, StorageFootprint

logger = logging.getLogger(__name__)

# Android 8.0 introduced per-package storage statistics.
MIN_STATS_API_LEVEL = 26

INTERNAL_VOLUME = "internal"
# diskstats reports the internal volume for the primary user only.
DISKSTATS_USER_ID = 0
_ADOPTED_VOLUME_RE = re.compile(r"^/mnt/expand/(?P<uuid>[^/]+)/")

_DISKSTATS_ARRAY_RE = re.compile(
    r"^\s*(?P<key>Package Names|App Sizes|App Data Sizes|Cache Sizes)\s*:\s*(?P<value>\[.*\])\s*$",
    flags=re.MULTILINE,
)


@dataclass(frozen=True)
class PackageStats:
    app_bytes: int
    data_bytes: int
    cache_bytes: int


@dataclass(frozen=True)
class StorageStatsSnapshot:
    """Per-package stats for one volume/user, read once per scan."""

    volume_uuid: str
    user_id: int
    by_package: Mapping[str, PackageStats]

    def query(self, volume_uuid: str, package: str, user_id: int) -> Optional[PackageStats]:
        if volume_uuid != self.volume_uuid or user_id != self.user_id:
            return None
        return self.by_package.get(package)


def parse_diskstats(text: str) -> Dict[str, PackageStats]:
    """Parse the parallel per-package arrays from `dumpsys diskstats`.

    Returns an empty dict when the arrays are missing or inconsistent.
    """

    arrays: Dict[str, List[Any]] = {}
    for m in _DISKSTATS_ARRAY_RE.finditer(str(text or "")):
        try:
            value = json.loads(m.group("value"))
        except ValueError:
            logger.debug("diskstats: cannot decode %s", m.group("key"))
            return {}
        if not isinstance(value, list):
            return {}
        arrays[m.group("key")] = value

    names = arrays.get("Package Names")
    app = arrays.get("App Sizes")
    data = arrays.get("App Data Sizes")
    cache = arrays.get("Cache Sizes")
    if names is None or app is None or data is None or cache is None:
        return {}
    if not (len(names) == len(app) == len(data) == len(cache)):
        logger.debug("diskstats: array lengths differ")
        return {}

    out: Dict[str, PackageStats] = {}
    for pkg, a, d, c in zip(names, app, data, cache):
        try:
            out[str(pkg)] = PackageStats(app_bytes=int(a), data_bytes=int(d), cache_bytes=int(c))
        except (TypeError, ValueError):
            continue
    return out


def volume_uuid_for_path(code_path: Optional[str]) -> str:
    if code_path:
        m = _ADOPTED_VOLUME_RE.match(code_path)
        if m:
            return m.group("uuid")
    return INTERNAL_VOLUME


def load_stats_snapshot(controller: Any) -> Optional[StorageStatsSnapshot]:
    """Read the precise-tier source, or None when unsupported/unavailable."""

    api_level = controller.android_api_level()
    if api_level is None or api_level < MIN_STATS_API_LEVEL:
        logger.info("storage stats unsupported (api=%s); using file sizes", api_level)
        return None
    try:
        res = controller.dumpsys("diskstats", check=False)
    except Exception as e:
        logger.warning("dumpsys diskstats failed: %s", e)
        return None
    if not res.ok():
        logger.warning("dumpsys diskstats rc=%s", res.returncode)
        return None
    by_package = parse_diskstats(res.stdout)
    if not by_package:
        return None
    return StorageStatsSnapshot(
        volume_uuid=INTERNAL_VOLUME, user_id=DISKSTATS_USER_ID, by_package=by_package
    )


class StorageResolver:
    def __init__(
        self,
        controller: Any,
        *,
        stats: Optional[StorageStatsSnapshot],
        user_id: int = 0,
    ) -> None:
        self._controller = controller
        self._stats = stats
        self._user_id = user_id

    def _precise(self, record: PackageRecord) -> Optional[StorageFootprint]:
        if self._stats is None:
            return None
        found = self._stats.query(
            volume_uuid_for_path(record.code_path), record.package_name, self._user_id
        )
        if found is None:
            return None
        return StorageFootprint.precise(
            app_bytes=found.app_bytes,
            data_bytes=found.data_bytes,
            cache_bytes=found.cache_bytes,
        )

    def _degraded(self, record: PackageRecord) -> Optional[StorageFootprint]:
        if not record.code_path:
            return None
        size = self._controller.file_size(record.code_path)
        if size is None:
            return None
        return StorageFootprint.degraded(file_bytes=size)

    def resolve(self, record: PackageRecord) -> StorageFootprint:
        for tier in (self._precise, self._degraded):
            try:
                footprint = tier(record)
            except Exception as e:
                logger.debug("%s for %s failed: %s", tier.__name__, record.package_name, e)
                continue
            if footprint is not None:
                return footprint
        logger.debug("no storage source for %s", record.package_name)
        return StorageFootprint.unavailable()

    def resolve_all(self, records: Iterable[PackageRecord]) -> Tuple[PackageRecord, ...]:
        return tuple(replace(r, footprint=self.resolve(r)) for r in records)
