"""Inventory value objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

TIER_PRECISE = "precise"
TIER_DEGRADED = "degraded-file-size"
TIER_UNAVAILABLE = "unavailable"

SORT_BY_TOTAL_BYTES = "total_bytes"
SORT_BY_PERMISSION_COUNT = "permission_count"

_MB = 1024.0 * 1024.0


@dataclass(frozen=True)
class StorageFootprint:
    app_bytes: int
    data_bytes: int
    cache_bytes: int
    total_bytes: int
    source_tier: str

    @classmethod
    def precise(cls, *, app_bytes: int, data_bytes: int, cache_bytes: int) -> "StorageFootprint":
        # Cache is reclaimable and stays out of the total.
        return cls(
            app_bytes=int(app_bytes),
            data_bytes=int(data_bytes),
            cache_bytes=int(cache_bytes),
            total_bytes=int(app_bytes) + int(data_bytes),
            source_tier=TIER_PRECISE,
        )

    @classmethod
    def degraded(cls, *, file_bytes: int) -> "StorageFootprint":
        return cls(
            app_bytes=int(file_bytes),
            data_bytes=0,
            cache_bytes=0,
            total_bytes=int(file_bytes),
            source_tier=TIER_DEGRADED,
        )

    @classmethod
    def unavailable(cls) -> "StorageFootprint":
        return cls(0, 0, 0, 0, TIER_UNAVAILABLE)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "appBytes": self.app_bytes,
            "dataBytes": self.data_bytes,
            "cacheBytes": self.cache_bytes,
            "totalBytes": self.total_bytes,
            "appSizeMb": self.app_bytes / _MB,
            "dataSizeMb": self.data_bytes / _MB,
            "cacheSizeMb": self.cache_bytes / _MB,
            "totalSizeMb": self.total_bytes / _MB,
            "sourceTier": self.source_tier,
        }


@dataclass(frozen=True)
class PackageRecord:
    package_name: str
    app_name: str
    is_system_app: bool
    code_path: Optional[str] = None
    footprint: StorageFootprint = field(default_factory=StorageFootprint.unavailable)
    granted_sensitive_permissions: Tuple[str, ...] = ()

    @property
    def total_bytes(self) -> int:
        return self.footprint.total_bytes

    @property
    def permission_count(self) -> int:
        return len(self.granted_sensitive_permissions)

    def storage_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "packageName": self.package_name,
            "appName": self.app_name,
            "isSystemApp": self.is_system_app,
        }
        out.update(self.footprint.to_dict())
        return out

    def permissions_dict(self) -> Dict[str, Any]:
        return {
            "packageName": self.package_name,
            "appName": self.app_name,
            "permissions": list(self.granted_sensitive_permissions),
            "permissionCount": self.permission_count,
            "isSystemApp": self.is_system_app,
        }


@dataclass(frozen=True)
class InventoryReport:
    records: Tuple[PackageRecord, ...]
    sort_key: str
    limit: int
    total_scanned: int
    skipped: Tuple[str, ...] = ()
