"""Installed-application inventory scanner."""

from __future__ import annotations

from device_trust.inventory.models import (
    SORT_BY_PERMISSION_COUNT,
    SORT_BY_TOTAL_BYTES,
    TIER_DEGRADED,
    TIER_PRECISE,
    TIER_UNAVAILABLE,
    InventoryReport,
    PackageRecord,
    StorageFootprint,
)
from device_trust.inventory.ranking import DEFAULT_LIMIT, rank_records
from device_trust.inventory.scanner import scan_sensitive_permissions, scan_storage_inventory

__all__ = [
    "DEFAULT_LIMIT",
    "SORT_BY_PERMISSION_COUNT",
    "SORT_BY_TOTAL_BYTES",
    "TIER_DEGRADED",
    "TIER_PRECISE",
    "TIER_UNAVAILABLE",
    "InventoryReport",
    "PackageRecord",
    "StorageFootprint",
    "rank_records",
    "scan_sensitive_permissions",
    "scan_storage_inventory",
]
