"""Inventory pipelines: enumerate -> resolve -> rank."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Iterable, Optional

from device_trust.errors import InventoryUnavailableError
from device_trust.inventory.models import (
    SORT_BY_PERMISSION_COUNT,
    SORT_BY_TOTAL_BYTES,
    InventoryReport,
)
from device_trust.inventory.packages import enumerate_packages
from device_trust.inventory.permissions import extract_sensitive_permissions
from device_trust.inventory.ranking import DEFAULT_LIMIT, rank_records
from device_trust.inventory.storage import StorageResolver, load_stats_snapshot
from device_trust.probes.markers import SENSITIVE_PERMISSIONS

logger = logging.getLogger(__name__)


def scan_storage_inventory(
    controller: Any,
    *,
    limit: int = DEFAULT_LIMIT,
    aapt_path: Optional[str] = "aapt",
    user_id: int = 0,
) -> InventoryReport:
    """Installed packages ranked by total bytes (app + data)."""

    enumeration = enumerate_packages(controller, aapt_path=aapt_path)
    resolver = StorageResolver(controller, stats=load_stats_snapshot(controller), user_id=user_id)
    resolved = resolver.resolve_all(enumeration.records)
    ranked = rank_records(resolved, sort_key=SORT_BY_TOTAL_BYTES, limit=limit)
    logger.info(
        "storage inventory: scanned=%d skipped=%d returned=%d",
        len(resolved),
        len(enumeration.skipped),
        len(ranked),
    )
    return InventoryReport(
        records=ranked,
        sort_key=SORT_BY_TOTAL_BYTES,
        limit=limit,
        total_scanned=len(resolved),
        skipped=enumeration.skipped,
    )


def scan_sensitive_permissions(
    controller: Any,
    *,
    sensitive: Iterable[str] = SENSITIVE_PERMISSIONS,
    limit: Optional[int] = None,
    aapt_path: Optional[str] = "aapt",
    user_id: int = 0,
) -> InventoryReport:
    """Packages holding at least one sensitive grant, ranked by grant count."""

    enumeration = enumerate_packages(controller, aapt_path=aapt_path)
    grants, unreadable = extract_sensitive_permissions(
        controller,
        [r.package_name for r in enumeration.records],
        sensitive=sensitive,
        user_id=user_id,
    )
    if enumeration.records and len(unreadable) == len(enumeration.records):
        logger.error("permission state unreadable for all %d packages", len(unreadable))
        raise InventoryUnavailableError("cannot read permission state for any installed package")
    holders = [
        replace(r, granted_sensitive_permissions=grants[r.package_name])
        for r in enumeration.records
        if r.package_name in grants
    ]
    effective_limit = len(holders) if limit is None else limit
    ranked = rank_records(holders, sort_key=SORT_BY_PERMISSION_COUNT, limit=effective_limit)
    logger.info(
        "permission inventory: scanned=%d holders=%d unreadable=%d",
        len(enumeration.records),
        len(holders),
        len(unreadable),
    )
    return InventoryReport(
        records=ranked,
        sort_key=SORT_BY_PERMISSION_COUNT,
        limit=effective_limit,
        total_scanned=len(enumeration.records),
        skipped=enumeration.skipped + tuple(unreadable),
    )
