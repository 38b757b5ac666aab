# logiscan/domain/scan_lists/completion.py
"""Aggregate progress of a scan list and what happens when it completes.

``mark_completed`` is edge-triggered: it only reports True on the call that
moves the list into ``completed``. The freeze/release side effects run in
their own transaction through ``apply_completion_effects`` and are safe to
retry: freezing a frozen asset or releasing a released one changes nothing.
"""
import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from logiscan.core.errors import CompletionEffectError
from logiscan.db.models.common import utcnow
from logiscan.db.models.events import EventStatus
from logiscan.db.models.scan_lists import ScanDirection, ScanList, ScanListStatus
from logiscan.db.repositories.assets import get_assets_by_ids
from logiscan.db.repositories.events import get_event_by_id

logger = logging.getLogger(__name__)


def scanned_asset_ids(scan_list: ScanList):
    return [asset_id for item in scan_list.items for asset_id in item.scanned_assets]


def refresh_progress(scan_list: ScanList, now: Optional[datetime] = None) -> None:
    """Recompute the aggregate counters from the items and stamp the list."""
    scan_list.total_items = len(scan_list.items)
    scan_list.scanned_items = sum(1 for item in scan_list.items if item.is_complete)
    scan_list.updated_at = now or utcnow()
    scan_list.version = (scan_list.version or 0) + 1

    units = sum(item.quantity_scanned for item in scan_list.items)
    if scan_list.status == ScanListStatus.PENDING and units > 0:
        scan_list.status = ScanListStatus.IN_PROGRESS
    elif scan_list.status in (ScanListStatus.IN_PROGRESS, ScanListStatus.COMPLETED):
        if units == 0:
            scan_list.status = ScanListStatus.PENDING
            scan_list.completed_at = None
        elif scan_list.status == ScanListStatus.COMPLETED and not scan_list.is_complete:
            scan_list.status = ScanListStatus.IN_PROGRESS
            scan_list.completed_at = None


def mark_completed(scan_list: ScanList, now: Optional[datetime] = None) -> bool:
    if scan_list.status in (ScanListStatus.COMPLETED, ScanListStatus.CANCELLED):
        return False
    if not scan_list.is_complete:
        return False

    now = now or utcnow()
    scan_list.status = ScanListStatus.COMPLETED
    scan_list.updated_at = now
    scan_list.completed_at = now
    logger.info(
        "scan list %s (%s, event %s) completed",
        scan_list.scan_list_id, scan_list.scan_direction.value, scan_list.event_id,
    )
    return True


async def freeze_assets(
    db: AsyncSession,
    scan_list: ScanList,
    now: Optional[datetime] = None
) -> int:
    now = now or utcnow()
    changed = 0
    for asset in await get_assets_by_ids(db, scanned_asset_ids(scan_list)):
        if asset.frozen_event_id == scan_list.event_id:
            continue
        asset.frozen_event_id = scan_list.event_id
        asset.frozen_at = now
        asset.updated_at = now
        changed += 1
    return changed


async def release_assets(
    db: AsyncSession,
    scan_list: ScanList,
    now: Optional[datetime] = None
) -> int:
    now = now or utcnow()
    changed = 0
    for asset in await get_assets_by_ids(db, scanned_asset_ids(scan_list)):
        if asset.frozen_event_id != scan_list.event_id:
            continue
        asset.frozen_event_id = None
        asset.frozen_at = None
        asset.updated_at = now
        changed += 1

    event = await get_event_by_id(db, scan_list.event_id)
    if event is not None and event.status != EventStatus.COMPLETED:
        event.status = EventStatus.COMPLETED
        event.updated_at = now
    return changed


async def apply_completion_effects(
    db: AsyncSession,
    scan_list: ScanList,
    now: Optional[datetime] = None
) -> int:
    """Freeze after loading, release after return; other legs do nothing.

    Returns the number of assets whose freeze marker changed. Raises
    ``CompletionEffectError`` when the change cannot be saved; the list
    itself stays completed.
    """
    if scan_list.status != ScanListStatus.COMPLETED:
        return 0

    # read before the rollback below can expire the list
    scan_list_id = scan_list.scan_list_id
    direction = scan_list.scan_direction
    event_id = scan_list.event_id

    try:
        if direction == ScanDirection.STOCK_TO_TRUCK:
            changed = await freeze_assets(db, scan_list, now)
            action = "frozen"
        elif direction == ScanDirection.TRUCK_TO_STOCK:
            changed = await release_assets(db, scan_list, now)
            action = "released"
        else:
            return 0
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise CompletionEffectError(
            f"Completion effects failed for scan list {scan_list_id}: {exc}",
            scan_list_id=str(scan_list_id),
            direction=direction.value,
        ) from exc

    logger.info("%d asset(s) %s for event %s", changed, action, event_id)
    return changed
