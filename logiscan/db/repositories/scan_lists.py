from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import select

from logiscan.db.models.scan_lists import ALL_DIRECTIONS, PreparationListItem, ScanList

async def get_scan_list_by_id(
    db: AsyncSession,
    scan_list_id: UUID
) -> Optional[ScanList]:
    result = await db.execute(
        select(ScanList).where(ScanList.scan_list_id == scan_list_id)
    )
    return result.scalar_one_or_none()

async def get_scan_lists_for_event(
    db: AsyncSession,
    event_id: str
) -> List[ScanList]:
    result = await db.execute(
        select(ScanList).where(ScanList.event_id == event_id)
    )
    lists = list(result.scalars().all())
    # lifecycle order rather than insertion order
    lists.sort(key=lambda sl: ALL_DIRECTIONS.index(sl.scan_direction))
    return lists

async def get_incomplete_items(
    db: AsyncSession,
    scan_list_id: UUID
) -> List[PreparationListItem]:
    result = await db.execute(
        select(PreparationListItem)
        .where(
            PreparationListItem.scan_list_id == scan_list_id,
            PreparationListItem.quantity_scanned < PreparationListItem.quantity_required,
        )
        .order_by(PreparationListItem.category, PreparationListItem.name)
    )
    return list(result.scalars().all())
