# logiscan/domain/scan_lists/generator.py
import logging
from typing import List, Optional, Sequence
from uuid import UUID
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from logiscan.core.errors import (
    EventNotFinalized,
    EventNotFound,
    InvalidQuoteItem,
    NoQuoteItems,
    PersistenceError,
    ScanListNotFound,
)
from logiscan.db.models.common import utcnow
from logiscan.db.models.events import Event, QuoteStatus
from logiscan.db.models.quote_items import QuoteItem
from logiscan.db.models.scan_lists import (
    ALL_DIRECTIONS,
    PreparationListItem,
    ScanDirection,
    ScanItemStatus,
    ScanList,
    ScanListStatus,
)
from logiscan.db.repositories.events import get_event_by_id, get_quote_items_for_event
from logiscan.db.repositories.scan_lists import (
    get_incomplete_items,
    get_scan_list_by_id,
    get_scan_lists_for_event,
)
from .completion import refresh_progress

logger = logging.getLogger(__name__)


def selected_directions(event: Event) -> List[ScanDirection]:
    directions = []
    for value in event.selected_scan_directions or []:
        try:
            direction = ScanDirection(value)
        except ValueError:
            logger.warning("event %s: ignoring unknown scan direction %r", event.event_id, value)
            continue
        if direction not in directions:
            directions.append(direction)
    if not directions:
        return list(ALL_DIRECTIONS)
    return sorted(directions, key=ALL_DIRECTIONS.index)


def build_scan_list(
    event: Event,
    quote_items: Sequence[QuoteItem],
    direction: ScanDirection
) -> ScanList:
    scan_list = ScanList(
        event_id=event.event_id,
        event_name=event.name,
        scan_direction=direction,
        total_items=len(quote_items),
        scanned_items=0,
        status=ScanListStatus.PENDING,
        version=1,
    )
    for position, line in enumerate(quote_items):
        scan_list.items.append(
            PreparationListItem(
                position=position,
                sku=line.sku,
                name=line.name,
                category=line.category or "",
                quantity_required=line.quantity,
                quantity_scanned=0,
                scanned_assets=[],
                status=ScanItemStatus.PENDING,
            )
        )
    return scan_list


async def generate_all(
    db: AsyncSession,
    event: Event,
    quote_items: Sequence[QuoteItem]
) -> List[ScanList]:
    """Create one scan list per transfer leg from the finalized quote.

    Lists that already exist for the event are reused as they are; only the
    missing legs are created, so calling this twice never duplicates a list.
    """
    if event.quote_status != QuoteStatus.FINALIZED:
        raise EventNotFinalized(event.event_id)
    if not quote_items:
        raise NoQuoteItems(event_id=event.event_id)
    for line in quote_items:
        if line.quantity is None or line.quantity < 1:
            raise InvalidQuoteItem(
                f"Quote line {line.sku} has quantity {line.quantity}",
                sku=line.sku,
                quantity=line.quantity,
            )

    existing = {sl.scan_direction: sl for sl in await get_scan_lists_for_event(db, event.event_id)}
    lists: List[ScanList] = []
    created = 0
    for direction in selected_directions(event):
        scan_list = existing.get(direction)
        if scan_list is None:
            scan_list = build_scan_list(event, quote_items, direction)
            db.add(scan_list)
            created += 1
        lists.append(scan_list)

    event_id = event.event_id
    if created:
        try:
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            raise PersistenceError(f"Could not create scan lists for event {event_id}: {exc}") from exc

    logger.info(
        "event %s: %d scan list(s) created, %d reused",
        event_id, created, len(lists) - created,
    )
    return lists


async def generate_for_event(
    db: AsyncSession,
    event_id: str
) -> List[ScanList]:
    event = await get_event_by_id(db, event_id)
    if event is None:
        raise EventNotFound(event_id)
    quote_items = await get_quote_items_for_event(db, event_id)
    return await generate_all(db, event, quote_items)


async def load_scan_list(
    db: AsyncSession,
    scan_list_id: UUID
) -> ScanList:
    scan_list = await get_scan_list_by_id(db, scan_list_id)
    if scan_list is None:
        raise ScanListNotFound(scan_list_id)
    return scan_list


async def _save(db: AsyncSession, scan_list_id: UUID, action: str) -> None:
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise PersistenceError(
            f"Could not {action} scan list {scan_list_id}: {exc}",
            scan_list_id=str(scan_list_id),
        ) from exc


async def reset_scan_list(
    db: AsyncSession,
    scan_list: ScanList
) -> ScanList:
    # freeze markers set by a completed loading list are left as they are
    for item in scan_list.items:
        item.scanned_assets = []
        item.quantity_scanned = 0
        item.last_scanned_at = None
        item.refresh_status()
    scan_list.status = ScanListStatus.PENDING
    scan_list.completed_at = None
    refresh_progress(scan_list)

    scan_list_id = scan_list.scan_list_id
    await _save(db, scan_list_id, "reset")
    logger.info("scan list %s reset", scan_list_id)
    return scan_list


async def cancel_scan_list(
    db: AsyncSession,
    scan_list: ScanList
) -> ScanList:
    scan_list.status = ScanListStatus.CANCELLED
    scan_list.updated_at = utcnow()
    scan_list.version = (scan_list.version or 0) + 1

    scan_list_id = scan_list.scan_list_id
    await _save(db, scan_list_id, "cancel")
    logger.info("scan list %s cancelled", scan_list_id)
    return scan_list


async def delete_scan_list(
    db: AsyncSession,
    scan_list: ScanList
) -> None:
    scan_list_id = scan_list.scan_list_id
    await db.delete(scan_list)
    await _save(db, scan_list_id, "delete")
    logger.info("scan list %s deleted", scan_list_id)


async def next_item_to_scan(
    db: AsyncSession,
    scan_list: ScanList
) -> Optional[PreparationListItem]:
    items = await get_incomplete_items(db, scan_list.scan_list_id)
    return items[0] if items else None
