# logiscan/domain/events/service.py
import logging
from typing import List, Sequence
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from logiscan.core.errors import EventNotFound, LogiScanError, NoQuoteItems, PersistenceError
from logiscan.db.models.common import utcnow
from logiscan.db.models.events import Event, EventStatus, QuoteStatus
from logiscan.db.models.quote_items import QuoteItem
from logiscan.db.repositories.events import get_event_by_id, get_quote_items_for_event
from .schemas import EventCreate, QuoteItemIn

logger = logging.getLogger(__name__)


async def _commit(db: AsyncSession, what: str) -> None:
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise PersistenceError(f"Could not save {what}: {exc}") from exc


async def create_event(
    db: AsyncSession,
    data: EventCreate
) -> Event:
    if await get_event_by_id(db, data.event_id) is not None:
        raise LogiScanError(f"Event {data.event_id} already exists", event_id=data.event_id)

    event = Event(
        event_id=data.event_id,
        name=data.name,
        client_name=data.client_name,
        client_phone=data.client_phone,
        client_email=data.client_email,
        address=data.address,
        start_date=data.start_date,
        end_date=data.end_date,
        assigned_truck_id=data.assigned_truck_id,
        selected_scan_directions=[d.value for d in data.selected_scan_directions],
        quote_status=QuoteStatus.DRAFT,
        status=EventStatus.PLANNING,
    )
    db.add(event)
    await db.flush()
    _add_lines(db, event.event_id, data.quote_items, start=0)
    await _commit(db, f"event {data.event_id}")
    logger.info("event %s created with %d quote line(s)", event.event_id, len(data.quote_items))
    return event


def _add_lines(db: AsyncSession, event_id: str, lines: Sequence[QuoteItemIn], start: int) -> List[QuoteItem]:
    added = []
    for offset, line in enumerate(lines):
        quote_item = QuoteItem(
            event_id=event_id,
            line_number=start + offset,
            sku=line.sku,
            name=line.name,
            category=line.category,
            quantity=line.quantity,
            unit_price=line.unit_price,
        )
        db.add(quote_item)
        added.append(quote_item)
    return added


async def add_quote_items(
    db: AsyncSession,
    event_id: str,
    lines: Sequence[QuoteItemIn]
) -> List[QuoteItem]:
    event = await get_event_by_id(db, event_id)
    if event is None:
        raise EventNotFound(event_id)
    if event.quote_status != QuoteStatus.DRAFT:
        raise LogiScanError(f"Quote of event {event_id} is {event.quote_status.value}", event_id=event_id)

    existing = await get_quote_items_for_event(db, event_id)
    added = _add_lines(db, event_id, lines, start=len(existing))
    await _commit(db, f"quote items of event {event_id}")
    return added


async def finalize_quote(
    db: AsyncSession,
    event_id: str
) -> Event:
    event = await get_event_by_id(db, event_id)
    if event is None:
        raise EventNotFound(event_id)
    if event.quote_status == QuoteStatus.FINALIZED:
        return event
    if not await get_quote_items_for_event(db, event_id):
        raise NoQuoteItems(event_id=event_id)

    event.quote_status = QuoteStatus.FINALIZED
    event.status = EventStatus.CONFIRMED
    event.updated_at = utcnow()
    await _commit(db, f"event {event_id}")
    logger.info("event %s quote finalized", event_id)
    return event
