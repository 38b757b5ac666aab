from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import select

from logiscan.db.models.events import Event
from logiscan.db.models.quote_items import QuoteItem

async def get_event_by_id(
    db: AsyncSession,
    event_id: str
) -> Optional[Event]:
    result = await db.execute(
        select(Event).where(Event.event_id == event_id)
    )
    return result.scalar_one_or_none()

async def get_quote_items_for_event(
    db: AsyncSession,
    event_id: str
) -> List[QuoteItem]:
    result = await db.execute(
        select(QuoteItem)
        .where(QuoteItem.event_id == event_id)
        .order_by(QuoteItem.line_number)
    )
    return list(result.scalars().all())
