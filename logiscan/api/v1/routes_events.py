# logiscan/api/v1/routes_events.py
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from logiscan.db.base import get_db
from logiscan.db.repositories.movements import get_movements_by_event
from logiscan.db.repositories.scan_lists import get_scan_lists_for_event
from logiscan.domain.events.schemas import EventCreate, EventOut, QuoteItemIn, QuoteItemOut
from logiscan.domain.events.service import add_quote_items, create_event, finalize_quote
from logiscan.domain.movements.schemas import MovementOut
from logiscan.domain.scan_lists.generator import generate_for_event
from logiscan.domain.scan_lists.schemas import ScanListOut


router = APIRouter(prefix="/api/v1/events", tags=["events"])


@router.post("", response_model=EventOut)
async def create_event_endpoint(
    payload: EventCreate,
    db: AsyncSession = Depends(get_db),
):
    return await create_event(db, payload)

@router.post("/{event_id}/quote-items", response_model=List[QuoteItemOut])
async def add_quote_items_endpoint(
    event_id: str,
    payload: List[QuoteItemIn],
    db: AsyncSession = Depends(get_db),
):
    return await add_quote_items(db, event_id, payload)

@router.post("/{event_id}/finalize", response_model=EventOut)
async def finalize_quote_endpoint(
    event_id: str,
    db: AsyncSession = Depends(get_db),
):
    return await finalize_quote(db, event_id)

@router.post("/{event_id}/scan-lists", response_model=List[ScanListOut])
async def generate_scan_lists_endpoint(
    event_id: str,
    db: AsyncSession = Depends(get_db),
):
    return await generate_for_event(db, event_id)

@router.get("/{event_id}/scan-lists", response_model=List[ScanListOut])
async def list_scan_lists_endpoint(
    event_id: str,
    db: AsyncSession = Depends(get_db),
):
    return await get_scan_lists_for_event(db, event_id)

@router.get("/{event_id}/movements", response_model=List[MovementOut])
async def event_movements_endpoint(
    event_id: str,
    db: AsyncSession = Depends(get_db),
):
    return await get_movements_by_event(db, event_id)
