# tests/factories.py
from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from logiscan.db.models.assets import Asset, AssetStatus
from logiscan.db.models.events import Event
from logiscan.db.models.scan_lists import ScanDirection, ScanList
from logiscan.domain.catalog.schemas import StockItemCreate
from logiscan.domain.catalog.service import build_qr_payload, create_stock_item
from logiscan.domain.events.schemas import EventCreate, QuoteItemIn
from logiscan.domain.events.service import create_event, finalize_quote
from logiscan.domain.scan_lists.generator import generate_for_event


async def make_stock(
    db: AsyncSession,
    sku: str,
    asset_ids: Iterable[str] = (),
    total_quantity: int = 10,
    category: str = "",
) -> List[Asset]:
    """Catalog entry plus hand-named assets (A1, A2...) for readable tests."""
    await create_stock_item(
        db,
        StockItemCreate(sku=sku, name=f"Item {sku}", category=category, total_quantity=total_quantity),
    )
    assets = []
    for asset_id in asset_ids:
        asset = Asset(
            asset_id=asset_id,
            sku=sku,
            name=f"Item {sku}",
            category=category,
            status=AssetStatus.AVAILABLE,
            current_location_id="STOCK",
            qr_payload=build_qr_payload(asset_id, sku),
        )
        db.add(asset)
        assets.append(asset)
    await db.commit()
    return assets


async def make_event(
    db: AsyncSession,
    lines: Sequence[Tuple[str, int]],
    *,
    event_id: str = "EVT-1",
    truck_id: Optional[str] = "TRUCK-1",
    directions: Sequence[ScanDirection] = (),
    finalize: bool = True,
) -> Event:
    event = await create_event(
        db,
        EventCreate(
            event_id=event_id,
            name=f"Event {event_id}",
            client_name="ACME",
            assigned_truck_id=truck_id,
            selected_scan_directions=list(directions),
            quote_items=[QuoteItemIn(sku=sku, name=f"Item {sku}", quantity=qty) for sku, qty in lines],
        ),
    )
    if finalize:
        event = await finalize_quote(db, event_id)
    return event


async def make_scan_list(
    db: AsyncSession,
    lines: Sequence[Tuple[str, int]],
    direction: ScanDirection = ScanDirection.STOCK_TO_TRUCK,
    **kwargs,
) -> Tuple[Event, ScanList]:
    event = await make_event(db, lines, directions=[direction], **kwargs)
    (scan_list,) = await generate_for_event(db, event.event_id)
    return event, scan_list
