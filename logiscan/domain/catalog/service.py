# logiscan/domain/catalog/service.py
import json
import logging
from dataclasses import dataclass, field
from typing import List, Literal, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from logiscan.core.config import settings
from logiscan.core.errors import (
    AssetNotFound,
    DuplicateStockItem,
    InsufficientStock,
    InvariantViolation,
    PersistenceError,
    StockItemNotFound,
)
from logiscan.db.models.assets import Asset, AssetStatus
from logiscan.db.models.stock_items import StockItem
from logiscan.db.repositories.assets import (
    count_assets_by_sku,
    get_asset_by_id,
    get_assets_by_serial,
    get_assets_by_sku,
    get_stock_item_by_sku,
)
from .schemas import AssetsCreate, Availability, QRPayload, ScanCode, StockItemCreate

logger = logging.getLogger(__name__)


@dataclass
class LookupResult:
    code: ScanCode
    candidates: List[Asset] = field(default_factory=list)
    matched_by: Optional[Literal["id", "sku"]] = None


def parse_scan_code(code: str) -> ScanCode:
    """Decode what the camera read into asset id / SKU / serial hints.

    Three shapes are accepted: a JSON label payload (``{"v":1,"type":"asset",
    "id":...}``), the colon fallback ``TYPE:ID[:EXTRA]``, and a bare SKU.
    A JSON-looking code that does not validate is retried with the other two
    rules.
    """
    raw = (code or "").strip()
    if not raw:
        raise AssetNotFound(raw)

    if "{" in raw:
        try:
            payload = QRPayload.model_validate(json.loads(raw))
        except ValueError:
            logger.debug("scan code %r is not a valid JSON payload", raw)
        else:
            kind = payload.type.lower()
            return ScanCode(
                raw=raw,
                kind="json",
                type=kind,
                asset_id=payload.id or None,
                sku=payload.sku,
                serial_number=payload.sn,
                batch=payload.skus or [],
            )

    if ":" in raw:
        parts = raw.split(":", 2)
        kind = parts[0].strip().lower() or "asset"
        ident = parts[1].strip() or None
        extra = parts[2].strip() if len(parts) > 2 and parts[2].strip() else None
        if kind == "sku":
            return ScanCode(raw=raw, kind="colon", type=kind, sku=ident)
        return ScanCode(raw=raw, kind="colon", type=kind, asset_id=ident, sku=extra)

    # a bare code may still be an asset id, the SKU lookup is the fallback
    return ScanCode(raw=raw, kind="bare", asset_id=raw, sku=raw)


async def resolve(
    db: AsyncSession,
    code: str
) -> LookupResult:
    scan = parse_scan_code(code)
    result = LookupResult(code=scan)

    if scan.asset_id:
        asset = await get_asset_by_id(db, scan.asset_id)
        if asset is not None:
            result.candidates = [asset]
            result.matched_by = "id"
            return result

    if scan.serial_number:
        assets = await get_assets_by_serial(db, scan.serial_number)
        if scan.sku:
            assets = [a for a in assets if a.sku == scan.sku]
        if len(assets) == 1:
            result.candidates = assets
            result.matched_by = "id"
            return result

    if scan.sku:
        assets = await get_assets_by_sku(db, scan.sku)
        if assets:
            result.candidates = assets
            result.matched_by = "sku"

    logger.debug("resolved %r: %d candidate(s) by %s", scan.raw, len(result.candidates), result.matched_by)
    return result


def build_qr_payload(asset_id: str, sku: str, serial_number: Optional[str] = None) -> str:
    payload = {"v": settings.QR_PAYLOAD_VERSION, "type": "asset", "id": asset_id, "sku": sku}
    if serial_number:
        payload["sn"] = serial_number
    return json.dumps(payload, separators=(",", ":"))


async def create_stock_item(
    db: AsyncSession,
    data: StockItemCreate
) -> StockItem:
    if await get_stock_item_by_sku(db, data.sku) is not None:
        raise DuplicateStockItem(data.sku)

    item = StockItem(**data.model_dump())
    db.add(item)
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise PersistenceError(f"Could not create stock item {data.sku}: {exc}") from exc
    logger.info("stock item %s created (%d units)", item.sku, item.total_quantity)
    return item


async def add_assets(
    db: AsyncSession,
    sku: str,
    data: AssetsCreate
) -> List[Asset]:
    """Create one Asset per physical unit of ``sku``.

    Units inherit weight/volume/value from the stock item and get a printable
    QR payload. The number of assets of a SKU never exceeds its total quantity.
    """
    stock_item = await get_stock_item_by_sku(db, sku)
    if stock_item is None:
        raise StockItemNotFound(sku)

    serials: List[Optional[str]] = list(data.serial_numbers) or [None] * data.count
    existing = await count_assets_by_sku(db, sku)
    if existing + len(serials) > stock_item.total_quantity:
        raise InsufficientStock(
            f"{sku} has {stock_item.total_quantity} units, {existing} already tracked",
            sku=sku,
            requested=len(serials),
        )

    prefix = data.asset_id_prefix or sku
    location = data.location_id or settings.STOCK_LOCATION
    created: List[Asset] = []
    index = existing
    for serial in serials:
        index += 1
        asset_id = f"{prefix}-{index:03d}"
        while await get_asset_by_id(db, asset_id) is not None:
            index += 1
            asset_id = f"{prefix}-{index:03d}"
        asset = Asset(
            asset_id=asset_id,
            sku=sku,
            name=stock_item.name,
            category=stock_item.category,
            serial_number=serial,
            status=AssetStatus.AVAILABLE,
            current_location_id=location,
            weight=stock_item.unit_weight,
            volume=stock_item.unit_volume,
            value=stock_item.unit_value,
            qr_payload=build_qr_payload(asset_id, sku, serial),
            tags=list(stock_item.tags or []),
        )
        db.add(asset)
        created.append(asset)

    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise PersistenceError(f"Could not create assets for {sku}: {exc}") from exc
    logger.info("%d asset(s) created for %s", len(created), sku)
    return created


async def get_availability(
    db: AsyncSession,
    sku: str
) -> Availability:
    stock_item = await get_stock_item_by_sku(db, sku)
    if stock_item is None:
        raise StockItemNotFound(sku)

    in_use = await count_assets_by_sku(db, sku, [AssetStatus.RESERVED, AssetStatus.IN_USE])
    available = stock_item.total_quantity - stock_item.maintenance_quantity - in_use
    if available < 0:
        raise InvariantViolation(
            f"{sku} availability is negative ({available})",
            sku=sku,
            in_use=in_use,
        )
    return Availability(
        sku=sku,
        total_quantity=stock_item.total_quantity,
        maintenance_quantity=stock_item.maintenance_quantity,
        in_use_quantity=in_use,
        available_quantity=available,
    )
