from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import func, select

from logiscan.db.models.assets import Asset, AssetStatus
from logiscan.db.models.stock_items import StockItem

async def get_asset_by_id(
    db: AsyncSession,
    asset_id: str
) -> Optional[Asset]:
    result = await db.execute(
        select(Asset).where(Asset.asset_id == asset_id)
    )
    return result.scalar_one_or_none()

async def get_assets_by_ids(
    db: AsyncSession,
    asset_ids: List[str]
) -> List[Asset]:
    if not asset_ids:
        return []
    result = await db.execute(
        select(Asset).where(Asset.asset_id.in_(asset_ids)).order_by(Asset.asset_id)
    )
    return list(result.scalars().all())

async def get_assets_by_sku(
    db: AsyncSession,
    sku: str
) -> List[Asset]:
    result = await db.execute(
        select(Asset).where(Asset.sku == sku).order_by(Asset.asset_id)
    )
    return list(result.scalars().all())

async def get_assets_by_serial(
    db: AsyncSession,
    serial_number: str
) -> List[Asset]:
    result = await db.execute(
        select(Asset).where(Asset.serial_number == serial_number).order_by(Asset.asset_id)
    )
    return list(result.scalars().all())

async def count_assets_by_sku(
    db: AsyncSession,
    sku: str,
    statuses: Optional[List[AssetStatus]] = None
) -> int:
    query = select(func.count()).select_from(Asset).where(Asset.sku == sku)
    if statuses:
        query = query.where(Asset.status.in_(statuses))
    result = await db.execute(query)
    return result.scalar_one()

async def get_stock_item_by_sku(
    db: AsyncSession,
    sku: str
) -> Optional[StockItem]:
    result = await db.execute(
        select(StockItem).where(StockItem.sku == sku)
    )
    return result.scalar_one_or_none()
