# logiscan/api/v1/routes_catalog.py
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from logiscan.db.base import get_db
from logiscan.db.repositories.movements import get_movements_by_asset
from logiscan.domain.catalog.schemas import (
    AssetOut,
    AssetsCreate,
    Availability,
    LookupOut,
    StockItemCreate,
    StockItemOut,
)
from logiscan.domain.catalog.service import add_assets, create_stock_item, get_availability, resolve
from logiscan.domain.movements.schemas import MovementOut


router = APIRouter(prefix="/api/v1", tags=["catalog"])


@router.post("/stock-items", response_model=StockItemOut)
async def create_stock_item_endpoint(
    payload: StockItemCreate,
    db: AsyncSession = Depends(get_db),
):
    return await create_stock_item(db, payload)

@router.post("/stock-items/{sku}/assets", response_model=List[AssetOut])
async def add_assets_endpoint(
    sku: str,
    payload: AssetsCreate,
    db: AsyncSession = Depends(get_db),
):
    return await add_assets(db, sku, payload)

@router.get("/stock-items/{sku}/availability", response_model=Availability)
async def availability_endpoint(
    sku: str,
    db: AsyncSession = Depends(get_db),
):
    return await get_availability(db, sku)

@router.get("/catalog/resolve", response_model=LookupOut)
async def resolve_endpoint(
    code: str,
    db: AsyncSession = Depends(get_db),
):
    result = await resolve(db, code)
    return LookupOut(
        matched_by=result.matched_by,
        candidates=[AssetOut.model_validate(a) for a in result.candidates],
    )

@router.get("/assets/{asset_id}/movements", response_model=List[MovementOut])
async def asset_movements_endpoint(
    asset_id: str,
    db: AsyncSession = Depends(get_db),
):
    return await get_movements_by_asset(db, asset_id)
