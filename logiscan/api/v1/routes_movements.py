# logiscan/api/v1/routes_movements.py
from typing import List
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from logiscan.db.base import get_db
from logiscan.db.repositories.movements import get_recent_movements, get_unsynced_movements
from logiscan.domain.movements.schemas import MovementOut
from logiscan.domain.movements.service import mark_movement_synced


router = APIRouter(prefix="/api/v1/movements", tags=["movements"])


@router.get("/recent", response_model=List[MovementOut])
async def recent_movements_endpoint(
    limit: int = Query(default=50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    return await get_recent_movements(db, limit)

@router.get("/unsynced", response_model=List[MovementOut])
async def unsynced_movements_endpoint(
    db: AsyncSession = Depends(get_db),
):
    return await get_unsynced_movements(db)

@router.post("/{movement_id}/synced", response_model=MovementOut)
async def mark_synced_endpoint(
    movement_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    return await mark_movement_synced(db, movement_id)
