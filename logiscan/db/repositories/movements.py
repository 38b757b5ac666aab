from typing import List, Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import select

from logiscan.db.models.movements import Movement

async def get_movement_by_id(
    db: AsyncSession,
    movement_id: UUID
) -> Optional[Movement]:
    result = await db.execute(
        select(Movement).where(Movement.movement_id == movement_id)
    )
    return result.scalar_one_or_none()

async def get_movements_by_asset(
    db: AsyncSession,
    asset_id: str
) -> List[Movement]:
    result = await db.execute(
        select(Movement)
        .where(Movement.asset_id == asset_id)
        .order_by(Movement.timestamp.desc())
    )
    return list(result.scalars().all())

async def get_movements_by_event(
    db: AsyncSession,
    event_id: str
) -> List[Movement]:
    result = await db.execute(
        select(Movement)
        .where(Movement.event_id == event_id)
        .order_by(Movement.timestamp.desc())
    )
    return list(result.scalars().all())

async def get_unsynced_movements(
    db: AsyncSession
) -> List[Movement]:
    result = await db.execute(
        select(Movement)
        .where(Movement.is_synced.is_(False))
        .order_by(Movement.timestamp)
    )
    return list(result.scalars().all())

async def get_recent_movements(
    db: AsyncSession,
    limit: int = 50
) -> List[Movement]:
    result = await db.execute(
        select(Movement).order_by(Movement.timestamp.desc()).limit(limit)
    )
    return list(result.scalars().all())
