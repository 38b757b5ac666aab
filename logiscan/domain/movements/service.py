# logiscan/domain/movements/service.py
import logging
from datetime import datetime
from typing import Optional
from uuid import UUID
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from logiscan.core.errors import MovementNotFound, PersistenceError
from logiscan.db.models.common import utcnow
from logiscan.db.models.movements import Movement, MovementType
from logiscan.db.repositories.movements import get_movement_by_id

logger = logging.getLogger(__name__)


async def record_movement(
    db: AsyncSession,
    movement_type: MovementType,
    asset_id: Optional[str],
    from_location: Optional[str],
    to_location: Optional[str],
    quantity: int = 1,
    timestamp: Optional[datetime] = None,
    *,
    sku: Optional[str] = None,
    event_id: Optional[str] = None,
    scan_list_id: Optional[UUID] = None,
    scan_payload: Optional[str] = None,
    performed_by: Optional[str] = None,
    notes: str = "",
    commit: bool = False,
) -> Movement:
    """Append one movement to the ledger.

    No history check is made here: whether the move is legal is decided by
    the caller. By default the row joins the caller's transaction and is
    flushed so it gets its id; with ``commit=True`` it is committed on its own.
    """
    movement = Movement(
        type=movement_type,
        asset_id=asset_id,
        sku=sku,
        quantity=quantity,
        from_location_id=from_location,
        to_location_id=to_location,
        performed_by=performed_by,
        timestamp=timestamp or utcnow(),
        event_id=event_id,
        scan_list_id=scan_list_id,
        scan_payload=scan_payload,
        notes=notes,
    )
    db.add(movement)
    try:
        if commit:
            await db.commit()
        else:
            await db.flush()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise PersistenceError(f"Could not record {movement_type.value} movement: {exc}") from exc

    logger.info(
        "movement %s asset=%s %s -> %s",
        movement_type.value, asset_id, from_location, to_location,
    )
    return movement


async def mark_movement_synced(
    db: AsyncSession,
    movement_id: UUID
) -> Movement:
    movement = await get_movement_by_id(db, movement_id)
    if movement is None:
        raise MovementNotFound(movement_id)

    movement.is_synced = True
    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        raise PersistenceError(f"Could not mark movement {movement_id} as synced: {exc}") from exc
    return movement
