# logiscan/domain/movements/schemas.py
from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel

from logiscan.db.models.movements import MovementType

class MovementOut(BaseModel):
    movement_id: UUID
    type: MovementType
    asset_id: Optional[str]
    sku: Optional[str]
    quantity: int
    from_location_id: Optional[str]
    to_location_id: Optional[str]
    performed_by: Optional[str]
    timestamp: datetime
    event_id: Optional[str]
    scan_list_id: Optional[UUID]
    is_synced: bool

    class Config:
        from_attributes = True
