# logiscan/domain/scan_lists/schemas.py
from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel

from logiscan.db.models.scan_lists import ScanDirection, ScanItemStatus, ScanListStatus

class PreparationListItemOut(BaseModel):
    id: UUID
    sku: str
    name: str
    category: str
    quantity_required: int
    quantity_scanned: int
    scanned_assets: List[str]
    status: ScanItemStatus
    last_scanned_at: Optional[datetime]

    class Config:
        from_attributes = True

class ScanListOut(BaseModel):
    scan_list_id: UUID
    event_id: str
    event_name: str
    scan_direction: ScanDirection
    total_items: int
    scanned_items: int
    status: ScanListStatus
    version: int
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime]
    items: List[PreparationListItemOut]

    class Config:
        from_attributes = True
