# logiscan/domain/events/schemas.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from logiscan.db.models.events import EventStatus, QuoteStatus
from logiscan.db.models.scan_lists import ScanDirection

class QuoteItemIn(BaseModel):
    sku: str
    name: str
    category: str = ""
    quantity: int = Field(ge=1)
    unit_price: float = 0.0

class EventCreate(BaseModel):
    event_id: str
    name: str
    client_name: str = ""
    client_phone: Optional[str] = None
    client_email: Optional[str] = None
    address: str = ""
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    assigned_truck_id: Optional[str] = None
    selected_scan_directions: List[ScanDirection] = Field(default_factory=list)
    quote_items: List[QuoteItemIn] = Field(default_factory=list)

class QuoteItemOut(BaseModel):
    sku: str
    name: str
    category: str
    quantity: int
    unit_price: float

    class Config:
        from_attributes = True

class EventOut(BaseModel):
    event_id: str
    name: str
    client_name: str
    assigned_truck_id: Optional[str]
    quote_status: QuoteStatus
    status: EventStatus

    class Config:
        from_attributes = True
