# logiscan/domain/catalog/schemas.py
from datetime import datetime
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field, model_validator

from logiscan.db.models.assets import AssetStatus
from logiscan.db.models.stock_items import OwnershipType

class QRBatchItem(BaseModel):
    sku: str
    qty: int = 1

class QRPayload(BaseModel):
    """JSON payload printed on asset/location/batch labels."""
    v: int = 1
    type: str
    id: str
    sku: Optional[str] = None
    sn: Optional[str] = None
    skus: Optional[List[QRBatchItem]] = None

class ScanCode(BaseModel):
    raw: str
    kind: Literal["json", "colon", "bare"]
    type: str = "asset"
    asset_id: Optional[str] = None
    sku: Optional[str] = None
    serial_number: Optional[str] = None
    batch: List[QRBatchItem] = Field(default_factory=list)

class StockItemCreate(BaseModel):
    sku: str
    name: str
    category: str = ""
    description: str = ""
    unit_weight: float = 0.0
    unit_volume: float = 0.0
    unit_value: float = 0.0
    total_quantity: int = Field(default=0, ge=0)
    maintenance_quantity: int = Field(default=0, ge=0)
    ownership_type: OwnershipType = OwnershipType.OWNED
    rental_price: Optional[float] = None
    purchase_price: Optional[float] = None
    length: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    tags: List[str] = Field(default_factory=list)
    technical_specs: Dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _maintenance_within_total(self):
        if self.maintenance_quantity > self.total_quantity:
            raise ValueError("maintenance_quantity cannot exceed total_quantity")
        return self

class AssetsCreate(BaseModel):
    """Either ``count`` anonymous units or one unit per serial number."""
    count: int = Field(default=0, ge=0)
    serial_numbers: List[str] = Field(default_factory=list)
    asset_id_prefix: Optional[str] = None
    location_id: Optional[str] = None

class StockItemOut(BaseModel):
    sku: str
    name: str
    category: str
    total_quantity: int
    maintenance_quantity: int
    ownership_type: OwnershipType
    tags: List[str]

    class Config:
        from_attributes = True

class AssetOut(BaseModel):
    asset_id: str
    sku: str
    name: str
    serial_number: Optional[str]
    status: AssetStatus
    current_location_id: Optional[str]
    qr_payload: str
    frozen_event_id: Optional[str]
    updated_at: datetime

    class Config:
        from_attributes = True

class Availability(BaseModel):
    sku: str
    total_quantity: int
    maintenance_quantity: int
    in_use_quantity: int
    available_quantity: int

class LookupOut(BaseModel):
    matched_by: Optional[Literal["id", "sku"]]
    candidates: List[AssetOut]
