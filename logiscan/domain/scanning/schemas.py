# logiscan/domain/scanning/schemas.py
from typing import Optional
from pydantic import BaseModel

from logiscan.domain.catalog.schemas import AssetOut
from logiscan.domain.movements.schemas import MovementOut
from logiscan.domain.scan_lists.schemas import PreparationListItemOut, ScanListOut

class ScanRequest(BaseModel):
    code: str
    pick_first_available: bool = False
    performed_by: Optional[str] = None
    expected_version: Optional[int] = None

class UndoRequest(BaseModel):
    asset_id: str

class ScanOutcomeOut(BaseModel):
    scan_list: ScanListOut
    item: PreparationListItemOut
    asset: AssetOut
    movement: MovementOut
    triggered_completion: bool
    assets_affected: int
    side_effect_error: Optional[str] = None

    class Config:
        from_attributes = True
