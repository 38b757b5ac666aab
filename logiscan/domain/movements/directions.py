"""Fixed mapping from a transfer leg to the movement it records."""
from typing import NamedTuple, Optional

from logiscan.core.config import settings
from logiscan.db.models.assets import AssetStatus
from logiscan.db.models.movements import MovementType
from logiscan.db.models.scan_lists import ScanDirection


class DirectionMove(NamedTuple):
    movement_type: MovementType
    from_location: Optional[str]
    to_location: Optional[str]
    asset_status: AssetStatus


MOVEMENT_TYPES = {
    ScanDirection.STOCK_TO_TRUCK: MovementType.LOAD,
    ScanDirection.TRUCK_TO_EVENT: MovementType.UNLOAD,
    ScanDirection.EVENT_TO_TRUCK: MovementType.RELOAD,
    ScanDirection.TRUCK_TO_STOCK: MovementType.RETURN,
}

ASSET_STATUSES = {
    ScanDirection.STOCK_TO_TRUCK: AssetStatus.IN_USE,
    ScanDirection.TRUCK_TO_EVENT: AssetStatus.IN_USE,
    ScanDirection.EVENT_TO_TRUCK: AssetStatus.IN_USE,
    ScanDirection.TRUCK_TO_STOCK: AssetStatus.AVAILABLE,
}


def event_location(event_id: str) -> str:
    return f"{settings.EVENT_LOCATION_PREFIX}{event_id}"


def move_for_direction(
    direction: ScanDirection,
    event_id: str,
    truck_id: Optional[str],
) -> DirectionMove:
    stock = settings.STOCK_LOCATION
    site = event_location(event_id)
    locations = {
        ScanDirection.STOCK_TO_TRUCK: (stock, truck_id),
        ScanDirection.TRUCK_TO_EVENT: (truck_id, site),
        ScanDirection.EVENT_TO_TRUCK: (site, truck_id),
        ScanDirection.TRUCK_TO_STOCK: (truck_id, stock),
    }
    from_location, to_location = locations[direction]
    return DirectionMove(
        movement_type=MOVEMENT_TYPES[direction],
        from_location=from_location,
        to_location=to_location,
        asset_status=ASSET_STATUSES[direction],
    )
