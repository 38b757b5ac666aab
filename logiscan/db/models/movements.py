import enum
from sqlalchemy import Boolean, Column, Enum, Index, Integer, String, DateTime, Text, Uuid
import uuid

from logiscan.db.base import Base
from logiscan.db.models.common import utcnow


class MovementType(str, enum.Enum):
    RESERVE = "RESERVE"
    PICK = "PICK"
    LOAD = "LOAD"
    UNLOAD = "UNLOAD"
    RELOAD = "RELOAD"
    RETURN = "RETURN"
    TRANSFER = "TRANSFER"
    MAINTENANCE_IN = "MAINTENANCE_IN"
    MAINTENANCE_OUT = "MAINTENANCE_OUT"


class Movement(Base):
    """Immutable audit record of one asset relocation.

    Rows are only ever appended. ``is_synced`` is the single field that
    changes afterwards, flipped once the row has been pushed upstream.
    """

    __tablename__ = "movements"

    movement_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    type = Column(Enum(MovementType, name="movement_type_enum"), nullable=False)

    asset_id = Column(String, nullable=True, index=True)
    sku = Column(String, nullable=True)
    quantity = Column(Integer, nullable=False, default=1)

    from_location_id = Column(String, nullable=True)
    to_location_id = Column(String, nullable=True)

    performed_by = Column(String, nullable=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    event_id = Column(String, nullable=True, index=True)
    scan_list_id = Column(Uuid(as_uuid=True), nullable=True)
    scan_payload = Column(Text, nullable=True)
    notes = Column(Text, nullable=False, default="")

    is_synced = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("ix_movements_synced_timestamp", "is_synced", "timestamp"),
    )
