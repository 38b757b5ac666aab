import enum
from sqlalchemy import Column, Enum, Float, ForeignKey, Index, String, DateTime, Text
from sqlalchemy.sql import func

from logiscan.db.base import Base, JSONType
from logiscan.db.models.common import utcnow


class AssetStatus(str, enum.Enum):
    AVAILABLE = "available"
    RESERVED = "reserved"
    IN_USE = "inUse"
    MAINTENANCE = "maintenance"


class Asset(Base):
    """One individually tracked, serialized unit of a stock item.

    Physical attributes are copied from the stock item when the unit is
    created. ``status`` and ``current_location_id`` are moved together by the
    scan engine, always alongside a movement record. ``frozen_event_id`` is
    set while the unit is committed to an event (after loading) and cleared
    when it comes back to stock.
    """

    __tablename__ = "assets"

    asset_id = Column(String, primary_key=True)
    sku = Column(String, ForeignKey("stock_items.sku"), nullable=False, index=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=False, default="")
    serial_number = Column(String, nullable=True, index=True)

    status = Column(Enum(AssetStatus, name="asset_status_enum"), nullable=False, default=AssetStatus.AVAILABLE)
    current_location_id = Column(String, nullable=True)

    weight = Column(Float, nullable=False, default=0.0)
    volume = Column(Float, nullable=False, default=0.0)
    value = Column(Float, nullable=False, default=0.0)

    qr_payload = Column(Text, nullable=False, default="")
    comments = Column(Text, nullable=False, default="")
    tags = Column(JSONType, nullable=False, default=list)

    frozen_event_id = Column(String, nullable=True, index=True)
    frozen_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

    __table_args__ = (
        Index("ix_assets_sku_status", "sku", "status"),
    )

    @property
    def is_frozen(self) -> bool:
        return self.frozen_event_id is not None
