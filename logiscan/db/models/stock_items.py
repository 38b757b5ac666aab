import enum
from sqlalchemy import Column, Enum, Float, Integer, String, DateTime, Text
from sqlalchemy.sql import func

from logiscan.db.base import Base, JSONType
from logiscan.db.models.common import utcnow


class OwnershipType(str, enum.Enum):
    OWNED = "owned"
    RENTED = "rented"


class StockItem(Base):
    """Catalog definition of a rentable SKU.

    A stock item carries the descriptive and physical attributes shared by
    every serialized unit (Asset) of the SKU, plus the quantities used to
    compute availability: total units owned/rented and units parked in
    maintenance. Units currently out on an event are counted from the
    assets themselves.
    """

    __tablename__ = "stock_items"

    sku = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=False, default="")
    description = Column(Text, nullable=False, default="")

    unit_weight = Column(Float, nullable=False, default=0.0)
    unit_volume = Column(Float, nullable=False, default=0.0)
    unit_value = Column(Float, nullable=False, default=0.0)

    total_quantity = Column(Integer, nullable=False, default=0)
    maintenance_quantity = Column(Integer, nullable=False, default=0)

    ownership_type = Column(Enum(OwnershipType, name="ownership_type_enum"), nullable=False, default=OwnershipType.OWNED)
    rental_price = Column(Float, nullable=True)
    purchase_price = Column(Float, nullable=True)

    # centimetres
    length = Column(Float, nullable=True)
    width = Column(Float, nullable=True)
    height = Column(Float, nullable=True)

    tags = Column(JSONType, nullable=False, default=list)
    technical_specs = Column(JSONType, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())

