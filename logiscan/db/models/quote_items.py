from sqlalchemy import Column, Float, ForeignKey, Integer, String, Uuid
import uuid

from logiscan.db.base import Base


class QuoteItem(Base):
    """One line of an event quote: a SKU and how many units are rented."""

    __tablename__ = "quote_items"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(String, ForeignKey("events.event_id"), nullable=False, index=True)
    line_number = Column(Integer, nullable=False, default=0)

    sku = Column(String, nullable=False)
    name = Column(String, nullable=False)
    category = Column(String, nullable=False, default="")
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Float, nullable=False, default=0.0)
