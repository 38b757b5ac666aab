import enum
from sqlalchemy import Column, Enum, String, DateTime, Text
from sqlalchemy.sql import func

from logiscan.db.base import Base, JSONType
from logiscan.db.models.common import utcnow


class QuoteStatus(str, enum.Enum):
    DRAFT = "draft"
    FINALIZED = "finalized"
    CANCELLED = "cancelled"


class EventStatus(str, enum.Enum):
    PLANNING = "planning"
    CONFIRMED = "confirmed"
    PREPARATION = "preparation"
    IN_PROGRESS = "inProgress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Event(Base):
    """A client event the equipment is rented out for.

    Scan lists can only be generated once the quote is finalized. The
    assigned truck is the from/to location of every truck leg.
    """

    __tablename__ = "events"

    event_id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    client_name = Column(String, nullable=False, default="")
    client_phone = Column(String, nullable=True)
    client_email = Column(String, nullable=True)
    address = Column(Text, nullable=False, default="")

    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)

    assigned_truck_id = Column(String, nullable=True)

    quote_status = Column(Enum(QuoteStatus, name="quote_status_enum"), nullable=False, default=QuoteStatus.DRAFT)
    status = Column(Enum(EventStatus, name="event_status_enum"), nullable=False, default=EventStatus.PLANNING)

    # ScanDirection values; empty means all four legs
    selected_scan_directions = Column(JSONType, nullable=False, default=list)

    notes = Column(Text, nullable=False, default="")

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
