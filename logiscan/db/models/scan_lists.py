import enum
from sqlalchemy import Column, Enum, ForeignKey, Index, Integer, String, DateTime, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from logiscan.db.base import Base, JSONType
from logiscan.db.models.common import utcnow


class ScanDirection(str, enum.Enum):
    STOCK_TO_TRUCK = "stock_to_truck"
    TRUCK_TO_EVENT = "truck_to_event"
    EVENT_TO_TRUCK = "event_to_truck"
    TRUCK_TO_STOCK = "truck_to_stock"


# lifecycle order of the four legs
ALL_DIRECTIONS = (
    ScanDirection.STOCK_TO_TRUCK,
    ScanDirection.TRUCK_TO_EVENT,
    ScanDirection.EVENT_TO_TRUCK,
    ScanDirection.TRUCK_TO_STOCK,
)


class ScanListStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ScanList(Base):
    """Expected-items checklist for one transfer leg of one event.

    ``total_items`` is the number of line items and ``scanned_items`` the
    number of those lines that are complete; quantities are tracked inside
    each line. ``version`` is bumped on every mutation so a second device can
    detect that it is working on a stale copy.
    """

    __tablename__ = "scan_lists"

    scan_list_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(String, ForeignKey("events.event_id"), nullable=False, index=True)
    event_name = Column(String, nullable=False, default="")
    scan_direction = Column(Enum(ScanDirection, name="scan_direction_enum"), nullable=False)

    total_items = Column(Integer, nullable=False, default=0)
    scanned_items = Column(Integer, nullable=False, default=0)
    status = Column(Enum(ScanListStatus, name="scan_list_status_enum"), nullable=False, default=ScanListStatus.PENDING)
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    completed_at = Column(DateTime(timezone=True), nullable=True)

    items = relationship(
        "PreparationListItem",
        back_populates="scan_list",
        cascade="all, delete-orphan",
        order_by="PreparationListItem.position",
        lazy="selectin",
    )

    __table_args__ = (
        UniqueConstraint("event_id", "scan_direction", name="uq_scan_lists_event_direction"),
    )

    @property
    def is_complete(self) -> bool:
        return bool(self.items) and all(item.is_complete for item in self.items)

    @property
    def progress(self) -> float:
        if not self.total_items:
            return 0.0
        return self.scanned_items / self.total_items


class ScanItemStatus(str, enum.Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETED = "completed"


class PreparationListItem(Base):
    """One expected SKU line inside a scan list.

    ``scanned_assets`` keeps the asset ids in scan order; its length is always
    ``quantity_scanned``. The list is replaced, never mutated in place, so the
    JSON column change is picked up by the unit of work.
    """

    __tablename__ = "preparation_list_items"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    scan_list_id = Column(Uuid(as_uuid=True), ForeignKey("scan_lists.scan_list_id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    sku = Column(String, nullable=False)
    name = Column(String, nullable=False)
    category = Column(String, nullable=False, default="")

    quantity_required = Column(Integer, nullable=False)
    quantity_scanned = Column(Integer, nullable=False, default=0)
    scanned_assets = Column(JSONType, nullable=False, default=list)
    status = Column(Enum(ScanItemStatus, name="scan_item_status_enum"), nullable=False, default=ScanItemStatus.PENDING)
    last_scanned_at = Column(DateTime(timezone=True), nullable=True)

    scan_list = relationship("ScanList", back_populates="items")

    __table_args__ = (
        Index("ix_preparation_list_items_list_sku", "scan_list_id", "sku"),
    )

    @property
    def is_complete(self) -> bool:
        return self.quantity_scanned >= self.quantity_required

    @property
    def remaining_quantity(self) -> int:
        return max(0, self.quantity_required - self.quantity_scanned)

    def refresh_status(self) -> None:
        if self.quantity_scanned >= self.quantity_required:
            self.status = ScanItemStatus.COMPLETED
        elif self.quantity_scanned > 0:
            self.status = ScanItemStatus.PARTIAL
        else:
            self.status = ScanItemStatus.PENDING
