import uuid
from datetime import date, timedelta
from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from core.status import OrderStatus
from .database import Base, utcnow


class Order(Base):
    __tablename__ = "orders"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    supplier = Column(String, nullable=False, index=True)
    order_date = Column(Date, nullable=False, default=date.today, index=True)
    estimated_days = Column(Integer, nullable=True)
    status = Column(Text, nullable=False, default=OrderStatus.IN_TRANSIT.value, index=True)  # IN_TRANSIT|COMPLETED
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
    )

    @property
    def estimated_arrival_date(self):
        if self.estimated_days is None or self.order_date is None:
            return None
        return self.order_date + timedelta(days=int(self.estimated_days))

    @property
    def estimated_total(self) -> float:
        return sum(it.line_total for it in (self.items or []))


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(UUID(as_uuid=True), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)  # line number in the pasted text

    quantity = Column(Integer, nullable=False)  # cases
    units_per_case = Column(Integer, nullable=False)
    name = Column(String, nullable=False, index=True)
    price_a = Column(Float, nullable=False)
    price_b = Column(Float, nullable=False)  # effective unit cost
    raw_line = Column(Text, nullable=False)

    created_at = Column(DateTime, nullable=False, default=utcnow)

    order = relationship("Order", back_populates="items")

    @property
    def total_units(self) -> int:
        return int(self.quantity or 0) * int(self.units_per_case or 0)

    @property
    def line_total(self) -> float:
        return float(self.price_b or 0) * self.total_units
