import uuid
from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID

from .database import Base, utcnow


class Shortage(Base):
    """Out-of-stock product ("faltante") waiting for a future order."""
    __tablename__ = "shortages"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False, index=True)  # matched case-insensitively against order items
    quantity = Column(Integer, nullable=False)  # cases still missing
    units_per_case = Column(Integer, nullable=False)
    supplier = Column(String, nullable=False, index=True)  # supplier expected to fulfill it
    price = Column(Float, nullable=True)
    raw_line = Column(Text, nullable=True)

    resolved = Column(Boolean, nullable=False, default=False, index=True)
    resolved_at = Column(DateTime, nullable=True)

    registered_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    @property
    def total_units(self) -> int:
        return int(self.quantity or 0) * int(self.units_per_case or 0)
