from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional
from uuid import UUID
from datetime import date, datetime

from core.status import OrderStatus


class LineItemBase(BaseModel):
    quantity: int = Field(gt=0)
    units_per_case: int = Field(gt=0)
    name: str
    price_a: float = Field(ge=0)
    price_b: float = Field(ge=0)
    raw_line: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("name is required")
        return v


class LineItemRead(LineItemBase):
    id: Optional[UUID] = None
    total_units: int
    line_total: float


class OrderRead(BaseModel):
    id: UUID
    supplier: str
    order_date: date
    estimated_days: Optional[int] = None
    estimated_arrival_date: Optional[date] = None
    status: OrderStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items_count: int
    estimated_total: float
    items: List[LineItemRead]


class DuplicateRead(BaseModel):
    item: LineItemRead
    order_id: UUID
    order_supplier: str
    order_date: date
    order_status: OrderStatus


class OrderParseRequest(BaseModel):
    text: str


class OrderParseResponse(BaseModel):
    items: List[LineItemRead]
    unparsed_lines: List[str] = []
    duplicates: List[DuplicateRead] = []


class OrderCreate(BaseModel):
    supplier: str
    text: Optional[str] = None  # pasted lines, parsed server side
    items: Optional[List[LineItemBase]] = None  # or already parsed items
    order_date: Optional[date] = None
    estimated_days: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None

    @field_validator("supplier")
    @classmethod
    def _strip_supplier(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("supplier is required")
        return v

    @model_validator(mode="after")
    def _text_or_items(self):
        if not (self.text or "").strip() and not self.items:
            raise ValueError("text or items is required")
        return self


class ShortageAdjustmentRead(BaseModel):
    shortage_id: UUID
    name: str
    supplier: str
    action: str  # resolved | reduced
    previous_quantity: int
    new_quantity: Optional[int] = None


class OrderCreateResponse(BaseModel):
    order: OrderRead
    unparsed_lines: List[str] = []
    shortage_adjustments: List[ShortageAdjustmentRead] = []
    # Set when the order was saved but the shortage update failed (not rolled back)
    reconciliation_error: Optional[str] = None


class OrderUpdate(BaseModel):
    estimated_days: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderStats(BaseModel):
    total: int
    in_transit: int
    completed: int
