from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from uuid import UUID
from datetime import datetime


class ShortageRead(BaseModel):
    id: UUID
    name: str
    quantity: int
    units_per_case: int
    total_units: int
    supplier: str
    price: Optional[float] = None
    raw_line: Optional[str] = None
    resolved: bool
    resolved_at: Optional[datetime] = None
    registered_at: datetime
    updated_at: Optional[datetime] = None


class ShortageCreate(BaseModel):
    name: str
    quantity: int = Field(gt=0)
    units_per_case: int = Field(gt=0)
    supplier: str
    price: Optional[float] = Field(default=None, ge=0)
    raw_line: Optional[str] = None

    @field_validator("name", "supplier")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v


class ShortageParseRequest(BaseModel):
    text: str
    supplier: str

    @field_validator("supplier")
    @classmethod
    def _strip_supplier(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("supplier is required")
        return v


class ShortageEntryRead(BaseModel):
    name: str
    quantity: int
    units_per_case: int
    total_units: int
    supplier: str
    price: Optional[float] = None
    raw_line: str


class ShortageParseResponse(BaseModel):
    items: List[ShortageEntryRead]
    unparsed_lines: List[str] = []


class ShortageBulkCreate(BaseModel):
    items: List[ShortageCreate] = Field(min_length=1)


class ShortageSupplierGroup(BaseModel):
    supplier: str
    count: int
    total_units: int
    shortages: List[ShortageRead]
