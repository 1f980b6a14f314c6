import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import List, Optional
from uuid import UUID

from core.parser import OrderTextParseError, parse_shortage_text
from db.database import get_async_session
from db.shortage import Shortage as ShortageModel
from schemas.shortages import (
    ShortageBulkCreate,
    ShortageCreate,
    ShortageEntryRead,
    ShortageParseRequest,
    ShortageParseResponse,
    ShortageRead,
    ShortageSupplierGroup,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _serialize_shortage(s: ShortageModel) -> ShortageRead:
    return ShortageRead(
        id=s.id,
        name=s.name,
        quantity=int(s.quantity),
        units_per_case=int(s.units_per_case),
        total_units=s.total_units,
        supplier=s.supplier,
        price=float(s.price) if s.price is not None else None,
        raw_line=s.raw_line,
        resolved=bool(s.resolved),
        resolved_at=s.resolved_at,
        registered_at=s.registered_at,
        updated_at=s.updated_at,
    )


def _model_from_create(payload: ShortageCreate) -> ShortageModel:
    return ShortageModel(
        name=payload.name,
        quantity=payload.quantity,
        units_per_case=payload.units_per_case,
        supplier=payload.supplier,
        price=payload.price,
        raw_line=payload.raw_line,
        resolved=False,
    )


@router.get("/", response_model=List[ShortageRead])
async def list_shortages(
    resolved: Optional[bool] = False,
    supplier: Optional[str] = None,
    db: AsyncSession = Depends(get_async_session),
):
    stmt = select(ShortageModel).order_by(ShortageModel.registered_at.asc())
    if resolved is not None:
        stmt = stmt.where(ShortageModel.resolved == resolved)
    if supplier:
        stmt = stmt.where(func.lower(ShortageModel.supplier) == supplier.strip().lower())
    res = await db.execute(stmt)
    return [_serialize_shortage(s) for s in (res.scalars().all() or [])]


@router.get("/by-supplier", response_model=List[ShortageSupplierGroup])
async def shortages_by_supplier(db: AsyncSession = Depends(get_async_session)):
    """Open shortages grouped by the supplier expected to deliver them."""
    res = await db.execute(
        select(ShortageModel)
        .where(ShortageModel.resolved == False)  # noqa: E712
        .order_by(ShortageModel.registered_at.asc())
    )
    groups: dict[str, List[ShortageModel]] = {}
    for s in (res.scalars().all() or []):
        groups.setdefault(s.supplier, []).append(s)
    return [
        ShortageSupplierGroup(
            supplier=supplier,
            count=len(items),
            total_units=sum(s.total_units for s in items),
            shortages=[_serialize_shortage(s) for s in items],
        )
        for supplier, items in groups.items()
    ]


@router.post("/", response_model=ShortageRead, status_code=status.HTTP_201_CREATED)
async def create_shortage(
    payload: ShortageCreate,
    db: AsyncSession = Depends(get_async_session),
):
    m = _model_from_create(payload)
    try:
        db.add(m)
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.exception("create_shortage failed for %r", payload.name)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to add shortage: {e}")
    return _serialize_shortage(m)


@router.post("/parse", response_model=ShortageParseResponse)
async def parse_shortages(payload: ShortageParseRequest):
    """Preview a pasted shortage list. Prices are optional, only the last one is kept."""
    try:
        parsed = parse_shortage_text(payload.text, payload.supplier).raise_if_empty()
    except OrderTextParseError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": str(e), "unparsed_lines": e.unparsed_lines},
        )
    return ShortageParseResponse(
        items=[
            ShortageEntryRead(
                name=it.name,
                quantity=it.quantity,
                units_per_case=it.units_per_case,
                total_units=it.total_units,
                supplier=it.supplier,
                price=it.price,
                raw_line=it.raw_line,
            )
            for it in parsed.items
        ],
        unparsed_lines=parsed.unparsed_lines,
    )


@router.post("/bulk", response_model=List[ShortageRead], status_code=status.HTTP_201_CREATED)
async def create_shortages_bulk(
    payload: ShortageBulkCreate,
    db: AsyncSession = Depends(get_async_session),
):
    models = [_model_from_create(it) for it in payload.items]
    try:
        db.add_all(models)
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.exception("create_shortages_bulk failed for %d item(s)", len(models))
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to save shortages: {e}")
    return [_serialize_shortage(m) for m in models]


@router.delete("/{shortage_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_shortage(
    shortage_id: UUID,
    db: AsyncSession = Depends(get_async_session),
):
    res = await db.execute(select(ShortageModel).where(ShortageModel.id == shortage_id))
    m = res.scalar_one_or_none()
    if not m:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shortage not found")
    try:
        await db.delete(m)
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.exception("delete_shortage failed for %s", shortage_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to delete shortage: {e}")
    return None
