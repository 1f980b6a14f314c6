"""
Shortage ("faltante") reconciliation.

When an order is saved, every item nets its units against the open shortages
with the same name (case-insensitive, any supplier), oldest first:

- a shortage fully covered by the remaining units is marked resolved;
- a partially covered shortage keeps the cases still needed, rounded up
  (ceil(leftover_units / units_per_case)), and the item stops there.

Cancelling an order, or removing one of its items, puts the shortage back.
That reversal is an approximation: it always re-adds the full item quantity,
it does not track how much was actually taken from each shortage.

The pure functions work on already loaded objects so they can be tested
without a database. The async wrappers load, apply and commit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, List, Literal, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.duplicates import name_key
from db.database import utcnow
from db.shortage import Shortage

logger = logging.getLogger(__name__)


class ShortageStoreError(RuntimeError):
    """A shortage update could not be written. Earlier writes are not rolled back."""


@dataclass
class ShortageAdjustment:
    shortage: Any
    action: Literal["resolved", "reduced"]
    previous_quantity: int
    new_quantity: Optional[int] = None
    remaining_units: int = 0  # item units left after this step


@dataclass
class ReversalAction:
    shortage: Any
    action: Literal["incremented", "created"]
    previous_quantity: Optional[int] = None


def _ceil_div(a: int, b: int) -> int:
    return -(-a // b)


def _registered_key(s: Any) -> datetime:
    return getattr(s, "registered_at", None) or datetime.min


def open_shortages_for(name: str, shortages: Iterable[Any]) -> List[Any]:
    """Unresolved shortages matching `name`, oldest registration first (stable)."""
    key = name_key(name)
    matches = [s for s in shortages if not s.resolved and name_key(s.name) == key]
    return sorted(matches, key=_registered_key)


def reconcile_shortages(
    items: Iterable[Any],
    shortages: Sequence[Any],
    now: Optional[datetime] = None,
) -> List[ShortageAdjustment]:
    """Net each item's units against matching open shortages. Mutates `shortages` in place."""
    now = now or utcnow()
    adjustments: List[ShortageAdjustment] = []

    for item in items:
        remaining = int(item.quantity) * int(item.units_per_case)
        for s in open_shortages_for(item.name, shortages):
            if remaining <= 0:
                break
            previous = int(s.quantity)
            shortage_units = previous * int(s.units_per_case)
            if remaining >= shortage_units:
                s.resolved = True
                s.resolved_at = now
                s.updated_at = now
                remaining -= shortage_units
                adjustments.append(
                    ShortageAdjustment(shortage=s, action="resolved", previous_quantity=previous, remaining_units=remaining)
                )
            else:
                new_quantity = _ceil_div(shortage_units - remaining, int(s.units_per_case))
                s.quantity = new_quantity
                s.updated_at = now
                remaining = 0
                adjustments.append(
                    ShortageAdjustment(
                        shortage=s,
                        action="reduced",
                        previous_quantity=previous,
                        new_quantity=new_quantity,
                        remaining_units=0,
                    )
                )
                break

    return adjustments


def original_supplier(name: str, shortages: Iterable[Any], fallback_supplier: str) -> str:
    """Supplier of the most recently updated resolved shortage named `name`, else the fallback."""
    key = name_key(name)
    resolved = [s for s in shortages if s.resolved and name_key(s.name) == key]
    if not resolved:
        return fallback_supplier
    latest = max(resolved, key=lambda s: getattr(s, "updated_at", None) or datetime.min)
    return latest.supplier or fallback_supplier


def plan_reversal(
    items: Iterable[Any],
    fallback_supplier: str,
    shortages: Sequence[Any],
    now: Optional[datetime] = None,
) -> List[ReversalAction]:
    """Give removed order items back to the shortage registry.

    Existing open shortages are mutated. New ones are returned as transient
    `Shortage` objects that the caller has to add to the session.
    """
    now = now or utcnow()
    pool = list(shortages)
    actions: List[ReversalAction] = []

    for item in items:
        supplier = original_supplier(item.name, pool, fallback_supplier)
        existing = next(
            (s for s in open_shortages_for(item.name, pool) if s.supplier == supplier),
            None,
        )
        if existing is not None:
            previous = int(existing.quantity)
            existing.quantity = previous + int(item.quantity)
            existing.updated_at = now
            actions.append(ReversalAction(shortage=existing, action="incremented", previous_quantity=previous))
            continue

        created = Shortage(
            name=item.name,
            quantity=int(item.quantity),
            units_per_case=int(item.units_per_case),
            supplier=supplier,
            price=getattr(item, "price_b", None),
            raw_line=getattr(item, "raw_line", None),
            resolved=False,
            registered_at=now,
            updated_at=now,
        )
        pool.append(created)
        actions.append(ReversalAction(shortage=created, action="created"))

    return actions


async def _load_shortages(
    db: AsyncSession,
    names: Iterable[str],
    resolved: Optional[bool] = None,
) -> List[Shortage]:
    keys = sorted({name_key(n) for n in names if n})
    if not keys:
        return []
    stmt = (
        select(Shortage)
        .where(func.lower(Shortage.name).in_(keys))
        .order_by(Shortage.registered_at.asc())
    )
    if resolved is not None:
        stmt = stmt.where(Shortage.resolved == resolved)
    res = await db.execute(stmt)
    return list(res.scalars().all() or [])


async def reconcile_shortages_for_order(db: AsyncSession, items: Sequence[Any]) -> List[ShortageAdjustment]:
    """Apply a freshly saved order's items to the open shortages and commit."""
    items = list(items or [])
    if not items:
        return []
    try:
        open_shortages = await _load_shortages(db, [it.name for it in items], resolved=False)
        adjustments = reconcile_shortages(items, open_shortages)
        await db.commit()
    except Exception as e:
        await db.rollback()
        logger.exception("shortage reconciliation failed for %d item(s)", len(items))
        raise ShortageStoreError(f"Failed to update shortages: {e}") from e

    for adj in adjustments:
        logger.info(
            "shortage %s %s (%s -> %s)",
            adj.shortage.name,
            adj.action,
            adj.previous_quantity,
            adj.new_quantity if adj.action == "reduced" else 0,
        )
    return adjustments


async def reverse_shortages_for_order(
    db: AsyncSession,
    items: Sequence[Any],
    fallback_supplier: str,
) -> List[ReversalAction]:
    """Put removed items back as shortages, committing item by item.

    A failure on one item raises ShortageStoreError; items handled before it
    stay committed.
    """
    actions: List[ReversalAction] = []
    for item in list(items or []):
        try:
            known = await _load_shortages(db, [item.name])
            item_actions = plan_reversal([item], fallback_supplier, known)
            for act in item_actions:
                if act.action == "created":
                    db.add(act.shortage)
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.exception("shortage reversal failed for %r (supplier fallback %r)", item.name, fallback_supplier)
            raise ShortageStoreError(f"Failed to restore shortage for {item.name}: {e}") from e
        actions.extend(item_actions)
        for act in item_actions:
            logger.info("shortage %s %s for %s", act.shortage.name, act.action, act.shortage.supplier)
    return actions
