"""
Delete ALL orders, order items and shortages from the database.

Run from the backend directory:
  PYTHONPATH=. python scripts/reset_orders.py [--keep-shortages]
"""

from __future__ import annotations

import argparse
import asyncio

from sqlalchemy import delete

from db.database import async_session_maker
from db.order import Order, OrderItem
from db.shortage import Shortage


async def main(keep_shortages: bool = False) -> None:
    async with async_session_maker() as db:
        # Delete children first (FK)
        res_items = await db.execute(delete(OrderItem))
        res_orders = await db.execute(delete(Order))
        res_shortages = None
        if not keep_shortages:
            res_shortages = await db.execute(delete(Shortage))
        await db.commit()

        items_n = int(getattr(res_items, "rowcount", 0) or 0)
        orders_n = int(getattr(res_orders, "rowcount", 0) or 0)
        shortages_n = int(getattr(res_shortages, "rowcount", 0) or 0)
        print(f"Deleted order_items: {items_n}, orders: {orders_n}, shortages: {shortages_n}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Delete all orders (and shortages).")
    parser.add_argument("--keep-shortages", action="store_true", help="Leave the shortage registry untouched")
    args = parser.parse_args()
    asyncio.run(main(keep_shortages=args.keep_shortages))
