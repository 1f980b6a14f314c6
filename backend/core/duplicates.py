"""
Repeated-product warning for new orders.

Matching is exact equality after case folding only. "MALBEC 750" vs
"MALBEC 750CC", singular/plural or punctuation differences are NOT
duplicates. The result is advisory and never blocks saving an order.
"""

from dataclasses import dataclass
from typing import Any, Iterable, List


@dataclass
class Duplicate:
    item: Any   # the previously ordered item
    order: Any  # the order that contains it


def name_key(name: str) -> str:
    return (name or "").lower()


def find_duplicates(new_items: Iterable[Any], existing_orders: Iterable[Any]) -> List[Duplicate]:
    # Plain cross product: new items x orders x items per order.
    orders = list(existing_orders)
    out: List[Duplicate] = []
    for new_item in new_items:
        key = name_key(new_item.name)
        for order in orders:
            for existing in (order.items or []):
                if name_key(existing.name) == key:
                    out.append(Duplicate(item=existing, order=order))
    return out
