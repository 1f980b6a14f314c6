"""
Free-text order parser.

Turns pasted invoice-style lines into structured items. Two line formats:

- order:    "<qty>x<units> <NAME> $<price1>/<price2>"   (both prices required)
- shortage: "<qty>x<units> <NAME> [$<price1>[/<price2>]]" (prices optional)

Every line is matched on its own. Lines that don't match are returned in
`unparsed_lines` so the caller can show them back to the user.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

ORDER_LINE_RE = re.compile(r"^(\d+)[xX](\d+)\s+(.+?)\s+\$?([\d,]+\.?\d*)/\$?([\d,]+\.?\d*)$")
SHORTAGE_LINE_RE = re.compile(r"^(\d+)[xX](\d+)\s+(.+?)(?:\s+\$?([\d,]+\.?\d*)(?:/\$?([\d,]+\.?\d*))?)?$")

PARSE_FAILED_MESSAGE = "Could not parse any product line. Check the format: <qty>x<units> NAME $price1/price2"

T = TypeVar("T")


class OrderTextParseError(ValueError):
    """Raised by callers when a pasted text produced no items at all."""

    def __init__(self, unparsed_lines: Optional[List[str]] = None):
        super().__init__(PARSE_FAILED_MESSAGE)
        self.unparsed_lines = list(unparsed_lines or [])


@dataclass
class LineItem:
    quantity: int
    units_per_case: int
    name: str
    price_a: float
    price_b: float
    raw_line: str

    @property
    def total_units(self) -> int:
        return self.quantity * self.units_per_case

    @property
    def line_total(self) -> float:
        return self.price_b * self.total_units


@dataclass
class ShortageEntry:
    quantity: int
    units_per_case: int
    name: str
    supplier: str
    price: Optional[float]
    raw_line: str

    @property
    def total_units(self) -> int:
        return self.quantity * self.units_per_case


@dataclass
class ParseResult(Generic[T]):
    items: List[T] = field(default_factory=list)
    unparsed_lines: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return len(self.items) > 0

    def raise_if_empty(self) -> "ParseResult[T]":
        if not self.items:
            raise OrderTextParseError(self.unparsed_lines)
        return self


def _price(raw: str) -> float:
    # "1,708.20" -> 1708.2
    return float(raw.replace(",", ""))


def _lines(text: str) -> List[str]:
    return [ln.strip() for ln in (text or "").splitlines() if ln.strip()]


def parse_order_line(line: str) -> Optional[LineItem]:
    line = line.strip()
    m = ORDER_LINE_RE.match(line)
    if not m:
        return None
    quantity, units = int(m.group(1)), int(m.group(2))
    if quantity <= 0 or units <= 0:
        return None
    try:
        price_a, price_b = _price(m.group(4)), _price(m.group(5))
    except ValueError:
        # a bare "," matches the price pattern
        return None
    return LineItem(
        quantity=quantity,
        units_per_case=units,
        name=m.group(3).strip(),
        price_a=price_a,
        price_b=price_b,
        raw_line=line,
    )


def parse_shortage_line(line: str, supplier: str) -> Optional[ShortageEntry]:
    line = line.strip()
    m = SHORTAGE_LINE_RE.match(line)
    if not m:
        return None
    quantity, units = int(m.group(1)), int(m.group(2))
    if quantity <= 0 or units <= 0:
        return None
    # Only the last price segment is kept
    last_price = m.group(5) or m.group(4)
    try:
        price = _price(last_price) if last_price else None
    except ValueError:
        return None
    return ShortageEntry(
        quantity=quantity,
        units_per_case=units,
        name=m.group(3).strip(),
        supplier=supplier,
        price=price,
        raw_line=line,
    )


def parse_order_text(text: str) -> ParseResult[LineItem]:
    result: ParseResult[LineItem] = ParseResult()
    for line in _lines(text):
        item = parse_order_line(line)
        if item is None:
            result.unparsed_lines.append(line)
        else:
            result.items.append(item)
    return result


def parse_shortage_text(text: str, supplier: str) -> ParseResult[ShortageEntry]:
    result: ParseResult[ShortageEntry] = ParseResult()
    for line in _lines(text):
        entry = parse_shortage_line(line, supplier)
        if entry is None:
            result.unparsed_lines.append(line)
        else:
            result.items.append(entry)
    return result
