"""
Tests for the pasted-text parsers.

Order lines:    "<qty>x<units> NAME $price1/price2"  (both prices required)
Shortage lines: "<qty>x<units> NAME [$price1[/price2]]"
"""

import pytest

from core.parser import (
    OrderTextParseError,
    parse_order_line,
    parse_order_text,
    parse_shortage_text,
)


# ============================================================
# Order text
# ============================================================

def test_single_line():
    result = parse_order_text("3x6 WIDGET $10.00/12.50")
    assert result.unparsed_lines == []
    assert len(result.items) == 1
    item = result.items[0]
    assert item.quantity == 3
    assert item.units_per_case == 6
    assert item.name == "WIDGET"
    assert item.price_a == 10.00
    assert item.price_b == 12.50
    assert item.total_units == 18
    assert item.raw_line == "3x6 WIDGET $10.00/12.50"


@pytest.mark.parametrize(
    "line, quantity, units, name",
    [
        ("4x12 PETACA LICOR PIÑA COLADA AMERICANN CLUB $1708.20/1256.24", 4, 12, "PETACA LICOR PIÑA COLADA AMERICANN CLUB"),
        ("5X6 LAS PERDICES CABERNET SUAV 750CC $4771.99/5160.91", 5, 6, "LAS PERDICES CABERNET SUAV 750CC"),
        ("1x1 GIN 10.5/11", 1, 1, "GIN"),
    ],
)
def test_quantity_times_units_is_literal_product(line, quantity, units, name):
    item = parse_order_text(line).items[0]
    assert (item.quantity, item.units_per_case, item.name) == (quantity, units, name)
    assert item.total_units == quantity * units
    assert item.raw_line == line


def test_thousands_separators_are_stripped():
    item = parse_order_line("2x6 FERNET BRANCA 1L $1,708.20/12,345.60")
    assert item.price_a == 1708.20
    assert item.price_b == 12345.60


def test_both_prices_may_carry_a_dollar_sign():
    item = parse_order_line("2x6 MALBEC $10/$12")
    assert (item.price_a, item.price_b) == (10.0, 12.0)


def test_raw_line_is_trimmed_and_name_normalized():
    result = parse_order_text("   2x6   MALBEC RESERVA   $10/12   ")
    item = result.items[0]
    assert item.name == "MALBEC RESERVA"
    assert item.raw_line == "2x6   MALBEC RESERVA   $10/12"


def test_missing_price_suffix_is_rejected_by_order_parser():
    result = parse_order_text("3x6 WIDGET")
    assert result.items == []
    assert result.unparsed_lines == ["3x6 WIDGET"]
    assert not result.ok


def test_count_is_matched_lines_not_input_lines():
    text = "\n".join([
        "3x6 WIDGET $10.00/12.50",
        "",
        "not a product line",
        "   ",
        "1x12 AGUA SIN GAS $1/2",
        "12 MALBEC $10/12",
    ])
    result = parse_order_text(text)
    assert [it.name for it in result.items] == ["WIDGET", "AGUA SIN GAS"]
    assert result.unparsed_lines == ["not a product line", "12 MALBEC $10/12"]


def test_windows_line_endings():
    result = parse_order_text("1x6 A $1/2\r\n2x6 B $3/4\r\n")
    assert [it.name for it in result.items] == ["A", "B"]


def test_zero_quantity_is_not_an_item():
    result = parse_order_text("0x6 WIDGET $1/2")
    assert result.items == []
    assert result.unparsed_lines == ["0x6 WIDGET $1/2"]


def test_empty_text_raises_when_required():
    with pytest.raises(OrderTextParseError) as exc:
        parse_order_text("hello\nworld").raise_if_empty()
    assert exc.value.unparsed_lines == ["hello", "world"]
    assert "check the format" in str(exc.value).lower()


# ============================================================
# Shortage text
# ============================================================

def test_shortage_without_price():
    result = parse_shortage_text("3x6 WIDGET", "Norton (Europa)")
    assert result.unparsed_lines == []
    entry = result.items[0]
    assert (entry.quantity, entry.units_per_case, entry.name) == (3, 6, "WIDGET")
    assert entry.price is None
    assert entry.supplier == "Norton (Europa)"


def test_shortage_keeps_last_price_only():
    entries = parse_shortage_text(
        "4x12 PETACA LICOR $1708.20/1256.24\n5x6 LAS PERDICES CABERNET SUAV 750CC $5,160.91",
        "Las Perdices (Europa)",
    ).items
    assert [e.price for e in entries] == [1256.24, 5160.91]
    assert entries[1].name == "LAS PERDICES CABERNET SUAV 750CC"


def test_shortage_rejects_lines_without_quantity():
    result = parse_shortage_text("MALBEC\n2x6 MALBEC", "Berlin")
    assert [e.name for e in result.items] == ["MALBEC"]
    assert result.unparsed_lines == ["MALBEC"]
