import pytest

from core.status import InvalidStatusTransition, OrderStatus, can_transition, transition
from core.suppliers import all_supplier_names, supplier_display_name


def test_both_states_are_mutually_reachable():
    assert transition(OrderStatus.IN_TRANSIT, OrderStatus.COMPLETED) == OrderStatus.COMPLETED
    assert transition(OrderStatus.COMPLETED, OrderStatus.IN_TRANSIT) == OrderStatus.IN_TRANSIT


def test_same_state_is_not_a_transition():
    assert not can_transition(OrderStatus.COMPLETED, OrderStatus.COMPLETED)
    with pytest.raises(InvalidStatusTransition):
        transition(OrderStatus.IN_TRANSIT, OrderStatus.IN_TRANSIT)


def test_transition_accepts_raw_values():
    assert transition("IN_TRANSIT", "COMPLETED") is OrderStatus.COMPLETED


def test_europa_display_name():
    assert supplier_display_name("Norton") == "Norton (Europa)"
    assert supplier_display_name("Norton (Europa)") == "Norton (Europa)"
    assert supplier_display_name("Gin Merle") == "Gin Merle"


def test_catalog_lists_all_suppliers():
    names = all_supplier_names()
    assert "Zuccardi (Europa)" in names
    assert "Full Escabio" in names
    assert len(names) == 22
