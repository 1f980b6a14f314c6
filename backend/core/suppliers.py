"""Fixed supplier catalog: the Europa distributor (with its brands) plus independents."""

from typing import List

EUROPA_GROUP = "Europa"

EUROPA_SUPPLIERS: List[str] = [
    "Aconcagua",
    "Campari",
    "Cepas Argentinas",
    "Coca Cola",
    "Dellepiane",
    "Fratelli Branca",
    "La Rural",
    "Las Perdices",
    "Mani King",
    "Millan",
    "Norton",
    "Pernord Ricard",
    "Salentein",
    "Zuccardi",
]

INDEPENDENT_SUPPLIERS: List[str] = [
    "Speed VM",
    "Gin Merle",
    "Coffico",
    "Berlin",
    "Liquid Point",
    "Corral de Palos",
    "Full Bazar",
    "Full Escabio",
]


def is_europa_supplier(name: str) -> bool:
    return (name or "").strip().lower() in {s.lower() for s in EUROPA_SUPPLIERS}


def supplier_display_name(name: str) -> str:
    """Norton -> "Norton (Europa)". Independents and already suffixed names come back unchanged."""
    name = (name or "").strip()
    if name.endswith(f"({EUROPA_GROUP})"):
        return name
    if is_europa_supplier(name):
        return f"{name} ({EUROPA_GROUP})"
    return name


def all_supplier_names() -> List[str]:
    return [supplier_display_name(s) for s in EUROPA_SUPPLIERS] + list(INDEPENDENT_SUPPLIERS)
