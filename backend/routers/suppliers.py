from fastapi import APIRouter

from core.suppliers import EUROPA_SUPPLIERS, INDEPENDENT_SUPPLIERS, all_supplier_names
from schemas.suppliers import SupplierCatalog

router = APIRouter()


@router.get("/", response_model=SupplierCatalog)
async def list_suppliers():
    return SupplierCatalog(
        europa=list(EUROPA_SUPPLIERS),
        independents=list(INDEPENDENT_SUPPLIERS),
        all=all_supplier_names(),
    )
