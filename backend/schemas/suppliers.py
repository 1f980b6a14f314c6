from pydantic import BaseModel
from typing import List


class SupplierCatalog(BaseModel):
    europa: List[str]
    independents: List[str]
    all: List[str]
