from __future__ import annotations
from typing import List

from fastapi import APIRouter, Depends

from ..db.store import DataStore
from ..deps import get_store
from ..schemas.products import CategoryOut, FabricOut
from ..services.fabrics import catalog
from ..services.products import list_categories

router = APIRouter(tags=["catalog"])


@router.get("/categories", response_model=List[CategoryOut])
async def categories(store: DataStore = Depends(get_store)):
    return await list_categories(store)


@router.get("/catalog/fabrics", response_model=List[FabricOut])
def fabrics():
    """Fabric types with their subtypes and the units each one is sold by."""
    return catalog()
