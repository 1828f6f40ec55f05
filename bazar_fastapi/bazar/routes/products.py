# bazar/routes/products.py
from __future__ import annotations
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile

from ..db.store import DataStore
from ..deps import current_user, get_storage, get_store
from ..schemas.products import Product, ProductIn, ProductPatch
from ..services.auth import CurrentUser
from ..services.products import (
    add_product_images,
    create_product,
    delete_product,
    get_product,
    list_products,
    update_product,
)
from ..services.storage import ObjectStorage

router = APIRouter(prefix="/products", tags=["products"])


# GET /products
@router.get("", response_model=List[Product])
async def list_products_endpoint(
    fabric_type: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    sort: Literal["created_at", "price", "name", "stock"] = Query("created_at"),
    direction: Literal["asc", "desc"] = Query("desc"),
    store: DataStore = Depends(get_store),
):
    return await list_products(store, fabric_type=fabric_type, search=search, sort=sort, direction=direction)


# GET /products/{id}
@router.get("/{product_id}", response_model=Product)
async def get_product_endpoint(product_id: str, store: DataStore = Depends(get_store)):
    return await get_product(store, product_id)


# POST /products
@router.post("", response_model=Product, status_code=201)
async def create_product_endpoint(
    payload: ProductIn,
    store: DataStore = Depends(get_store),
    user: Optional[CurrentUser] = Depends(current_user),
):
    return await create_product(store, user, payload)


# PATCH /products/{id}
@router.patch("/{product_id}", response_model=Product)
async def update_product_endpoint(
    product_id: str,
    payload: ProductPatch,
    store: DataStore = Depends(get_store),
    user: Optional[CurrentUser] = Depends(current_user),
):
    return await update_product(store, user, product_id, payload)


# DELETE /products/{id}
@router.delete("/{product_id}")
async def delete_product_endpoint(
    product_id: str,
    store: DataStore = Depends(get_store),
    storage: ObjectStorage = Depends(get_storage),
    user: Optional[CurrentUser] = Depends(current_user),
):
    await delete_product(store, storage, user, product_id)
    return {"ok": True}


# POST /products/{id}/images
@router.post("/{product_id}/images", response_model=Product)
async def upload_images_endpoint(
    product_id: str,
    files: List[UploadFile] = File(...),
    store: DataStore = Depends(get_store),
    storage: ObjectStorage = Depends(get_storage),
    user: Optional[CurrentUser] = Depends(current_user),
):
    blobs = [(f.filename or "", await f.read(), f.content_type) for f in files]
    return await add_product_images(store, storage, user, product_id, blobs)
