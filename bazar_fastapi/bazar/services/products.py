# bazar/services/products.py
from __future__ import annotations

import logging
import os
import uuid
import time
from typing import Any, Dict, List, Optional, Tuple, Union

from fastapi.concurrency import run_in_threadpool

from ..db.store import DataStore, first
from ..errors import NotFound, StoreWriteError, ValidationError
from ..schemas.products import (
    FabricProduct,
    GoodsProduct,
    ProductIn,
    ProductPatch,
    normalize_product,
)
from ..settings import settings
from .auth import CurrentUser, require_admin
from .fabrics import validate_fabric
from .storage import ObjectStorage, path_from_url
from .units import DEFAULT_UNIT, rule_for

logger = logging.getLogger(__name__)

TABLE = "products"
SORT_FIELDS = ("created_at", "price", "name", "stock")

AnyProduct = Union[FabricProduct, GoodsProduct]


# --- READ HELPERS -------------------------------------------------------------
async def list_products(
    store: DataStore,
    fabric_type: Optional[str] = None,
    search: Optional[str] = None,
    sort: str = "created_at",
    direction: str = "desc",
) -> List[AnyProduct]:
    """
    Catalog listing. Filtering on fabric type and name happens after
    normalization because both live in free-form columns.
    """
    if sort not in SORT_FIELDS:
        raise ValidationError(f"cannot sort by {sort!r}")
    rows = await store.query(TABLE, order_by=sort, descending=(direction != "asc"))

    out: List[AnyProduct] = []
    for row in rows:
        try:
            product = normalize_product(row)
        except ValidationError as e:
            logger.warning("skipping product %s: %s", row.get("id"), e.detail)
            continue
        if fabric_type and (
            not isinstance(product, FabricProduct)
            or product.fabric_type.lower() != fabric_type.lower()
        ):
            continue
        if search and search.lower() not in product.name.lower():
            continue
        out.append(product)
    return out


async def get_product(store: DataStore, product_id: str) -> AnyProduct:
    if not product_id:
        raise NotFound("product not found")
    row = first(await store.query(TABLE, {"id": product_id}, limit=1))
    if row is None:
        raise NotFound("product not found")
    return normalize_product(row)


async def count_products(store: DataStore) -> int:
    return len(await store.query(TABLE))


# --- WRITES -------------------------------------------------------------------
def _metadata(fabric_type: Optional[str], subtype: Optional[str], unit: Optional[str]) -> Dict[str, Any]:
    """Metadata column in the shape the storefront has always stored."""
    if fabric_type:
        unit = validate_fabric(fabric_type, subtype, unit)
        meta = {"fabricType": fabric_type, "unit": unit}
        if subtype:
            meta["fabricSubtype"] = subtype
        return meta
    unit = unit or DEFAULT_UNIT
    rule_for(unit)
    return {"unit": unit}


async def create_product(store: DataStore, user: Optional[CurrentUser], payload: ProductIn) -> AnyProduct:
    require_admin(user)
    row = {
        "name": payload.name.strip(),
        "description": payload.description,
        "price": payload.price,
        "stock": payload.stock,
        "images": payload.images,
        "metadata": _metadata(payload.fabric_type, payload.fabric_subtype, payload.unit),
    }
    created = await store.insert(TABLE, row)
    logger.info("product %s created", created["id"])
    return normalize_product(created)


async def update_product(
    store: DataStore, user: Optional[CurrentUser], product_id: str, patch: ProductPatch
) -> AnyProduct:
    require_admin(user)
    current = await get_product(store, product_id)
    changes = patch.model_dump(exclude_unset=True)

    row: Dict[str, Any] = {}
    for field in ("name", "description", "price", "stock", "images"):
        if field in changes and changes[field] is not None:
            row[field] = changes[field]

    if {"fabric_type", "fabric_subtype", "unit"} & changes.keys():
        old_type = current.fabric_type if isinstance(current, FabricProduct) else None
        old_subtype = current.fabric_subtype if isinstance(current, FabricProduct) else None
        fabric_type = changes.get("fabric_type", old_type)
        subtype = changes.get("fabric_subtype", old_subtype if fabric_type == old_type else None)
        unit = changes.get("unit") or (current.unit if fabric_type == old_type else None)
        row["metadata"] = _metadata(fabric_type, subtype, unit)

    updated = await store.update(TABLE, product_id, row)
    if updated is None:
        raise NotFound("product not found")
    return normalize_product(updated)


async def delete_product(
    store: DataStore, storage: ObjectStorage, user: Optional[CurrentUser], product_id: str
) -> None:
    """Delete a product and, best effort, the images we stored for it."""
    require_admin(user)
    product = await get_product(store, product_id)
    bucket = settings.images_bucket
    paths = [p for p in (path_from_url(bucket, url) for url in product.images) if p]
    if paths:
        try:
            await run_in_threadpool(storage.remove, bucket, paths)
        except StoreWriteError as e:
            logger.warning("product %s: images left in storage: %s", product_id, e.detail)
    await store.delete(TABLE, product_id)
    logger.info("product %s deleted", product_id)


def _object_name(filename: str) -> str:
    ext = os.path.splitext(filename or "")[1].lower() or ".bin"
    return f"{uuid.uuid4().hex[:7]}-{int(time.time() * 1000)}{ext}"


async def add_product_images(
    store: DataStore,
    storage: ObjectStorage,
    user: Optional[CurrentUser],
    product_id: str,
    files: List[Tuple[str, bytes, Optional[str]]],
) -> AnyProduct:
    """Upload (filename, content, content_type) files and append their public URLs."""
    require_admin(user)
    if not files:
        raise ValidationError("select at least one image")
    product = await get_product(store, product_id)

    bucket = settings.images_bucket
    urls: List[str] = []
    for filename, content, content_type in files:
        path = await run_in_threadpool(storage.upload, bucket, _object_name(filename), content, content_type)
        urls.append(await run_in_threadpool(storage.get_public_url, bucket, path))

    updated = await store.update(TABLE, product_id, {"images": product.images + urls})
    if updated is None:
        raise NotFound("product not found")
    return normalize_product(updated)


# --- CATEGORIES ---------------------------------------------------------------
async def list_categories(store: DataStore) -> List[Dict[str, Any]]:
    """Categories with the number of products whose fabric type matches the name."""
    categories = await store.query("categories", order_by="name")
    products = await list_products(store)
    counts: Dict[str, int] = {}
    for p in products:
        if isinstance(p, FabricProduct):
            key = p.fabric_type.lower()
            counts[key] = counts.get(key, 0) + 1
    return [
        {
            "id": str(c["id"]),
            "name": c["name"],
            "image": c.get("image"),
            "count": counts.get((c["name"] or "").lower(), 0),
        }
        for c in categories
    ]
