"""Tests for catalog rows, product admin and categories."""
from __future__ import annotations

from decimal import Decimal

import pytest

from bazar.errors import UnknownUnit, ValidationError
from bazar.schemas.products import FabricProduct, GoodsProduct, normalize_product
from bazar.services.fabrics import get_default_unit, get_fabric_units, validate_fabric


# ---------- Normalization ----------

def test_single_image_string_becomes_list():
    p = normalize_product({"id": 1, "name": "x", "price": 10, "images": "https://a/b.jpg"})
    assert p.images == ["https://a/b.jpg"]
    assert p.id == "1"


def test_metadata_as_json_text():
    p = normalize_product({
        "id": "g", "name": "Gabardine", "price": 25000,
        "metadata": '{"fabricType": "gabardine", "fabricSubtype": "Type 3", "unit": "rouleau"}',
    })
    assert isinstance(p, FabricProduct)
    assert (p.fabric_type, p.fabric_subtype, p.unit) == ("gabardine", "Type 3", "rouleau")


def test_missing_metadata_is_a_piece_good():
    p = normalize_product({"id": "s", "name": "Scissors", "price": "3500", "images": None, "metadata": None})
    assert isinstance(p, GoodsProduct)
    assert p.kind == "goods"
    assert p.unit == "pièce"
    assert p.images == []
    assert p.stock == Decimal("0")


def test_fabric_without_unit_gets_type_default():
    p = normalize_product({"id": "w", "name": "Wax", "price": 1, "metadata": {"fabricType": "Pagne"}})
    assert p.unit == "complet"


def test_unknown_unit_rejected():
    with pytest.raises(UnknownUnit):
        normalize_product({"id": "x", "name": "x", "price": 1, "metadata": {"unit": "kilo"}})


def test_fabric_table_lookups():
    assert get_fabric_units("gabardine") == ["mètre", "rouleau"]
    assert get_default_unit("BOGOLAN") == "mètre"
    assert validate_fabric("bogolan", "Moderne", "bande") == "bande"
    with pytest.raises(ValidationError):
        validate_fabric("bazin", "Riche", "rouleau")
    with pytest.raises(ValidationError):
        validate_fabric("bazin", "Nope", None)
    with pytest.raises(ValidationError):
        get_default_unit("polyester")


# ---------- Listing ----------

def test_list_products_newest_first(client):
    resp = client.get("/products")
    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()] == ["scissors", "gabardine-roll", "bazin-riche"]


def test_list_products_filters_and_sorts(client):
    data = client.get("/products", params={"fabric_type": "Bazin"}).json()
    assert [p["id"] for p in data] == ["bazin-riche"]
    assert data[0]["kind"] == "fabric"
    data = client.get("/products", params={"search": "SCIS"}).json()
    assert [p["id"] for p in data] == ["scissors"]
    data = client.get("/products", params={"sort": "price", "direction": "asc"}).json()
    assert [p["price"] for p in data] == [1000, 3500, 25000]


def test_bad_rows_are_skipped(client, store):
    store.seed("products", {"id": "broken", "name": "Broken", "price": 1, "metadata": {"unit": "kilo"}})
    ids = [p["id"] for p in client.get("/products").json()]
    assert "broken" not in ids and len(ids) == 3


def test_get_product(client):
    data = client.get("/products/gabardine-roll").json()
    assert data["unit"] == "rouleau"
    assert data["stock"] == 3
    assert len(data["images"]) == 2
    assert client.get("/products/nope").status_code == 404


# ---------- Admin writes ----------

def test_create_fabric_product_uses_default_unit(client, store, admin_headers):
    resp = client.post("/products", json={
        "name": "Super Wax Vlisco", "price": 18000, "stock": 12,
        "fabric_type": "pagne", "fabric_subtype": "Vlisco",
    }, headers=admin_headers)
    assert resp.status_code == 201
    data = resp.json()
    assert data["kind"] == "fabric"
    assert data["unit"] == "complet"
    row = [r for r in store.tables["products"] if r["id"] == data["id"]][0]
    assert row["metadata"] == {"fabricType": "pagne", "unit": "complet", "fabricSubtype": "Vlisco"}


def test_create_rejects_bad_fabric_combination(client, admin_headers):
    resp = client.post("/products", json={
        "name": "Bazin", "price": 1000, "fabric_type": "bazin", "unit": "rouleau",
    }, headers=admin_headers)
    assert resp.status_code == 400


def test_product_writes_need_admin(client, user_headers):
    body = {"name": "x", "price": 1}
    assert client.post("/products", json=body).status_code == 401
    assert client.post("/products", json=body, headers=user_headers).status_code == 403
    assert client.delete("/products/scissors", headers=user_headers).status_code == 403


def test_update_product_price_and_unit(client, admin_headers):
    resp = client.patch("/products/gabardine-roll", json={"price": 24000, "unit": "mètre"}, headers=admin_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["price"] == 24000
    assert data["unit"] == "mètre"
    assert data["fabric_type"] == "gabardine"


def test_delete_product_removes_stored_images(client, store, storage, admin_headers):
    resp = client.delete("/products/bazin-riche", headers=admin_headers)
    assert resp.status_code == 200
    assert storage.removed == ["images/bazin.jpg"]
    assert client.get("/products/bazin-riche").status_code == 404


def test_delete_ignores_foreign_image_urls(client, storage, admin_headers):
    assert client.delete("/products/gabardine-roll", headers=admin_headers).status_code == 200
    assert storage.removed == []


def test_upload_images_appends_public_urls(client, storage, admin_headers):
    files = [
        ("files", ("front.JPG", b"\xff\xd8front", "image/jpeg")),
        ("files", ("back.png", b"\x89PNGback", "image/png")),
    ]
    resp = client.post("/products/scissors/images", files=files, headers=admin_headers)
    assert resp.status_code == 200
    urls = resp.json()["images"]
    assert len(urls) == 2
    assert urls[0].endswith(".jpg") and urls[1].endswith(".png")
    assert all("/images/" in u for u in urls)
    assert sorted(storage.objects.values()) == [b"\x89PNGback", b"\xff\xd8front"]


# ---------- Categories ----------

def test_categories_count_products_by_fabric_type(client):
    data = client.get("/categories").json()
    assert [(c["name"], c["count"]) for c in data] == [("Bazin", 1), ("Gabardine", 1), ("Pagne", 0)]


def test_fabric_catalog(client):
    data = {f["key"]: f for f in client.get("/catalog/fabrics").json()}
    assert data["pagne"]["default_unit"] == "complet"
    assert "Super Wax" in data["pagne"]["subtypes"]
    assert data["bogolan"]["units"] == ["bande", "mètre"]
