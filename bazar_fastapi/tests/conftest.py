"""Shared fixtures: in-memory data store and image storage, signed tokens, a TestClient."""
from __future__ import annotations

import time
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

import pytest
from jose import jwt

from bazar.db.store import TABLES, check_table
from bazar.errors import StoreWriteError
from bazar.settings import settings

JWT_SECRET = "test-secret"
_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


# ---------- Fake data store ----------

def _sort_key(value):
    return (0, "") if value is None else (1, value)


def _matches(row: Dict[str, Any], filters: Optional[Dict[str, Any]]) -> bool:
    for col, want in (filters or {}).items():
        have = row.get(col)
        if isinstance(want, (list, tuple, set, frozenset)):
            if have not in want:
                return False
        elif have != want:
            return False
    return True


class MemoryStore:
    """DataStore kept in dicts. Tables listed in fail_writes raise on every write."""

    def __init__(self) -> None:
        self.tables: Dict[str, List[Dict[str, Any]]] = {t: [] for t in TABLES}
        self.fail_writes: set = set()
        self.writes: List[tuple] = []
        self._seq = 0

    def _check_write(self, op: str, table: str) -> None:
        check_table(table)
        if table in self.fail_writes:
            raise StoreWriteError(f"simulated outage on {table}")
        self.writes.append((op, table))

    async def query(self, table, filters=None, order_by=None, descending=False, limit=None):
        check_table(table)
        rows = [dict(r) for r in self.tables[table] if _matches(r, filters)]
        if order_by:
            rows.sort(key=lambda r: _sort_key(r.get(order_by)), reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return rows

    async def insert(self, table, row):
        return (await self.insert_many(table, [row]))[0]

    async def insert_many(self, table, rows):
        self._check_write("insert", table)
        out = []
        for row in rows:
            self._seq += 1
            stored = {"created_at": _EPOCH + timedelta(seconds=self._seq), **row}
            stored.setdefault("id", uuid.uuid4().hex)
            self.tables[table].append(stored)
            out.append(dict(stored))
        return out

    async def update(self, table, row_id, patch):
        self._check_write("update", table)
        for row in self.tables[table]:
            if row["id"] == row_id:
                row.update(patch)
                return dict(row)
        return None

    async def delete(self, table, row_id):
        self._check_write("delete", table)
        self.tables[table] = [r for r in self.tables[table] if r["id"] != row_id]

    def seed(self, table: str, *rows: Dict[str, Any]) -> None:
        for row in rows:
            self._seq += 1
            self.tables[table].append(
                {"created_at": _EPOCH + timedelta(seconds=self._seq), **row}
            )


class FakeStorage:
    def __init__(self) -> None:
        self.objects: Dict[str, bytes] = {}
        self.removed: List[str] = []

    def upload(self, bucket, path, blob, content_type=None):
        self.objects[f"{bucket}/{path}"] = blob
        return path

    def get_public_url(self, bucket, path):
        return f"https://storage.example.com/lih-bazar.appspot.com/{bucket}/{path}"

    def remove(self, bucket, paths):
        for p in paths:
            self.objects.pop(f"{bucket}/{p}", None)
            self.removed.append(f"{bucket}/{p}")


# ---------- Tokens ----------

def make_token(sub: str, email: str | None = None, secret: str = JWT_SECRET, expires_in: int = 3600) -> str:
    claims = {"sub": sub, "aud": "authenticated", "exp": int(time.time()) + expires_in}
    if email:
        claims["email"] = email
    return jwt.encode(claims, secret, algorithm="HS256")


def bearer(sub: str, email: str | None = None) -> Dict[str, str]:
    return {"Authorization": f"Bearer {make_token(sub, email)}"}


# ---------- Fixtures ----------

@pytest.fixture(autouse=True)
def _settings(monkeypatch):
    monkeypatch.setattr(settings, "auth_jwt_secret", JWT_SECRET)
    monkeypatch.setattr(settings, "auth_jwt_audience", "authenticated")
    monkeypatch.setattr(settings, "seller_whatsapp_number", "+242064767604")
    monkeypatch.setattr(settings, "continuous_unit_step", Decimal("0.1"))


@pytest.fixture()
def store():
    s = MemoryStore()
    s.seed(
        "profiles",
        {"id": "user-1", "name": "Awa", "email": "awa@example.com", "role": "client"},
        {"id": "user-2", "name": "Moussa", "email": "moussa@example.com", "role": "client"},
        {"id": "admin-1", "name": "Lih", "email": "admin@example.com", "role": "admin"},
    )
    s.seed(
        "products",
        {
            "id": "bazin-riche", "name": "Bazin Riche", "description": "Brocade",
            "price": Decimal("1000"), "stock": Decimal("50"),
            "images": "https://storage.example.com/lih-bazar.appspot.com/images/bazin.jpg",
            "metadata": {"fabricType": "bazin", "fabricSubtype": "Riche", "unit": "mètre"},
        },
        {
            "id": "gabardine-roll", "name": "Gabardine Type 1", "description": None,
            "price": Decimal("25000"), "stock": Decimal("3"),
            "images": ["https://cdn.example.com/gab-1.jpg", "https://cdn.example.com/gab-2.jpg"],
            "metadata": '{"fabricType": "gabardine", "unit": "rouleau"}',
        },
        {
            "id": "scissors", "name": "Tailor scissors", "description": "Steel",
            "price": Decimal("3500"), "stock": Decimal("10"),
            "images": None, "metadata": None,
        },
    )
    s.seed(
        "categories",
        {"id": "cat-bazin", "name": "Bazin", "image": None},
        {"id": "cat-gabardine", "name": "Gabardine", "image": None},
        {"id": "cat-pagne", "name": "Pagne", "image": None},
    )
    s.writes.clear()
    return s


@pytest.fixture()
def storage():
    return FakeStorage()


@pytest.fixture()
def app(store, storage):
    from bazar.main import create_app
    return create_app(store=store, storage=storage)


@pytest.fixture()
def client(app):
    """FastAPI TestClient (sync)."""
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def user_headers():
    return bearer("user-1", "awa@example.com")


@pytest.fixture()
def other_headers():
    return bearer("user-2", "moussa@example.com")


@pytest.fixture()
def admin_headers():
    return bearer("admin-1", "admin@example.com")
