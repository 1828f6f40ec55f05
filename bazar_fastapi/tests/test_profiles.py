"""Tests for sign-in lookup and the caller's own profile."""
from __future__ import annotations

import logging

from conftest import bearer, make_token


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"
    assert client.get("/").status_code == 200


def test_auth_me_reads_role_from_profiles(client, admin_headers, user_headers):
    assert client.get("/auth/me", headers=admin_headers).json() == {
        "id": "admin-1", "email": "admin@example.com", "name": "Lih", "role": "admin",
    }
    assert client.get("/auth/me", headers=user_headers).json()["role"] == "client"


def test_auth_me_rejects_missing_or_invalid_tokens(client):
    assert client.get("/auth/me").status_code == 401
    wrong_secret = {"Authorization": f"Bearer {make_token('user-1', secret='other-secret')}"}
    assert client.get("/auth/me", headers=wrong_secret).status_code == 401
    expired = {"Authorization": f"Bearer {make_token('user-1', expires_in=-60)}"}
    assert client.get("/auth/me", headers=expired).status_code == 401
    assert client.get("/auth/me", headers={"Authorization": "Basic abc"}).status_code == 401


def test_read_and_update_own_profile(client, store, user_headers):
    assert client.get("/profiles/me", headers=user_headers).json()["name"] == "Awa"
    resp = client.patch("/profiles/me", json={"phone": "+242065550000", "address": "Ouenzé"}, headers=user_headers)
    assert resp.status_code == 200
    assert resp.json()["address"] == "Ouenzé"
    row = [p for p in store.tables["profiles"] if p["id"] == "user-1"][0]
    assert row["phone"] == "+242065550000"
    assert row["role"] == "client"


def test_profile_created_on_first_update(client, store):
    """Users the signup trigger missed get a client profile row."""
    headers = bearer("user-9", "new@example.com")
    assert client.get("/profiles/me", headers=headers).json() == {
        "id": "user-9", "name": None, "email": "new@example.com",
        "role": "client", "phone": None, "address": None,
    }
    resp = client.patch("/profiles/me", json={"name": "Nadia"}, headers=headers)
    assert resp.json()["name"] == "Nadia"
    assert any(p["id"] == "user-9" for p in store.tables["profiles"])


def test_missing_jwt_secret_warned_once_at_startup(app, monkeypatch, caplog):
    from fastapi.testclient import TestClient
    from bazar.settings import settings

    monkeypatch.setattr(settings, "auth_jwt_secret", None)
    caplog.set_level(logging.WARNING)
    with TestClient(app) as c:
        for _ in range(3):
            assert c.get("/auth/me", headers=bearer("user-1")).status_code == 401
    warnings = [r for r in caplog.records if "AUTH_JWT_SECRET" in r.getMessage()]
    assert len(warnings) == 1
