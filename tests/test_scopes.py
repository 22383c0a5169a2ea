"""Authentication and scope enforcement tests."""
from uuid import uuid4

import pytest
from sqlalchemy import select

from app.models import ActivityLog
from app.models.api_key import ApiKey, ApiScope


@pytest.mark.anyio
async def test_missing_key_is_rejected(client):
    response = await client.get("/members")
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "NO_API_KEY"


@pytest.mark.anyio
async def test_unknown_key_is_rejected(client):
    response = await client.get("/members", headers={"X-API-Key": "nope"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.anyio
async def test_x_api_key_header_is_accepted(client, make_api_key):
    token = f"hdr-{uuid4().hex}"
    key = make_api_key(name=f"hdr-{uuid4().hex}", key=token)
    response = await client.get("/members", headers={"X-API-Key": token})
    assert response.status_code == 200
    assert key.last_used_at is not None


@pytest.mark.anyio
async def test_revoked_key_is_rejected(client, make_api_key):
    token = f"revoked-{uuid4().hex}"
    make_api_key(name=f"revoked-{uuid4().hex}", key=token, is_active=False)
    response = await client.get("/members", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


@pytest.mark.anyio
async def test_staff_cannot_manage_apikeys(client, staff_headers):
    response = await client.get("/apikeys/1", headers=staff_headers)
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "INSUFFICIENT_SCOPE"


@pytest.mark.anyio
async def test_admin_creates_and_revokes_key(client, admin_headers, admin_user, db_session):
    response = await client.post(
        "/apikeys",
        json={
            "name": f"ops-{uuid4().hex[:8]}",
            "scope": "staff",
            "admin_user_id": admin_user.id,
            "days_valid": None,
        },
        headers=admin_headers,
    )
    assert response.status_code == 201
    created = response.json()
    assert created["key"].startswith("ya_")

    usable = await client.get("/members", headers={"Authorization": f"Bearer {created['key']}"})
    assert usable.status_code == 200

    response = await client.delete(f"/apikeys/{created['id']}", headers=admin_headers)
    assert response.status_code == 204
    assert db_session.get(ApiKey, created["id"]).is_active is False

    entries = list(db_session.scalars(select(ActivityLog).order_by(ActivityLog.id)))
    assert [entry.action for entry in entries] == ["API Key Created", "API Key Revoked"]
    assert entries[0].category.value == "user_management"
    assert entries[0].new_values["key_hash"] == "***"


@pytest.mark.anyio
async def test_legacy_key_acts_as_system(monkeypatch, client, legacy_headers, db_session):
    monkeypatch.setattr("app.security.DEV_API_KEY_ALLOWED", True, raising=False)
    response = await client.post(
        "/amenities", json={"name": f"Legacy {uuid4().hex[:6]}", "category": "basic"}, headers=legacy_headers
    )
    assert response.status_code == 201
    entry = db_session.scalars(select(ActivityLog)).one()
    assert entry.user == "System"
    assert entry.performed_by is None


@pytest.mark.anyio
async def test_legacy_key_rejected_outside_dev(monkeypatch, client, legacy_headers):
    monkeypatch.setattr("app.security.DEV_API_KEY_ALLOWED", False, raising=False)
    response = await client.get("/members", headers=legacy_headers)
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "LEGACY_KEY_FORBIDDEN"


@pytest.mark.anyio
async def test_staff_key_reaches_staff_routes(client, make_api_key):
    token = f"staff-{uuid4().hex}"
    make_api_key(name=f"staff-{uuid4().hex}", key=token, scope=ApiScope.staff)
    response = await client.get("/attendance/batches", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200
