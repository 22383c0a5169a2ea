import pytest


@pytest.mark.anyio("asyncio")
async def test_healthcheck(client):
    response = await client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["db_status"] == "ok"
    assert payload["migrations_status"] == "up_to_date"
    assert payload["db_ok"] is True
    assert payload["migrations_ok"] is True
    assert payload["app"] == "youngachievers-backoffice"


@pytest.mark.anyio("asyncio")
async def test_health_degrades_on_db_failure(monkeypatch, client):
    class BrokenEngine:
        def connect(self):  # pragma: no cover - simple stub
            raise RuntimeError("DB down")

    monkeypatch.setattr("app.routers.health.get_engine", lambda: BrokenEngine())

    response = await client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "degraded"
    assert payload["db_status"] == "error"
    assert payload["migrations_status"] == "unknown"
    assert payload["db_ok"] is False
    assert payload["migrations_ok"] is False


@pytest.mark.anyio("asyncio")
async def test_health_reports_out_of_date_migrations(monkeypatch, client):
    from app.routers import health as health_module

    monkeypatch.setattr(health_module, "_expected_migration_head", lambda: "not-a-revision")

    response = await client.get("/health")
    payload = response.json()
    assert payload["status"] == "degraded"
    assert payload["migrations_status"] == "out_of_date"
