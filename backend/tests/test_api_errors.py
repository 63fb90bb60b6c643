"""Tests for the error envelope, catch-all handling and test-database guard."""

import pytest
from httpx import ASGITransport, AsyncClient

from config import settings
from database import reset_database
from main import app

ENVELOPE_KEYS = {"status", "message", "errorCode", "timestamp"}


async def test_unknown_route(client):
    resp = await client.get("/api/nonexistent")

    assert resp.status_code == 404
    assert resp.json()["message"] == "Route /api/nonexistent not found"
    assert resp.json()["errorCode"] == "ROUTE_NOT_FOUND"


async def test_error_envelope_shape(client):
    resp = await client.get("/api/projects")

    assert resp.status_code == 401
    assert ENVELOPE_KEYS <= resp.json().keys()
    assert resp.json()["status"] == "error"


async def test_invalid_json_is_a_validation_error(client, owner):
    _, headers = owner
    resp = await client.post(
        "/api/projects",
        content=b"{not json",
        headers={**headers, "Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json()["errorCode"] == "VALIDATION_ERROR"


async def test_unexpected_error_is_generic_500(client):
    async def explode():
        raise RuntimeError("database password is hunter2")

    app.add_api_route("/api/_explode", explode)
    try:
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.get("/api/_explode")
    finally:
        app.router.routes = [r for r in app.router.routes if getattr(r, "path", None) != "/api/_explode"]

    assert resp.status_code == 500
    body = resp.json()
    assert body["errorCode"] == "INTERNAL_SERVER_ERROR"
    assert body["message"] == "Something went wrong on our end. Please try again later."
    assert "hunter2" not in resp.text


async def test_health(client):
    resp = await client.get("/api/health")
    assert resp.json()["status"] == "ok"


async def test_reset_database_refuses_outside_test(engine, monkeypatch):
    monkeypatch.setattr(settings, "environment", "production")

    with pytest.raises(RuntimeError, match="Refusing to reset"):
        await reset_database(engine)
