"""
Tests for error-to-response conversion and store timeouts.
"""

from __future__ import annotations

import asyncio

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

import database
from errors import ConflictError, InternalError, NotFoundError
from middleware.errors import register_error_handlers


@pytest.fixture()
async def failing_client():
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/boom")
    async def boom():
        raise RuntimeError("database password is hunter2")

    @app.get("/timeout")
    async def timeout():
        raise InternalError("Store operation timed out")

    @app.get("/missing")
    async def missing():
        raise NotFoundError("Task not found")

    @app.get("/conflict")
    async def conflict():
        raise ConflictError()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


async def test_unexpected_error_becomes_generic_500(failing_client, caplog):
    resp = await failing_client.get("/boom")

    assert resp.status_code == 500
    assert resp.json() == {
        "success": False,
        "data": None,
        "error": {"code": "internal_error", "message": "Internal server error"},
    }
    assert "hunter2" not in resp.text
    assert "Unhandled error on GET /boom" in caplog.text


async def test_internal_error_message_stays_server_side(failing_client):
    resp = await failing_client.get("/timeout")
    assert resp.status_code == 500
    assert resp.json()["error"]["message"] == "Internal server error"


async def test_app_errors_keep_status_and_message(failing_client):
    missing = await failing_client.get("/missing")
    conflict = await failing_client.get("/conflict")

    assert missing.status_code == 404
    assert missing.json()["error"] == {"code": "not_found", "message": "Task not found"}
    assert conflict.status_code == 400
    assert conflict.json()["error"]["code"] == "conflict"


async def test_store_timeout_raises_internal_error(monkeypatch):
    monkeypatch.setattr(database, "STORE_TIMEOUT_SECONDS", 0.01)

    with pytest.raises(InternalError, match="timed out"):
        await database.with_timeout(asyncio.sleep(1))


async def test_store_call_within_timeout_returns_value():
    async def answer():
        return 42

    assert await database.with_timeout(answer()) == 42


async def test_generic_500_keeps_cors_headers(client, alice, monkeypatch):
    async def broken_list_tasks(*args, **kwargs):
        raise RuntimeError("connection reset")

    monkeypatch.setattr("routes.tasks.list_tasks", broken_list_tasks)
    origin = {"Origin": "http://localhost:3000"}

    resp = await client.get("/tasks", headers={**alice, **origin})

    assert resp.status_code == 500
    assert resp.json()["error"]["message"] == "Internal server error"
    assert resp.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert resp.headers["access-control-allow-credentials"] == "true"
