"""Tests for the FastAPI application factory."""

from __future__ import annotations

import asyncio

from httpx import ASGITransport, AsyncClient

from opledger import __version__
from opledger.api import create_app
from opledger.core.settings import OpLedgerSettings
from opledger.operations import MemoryOperationStore, OperationRegistry


def _run_async(coro):
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _get(app, path: str, **kw):
    async def _call():
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            return await ac.get(path, **kw)

    return _run_async(_call())


class TestCreateApp:
    def test_health(self):
        app = create_app(settings=OpLedgerSettings(log_json=True))
        resp = _get(app, "/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "version": __version__}

    def test_request_id_echoed(self):
        app = create_app(settings=OpLedgerSettings(log_json=True))
        resp = _get(app, "/health", headers={"X-Request-ID": "req-123"})
        assert resp.headers["X-Request-ID"] == "req-123"

    def test_request_id_generated(self):
        app = create_app(settings=OpLedgerSettings(log_json=True))
        resp = _get(app, "/health")
        assert resp.headers["X-Request-ID"]

    def test_uses_injected_registry(self):
        registry = OperationRegistry(MemoryOperationStore())
        op = registry.create_operation("ws-1", "/ws", 1, "deploy")
        app = create_app(settings=OpLedgerSettings(log_json=True), registry=registry)
        assert app.state.registry is registry
        resp = _get(app, f"/api/v1/operations/{op.id}")
        assert resp.status_code == 200

    def test_custom_prefix(self):
        app = create_app(settings=OpLedgerSettings(log_json=True, api_prefix="/ops"))
        assert _get(app, "/ops").status_code == 200

    def test_sqlite_backend(self, tmp_path):
        settings = OpLedgerSettings(
            log_json=True,
            store_backend="sqlite",
            sqlite_path=tmp_path / "ops.db",
        )
        app = create_app(settings=settings)
        assert _get(app, "/api/v1/operations").json() == []
        assert (tmp_path / "ops.db").exists()
