"""Unit tests for the rig API router (/api/rig/*).

Uses FastAPI TestClient against a real RigHost over a simulated rig; the
tick thread is never started, tests step it with ``do_tick()``.
"""
from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.routers.rig import router
from rapidgun.host import RigHost
from rapidgun.simulated import build_registry


pytestmark = pytest.mark.unit


def _make_app(host=None):
    """Create a minimal FastAPI app with the rig router and optional host."""
    app = FastAPI()
    app.include_router(router)
    app.state.rig_host = host
    return app


def _host(levels=(4, 4), ticks=1) -> RigHost:
    host = RigHost(build_registry(levels))
    host.restart()
    for _ in range(ticks):
        host.do_tick()
    return host


class TestGetStatus:
    """GET /api/rig/status"""

    def test_returns_snapshot(self):
        client = TestClient(_make_app(_host()))
        resp = client.get("/api/rig/status")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ready"
        assert data["image"] == "Arrow"
        assert data["active_weapon"] == [1, 0]

    def test_error_status(self):
        client = TestClient(_make_app(_host(levels=(1,))))
        data = client.get("/api/rig/status").json()
        assert data["status"] == "error"
        assert data["error"]

    def test_503_without_host(self):
        client = TestClient(_make_app(None))
        assert client.get("/api/rig/status").status_code == 503


class TestGetBarrel:
    """GET /api/rig/barrel"""

    def test_levels(self):
        client = TestClient(_make_app(_host()))
        resp = client.get("/api/rig/barrel")
        assert resp.status_code == 200
        levels = resp.json()["levels"]
        assert len(levels) == 2
        assert levels[1][0]["enabled"] is True

    def test_409_without_rig(self):
        client = TestClient(_make_app(_host(levels=())))
        assert client.get("/api/rig/barrel").status_code == 409


class TestUpdateWeapon:
    """POST /api/rig/weapons/{level}/{quarter}"""

    def test_mark_firing(self):
        host = _host()
        client = TestClient(_make_app(host))
        resp = client.post("/api/rig/weapons/1/0", json={"firing": True})
        assert resp.status_code == 200
        data = resp.json()
        assert data["firing"] is True
        assert data["functional"] is True
        assert data["available"] is False

        host.do_tick()
        assert client.get("/api/rig/status").json()["status"] == "not-ready"

    def test_mark_damaged(self):
        client = TestClient(_make_app(_host()))
        data = client.post("/api/rig/weapons/0/3", json={"functional": False}).json()
        assert data["functional"] is False
        assert data["firing"] is False

    def test_404_unknown_address(self):
        client = TestClient(_make_app(_host()))
        assert client.post("/api/rig/weapons/7/0", json={"firing": True}).status_code == 404

    def test_422_bad_body(self):
        client = TestClient(_make_app(_host()))
        resp = client.post("/api/rig/weapons/0/0", json={"firing": "sometimes"})
        assert resp.status_code == 422

    def test_503_without_host(self):
        client = TestClient(_make_app(None))
        assert client.post("/api/rig/weapons/0/0", json={}).status_code == 503


class TestRestart:
    """POST /api/rig/restart"""

    def test_restart(self):
        client = TestClient(_make_app(_host()))
        resp = client.post("/api/rig/restart")
        assert resp.status_code == 200
        assert resp.json() == {"status": "not-ready"}

    def test_restart_recovers_lost_rig(self):
        host = _host()
        rotor = host.registry.find("rotor")
        rotor.destroy()
        host.do_tick()
        client = TestClient(_make_app(host))
        assert client.get("/api/rig/status").json()["status"] == "error"

        rotor.exists = True
        assert client.post("/api/rig/restart").json() == {"status": "not-ready"}
