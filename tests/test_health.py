"""
tests/test_health.py -- Integration tests for GET /api/v1/health.

Covers:
  - 200 response with status, version, and components fields
  - components.database reports 'ok' while the store is reachable
  - No authentication required
"""

from __future__ import annotations

from api.main import __version__


def test_health_returns_200_with_components(api):
    resp = api.client.get("/api/v1/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert data["version"] == __version__
    assert data["components"] == {"app": "ok", "database": "ok"}


def test_health_reports_database_error(api, monkeypatch):
    """A failed ping degrades the database component but the endpoint still answers."""
    monkeypatch.setattr(api.store, "ping", lambda: False)
    data = api.client.get("/api/v1/health").json()
    assert data["components"]["database"] == "error"


def test_health_no_auth_required(api):
    resp = api.client.get("/api/v1/health", headers={})
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
