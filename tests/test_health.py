"""Tests for health and root endpoints."""

from unittest.mock import MagicMock

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from sleep_tracker import __version__
from sleep_tracker.database import get_db
from sleep_tracker.main import app


def test_health_check(client: TestClient):
    """Test basic health check."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "version": __version__}


def test_db_health_check(client: TestClient):
    """Test database health check."""
    response = client.get("/health/db")
    assert response.status_code == 200
    data = response.json()
    assert data["database"] == "connected"
    assert data["dialect"] == "sqlite"


def test_db_health_check_unreachable(client: TestClient):
    """An unreachable database reports 503 without leaking the driver error."""
    broken = MagicMock()
    broken.execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
    app.dependency_overrides[get_db] = lambda: broken

    response = client.get("/health/db")

    assert response.status_code == 503
    assert response.json() == {"status": "unhealthy", "database": "unreachable"}


def test_root(client: TestClient):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Sleep Tracker API"
    assert data["docs"] == "/docs"
