"""Tests for health check endpoints."""
from datetime import datetime


def test_health_check(client):
    """Test basic health check."""
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "OK"
    assert data["message"]
    assert datetime.fromisoformat(data["timestamp"])


def test_readiness_check(client):
    """Test readiness reports the database."""
    response = client.get("/health/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["database"] is True


def test_root_endpoint(client):
    """Test root endpoint returns API info."""
    response = client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert "name" in data
    assert "version" in data
    assert "docs" in data
