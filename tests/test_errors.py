"""Tests for error normalization."""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError, OperationalError

from app.config import get_settings
from app.main import app
from app.services.product_service import ProductService


@pytest.fixture
def lenient_client(client):
    """Client that returns 500 responses instead of re-raising."""
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


def test_integrity_error_is_400(client, monkeypatch):
    """Test store constraint violations hide the store message."""
    def fail(self, product_data):
        raise IntegrityError("INSERT INTO products", {}, Exception("CHECK constraint failed: secret"))

    monkeypatch.setattr(ProductService, "create", fail)

    response = client.post("/products", json={"name": "Ok", "price": 1, "stock": 1})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Database validation error"
    assert "secret" not in response.text
    assert "details" not in body


def test_store_error_is_500(client, monkeypatch):
    """Test other store failures return a generic 500."""
    def fail(self, options):
        raise OperationalError("SELECT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(ProductService, "get_all", fail)

    response = client.get("/products")

    assert response.status_code == 500
    assert response.json() == {
        "error": "Database error",
        "message": "An error occurred while processing the request",
    }


def test_unhandled_error_is_500(lenient_client, monkeypatch):
    """Test unknown failures keep their message but no stack outside development."""
    def fail(self):
        raise RuntimeError("boom")

    monkeypatch.setattr(ProductService, "compute_metrics", fail)

    response = lenient_client.get("/products/metrics")

    assert response.status_code == 500
    body = response.json()
    assert body["message"] == "boom"
    assert "stack" not in body


def test_unhandled_error_stack_in_development(lenient_client, monkeypatch):
    """Test development mode appends the stack trace."""
    def fail(self):
        raise RuntimeError("boom")

    monkeypatch.setattr(ProductService, "compute_metrics", fail)
    monkeypatch.setattr(get_settings(), "ENVIRONMENT", "development")

    body = lenient_client.get("/products/metrics").json()

    assert "RuntimeError: boom" in body["stack"]


def test_unknown_route(client):
    """Test unmatched routes list the known ones."""
    response = client.get("/nope")

    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "Route not found"
    assert "GET /nope" in body["message"]
    assert "GET /products" in body["availableRoutes"]
    assert "GET /products/metrics" in body["availableRoutes"]
    assert "DELETE /products/{product_id}" in body["availableRoutes"]


def test_method_not_allowed(client):
    """Test other HTTP errors keep their status inside the envelope."""
    response = client.patch("/products/1", json={})

    assert response.status_code == 405
    assert response.json()["error"] == "Method Not Allowed"


def test_not_found_envelope(client):
    """Test missing products use the shared envelope."""
    body = client.delete("/products/77").json()

    assert body == {"error": "Product not found", "message": "Product with ID 77 not found"}
