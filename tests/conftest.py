import os

# Keep the application's own engine off disk; must run before app imports
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.database import Base, get_db
from app.models.product import Product


@pytest.fixture(scope="session")
def sqlite_engine():
    """One in-memory SQLite database shared by every connection."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture(scope="session")
def session_factory(sqlite_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=sqlite_engine)


@pytest.fixture
def products_table(sqlite_engine):
    """Empty products table for the duration of one test."""
    Base.metadata.create_all(bind=sqlite_engine)
    yield
    Base.metadata.drop_all(bind=sqlite_engine)


@pytest.fixture
def client(products_table, session_factory):
    """API client whose requests use the test database."""
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def db_session(products_table, session_factory):
    """Session for talking to the test database directly."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_product(client):
    """Create a product through the API and return its JSON."""
    def _make(name="Product", price=10.0, stock=10):
        response = client.post(
            "/products",
            json={"name": name, "price": price, "stock": stock}
        )
        assert response.status_code == 201, response.text
        return response.json()
    return _make


@pytest.fixture
def add_products(db_session):
    """Insert rows directly, bypassing the API."""
    def _add(*rows):
        products = [Product(name=name, price=price, stock=stock) for name, price, stock in rows]
        db_session.add_all(products)
        db_session.commit()
        for product in products:
            db_session.refresh(product)
        return products
    return _add
