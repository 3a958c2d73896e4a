"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Settings are read at import time: point the app at SQLite and switch off
# startup seeding and rate limits before anything imports it.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_ON_STARTUP"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["PAGARME_WEBHOOK_SECRET"] = ""

import asyncio
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rest_api.main import app
from shared.infrastructure.db import get_db
from rest_api.models import AdminUser, Base, Category, Establishment, Product
from rest_api.services.payments import pagarme_breaker, stripe_breaker
from shared.security.password import hash_password


# SQLite in-memory database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    Uses SQLite in-memory for isolation.
    """
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """
    Create a test client with database session override.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_breakers():
    """Payment breakers are module-level; start every test closed."""
    loop = asyncio.new_event_loop()
    try:
        for breaker in (stripe_breaker, pagarme_breaker):
            loop.run_until_complete(breaker.reset())
    finally:
        loop.close()
    yield


# =============================================================================
# Catalog fixtures
# =============================================================================


@pytest.fixture
def seed_establishments(db_session):
    """A supermarket and a bakery."""
    market = Establishment(name="Test Market", type="supermarket", icon="shopping-cart")
    bakery = Establishment(name="Test Bakery", type="bakery", icon="bread-slice")
    db_session.add_all([market, bakery])
    db_session.commit()
    return market, bakery


@pytest.fixture
def seed_categories(db_session, seed_establishments):
    market, bakery = seed_establishments
    fruits = Category(name="Fruits", icon="apple", color="green", establishment_id=market.id)
    dairy = Category(name="Dairy", icon="cheese", color="blue", establishment_id=market.id)
    breads = Category(name="Breads", icon="bread-slice", color="yellow", establishment_id=bakery.id)
    db_session.add_all([fruits, dairy, breads])
    db_session.commit()
    return fruits, dairy, breads


@pytest.fixture
def seed_products(db_session, seed_establishments, seed_categories):
    """
    Market: apple (10.00, was 20.00), banana (4.50), milk (6.00, was 7.50).
    Bakery: baguette (8.00).
    """
    market, bakery = seed_establishments
    fruits, dairy, breads = seed_categories
    apple = Product(
        name="Apple", description="Red and crunchy", price=Decimal("10.00"),
        original_price=Decimal("20.00"), unit="kg", stock=10, is_featured=True,
        category_id=fruits.id, establishment_id=market.id,
    )
    banana = Product(
        name="Banana", description="Sweet yellow fruit", price=Decimal("4.50"), unit="kg",
        stock=10, category_id=fruits.id, establishment_id=market.id,
    )
    milk = Product(
        name="Milk", description="Whole milk 1L", price=Decimal("6.00"),
        original_price=Decimal("7.50"), unit="un", stock=10,
        category_id=dairy.id, establishment_id=market.id,
    )
    baguette = Product(
        name="Baguette", description="Crusty bread", price=Decimal("8.00"), unit="un",
        stock=10, category_id=breads.id, establishment_id=bakery.id,
    )
    db_session.add_all([apple, banana, milk, baguette])
    db_session.commit()
    return {"apple": apple, "banana": banana, "milk": milk, "baguette": baguette}


# =============================================================================
# Admin fixtures
# =============================================================================


@pytest.fixture
def seed_admin(db_session):
    admin = AdminUser(
        username="admin",
        email="admin@test.com",
        password=hash_password("testpass123"),
        is_active=True,
    )
    db_session.add(admin)
    db_session.commit()
    db_session.refresh(admin)
    return admin


@pytest.fixture
def auth_headers(client, seed_admin):
    """Get authentication headers for admin API calls."""
    response = client.post(
        "/api/admin/login",
        json={"username": "admin", "password": "testpass123"},
    )
    assert response.status_code == 200, f"Login failed: {response.json()}"
    token = response.json()["token"]
    return {"Authorization": f"Bearer {token}"}


# =============================================================================
# Payload builders
# =============================================================================


def order_body(establishment_id: int, items: list[dict], **overrides) -> dict:
    """Camel-case body for POST /api/orders."""
    order = {
        "customerName": "Maria Silva",
        "customerEmail": "maria@example.com",
        "customerPhone": "11999999999",
        "deliveryAddress": {
            "zipCode": "01310-100",
            "street": "Av. Paulista",
            "number": "1000",
            "complement": "Apto 12",
            "neighborhood": "Bela Vista",
            "city": "Sao Paulo",
            "state": "SP",
        },
        "paymentMethod": "instant_transfer",
        "totalAmount": "29.00",
        "deliveryFee": "5.00",
        "establishmentId": establishment_id,
    }
    order.update(overrides)
    return {"order": order, "items": items}


def remote_order_body(establishment_id: int, items: list[dict], **overrides) -> dict:
    """Snake-case body for POST /api/payment-provider/create-order."""
    body = {
        "customer": {"name": "Maria Silva", "email": "maria@example.com", "phone": "11999999999"},
        "address": {
            "street": "Av. Paulista",
            "number": "1000",
            "neighborhood": "Bela Vista",
            "city": "Sao Paulo",
            "state": "SP",
            "zipcode": "01310100",
        },
        "items": items,
        "payment_method": "pix",
        "establishment_id": establishment_id,
        "total_amount": sum(i["price"] * i["quantity"] for i in items) + 500,
    }
    body.update(overrides)
    return body
