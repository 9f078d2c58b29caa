"""
Pytest configuration and fixtures for the API tests.

Everything runs against an in-memory SQLite database that is created and
dropped around each test. Requests share the test's session.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

import backoffice.models  # noqa: F401
from backoffice.core.database import Base, SessionLocal, engine
from backoffice.core.dependencies import get_db
from backoffice.core.security import create_access_token
from backoffice.main import app
from backoffice.models.expense import ExpenseCategoryType
from backoffice.services import (
    customer_service,
    expense_category_service,
    product_service,
    user_service,
    vendor_service,
)


API = "/api/v1"


@pytest.fixture(scope='function')
def db():
    """Fresh schema and session for every test"""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope='function')
def client(db):
    """Test client whose requests use the test session"""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(scope='function')
def admin(db):
    return user_service.create_user(db, email="admin@example.com", password="secret123", name="Admin")


@pytest.fixture(scope='function')
def auth_headers(admin):
    """Bearer headers for the admin user"""
    token = create_access_token({"sub": admin.email, "user_id": admin.id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope='function')
def vendor(db):
    return vendor_service.create_vendor(db, name="Acme Supplies", email="orders@acme.example.com", payment_terms_days=30)


@pytest.fixture(scope='function')
def make_product(db, vendor):
    """Factory for products supplied by the default vendor"""
    counter = {"n": 0}

    def _make(name=None, cost="4.50", stock=0, threshold=5, price="9.99", tax_rate="0"):
        counter["n"] += 1
        return product_service.create_product(
            db,
            name=name or f"Widget {counter['n']}",
            sku=f"SKU-{counter['n']:04d}",
            price=Decimal(price),
            tax_rate=Decimal(tax_rate),
            cost_price=Decimal(cost),
            stock_quantity=stock,
            low_stock_threshold=threshold,
            vendor_id=vendor.id,
        )

    return _make


@pytest.fixture(scope='function')
def category(db):
    return expense_category_service.create_expense_category(
        db, "Utilities", ExpenseCategoryType.VARIABLE, "#3B82F6"
    )


@pytest.fixture(scope='function')
def fixed_category(db):
    return expense_category_service.create_expense_category(db, "Rent", ExpenseCategoryType.FIXED)


def create_po(client, headers, vendor_id, lines, **extra):
    """POST a purchase order and return the response JSON"""
    payload = {"vendor_id": vendor_id, "items": lines, **extra}
    resp = client.post(f"{API}/purchase-orders/", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


def receive_all(client, headers, po):
    lines = [{"item_id": i["id"], "quantity_received": i["quantity_ordered"]} for i in po["items"]]
    resp = client.post(f"{API}/purchase-orders/{po['id']}/receive", json={"items": lines}, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


@pytest.fixture(scope='function')
def customer(db):
    return customer_service.create_customer(
        db, name="Maria Anders", phone="5550100", email="maria@alfreds.example.com", city="Berlin"
    )


def stock_of(client, headers, product_id):
    return client.get(f"{API}/products/{product_id}", headers=headers).json()["stock_quantity"]


def points_of(client, headers, customer_id):
    return client.get(f"{API}/customers/{customer_id}", headers=headers).json()["loyalty_points"]
