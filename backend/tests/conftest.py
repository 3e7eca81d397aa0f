"""
Pytest fixtures and configuration for InvenHub backend tests

This file provides shared fixtures that can be used across all test modules.
"""
import os
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from dotenv import load_dotenv

# Load environment variables for tests
load_dotenv()

from invenhub.core.auth import TokenUser, get_current_user
from invenhub.core.config import settings
from invenhub.domain.product import Product
from invenhub.domain.sale import Sale, SaleItem, ProductSnapshot


@pytest.fixture(scope="session")
def database_url():
    """
    Provides the database URL for integration tests

    Scope: session (created once per test session)
    """
    url = os.getenv("DATABASE_URL")
    if not url:
        pytest.skip("DATABASE_URL not configured")
    return url


@pytest.fixture
def auth_secret(monkeypatch):
    """Signing secret for tests that create or decode real tokens"""
    monkeypatch.setattr(settings, "AUTH_SECRET", "test-secret-key")
    return "test-secret-key"


@pytest.fixture
def product_row():
    """A products row as returned by RealDictCursor"""
    return {
        'id': 1,
        'name': 'Safari Adventure T-Shirt',
        'barcode': '123456789001',
        'category': 'Apparel',
        'price': Decimal('29.99'),
        'cost_price': Decimal('12.99'),
        'stock': 42,
        'image_url': None,
        'supplier_id': 1,
        'supplier_name': 'Jungle Threads Ltd',
        'reorder_level': 10,
        'auto_reorder': False,
        'target_stock_level': 0,
        'created_at': datetime(2025, 1, 10, 9, 0, tzinfo=timezone.utc),
        'updated_at': None,
    }


@pytest.fixture
def make_product(product_row):
    """Factory for Product models with overridable fields"""
    def _make(**overrides):
        return Product(**{**product_row, **overrides})
    return _make


@pytest.fixture
def make_sale():
    """
    Factory for Sale models

    items: list of (name, category, quantity, price_at_sale, cost_price)
    """
    def _make(
        sale_id=1,
        items=None,
        total_amount=None,
        payment_method='cash',
        channel='in-store',
        timestamp=None,
    ):
        items = items or [('Safari Adventure T-Shirt', 'Apparel', 2, '29.99', '12.99')]
        sale_items = [
            SaleItem(
                id=index + 1,
                product_id=index + 1,
                product_snapshot=ProductSnapshot(
                    name=name,
                    category=category,
                    price=Decimal(price),
                    barcode=f"12345678900{index + 1}",
                    cost_price=Decimal(cost),
                ),
                quantity=quantity,
                price_at_sale=Decimal(price),
            )
            for index, (name, category, quantity, price, cost) in enumerate(items)
        ]
        subtotal = sum((item.line_total for item in sale_items), Decimal('0'))
        total = Decimal(str(total_amount)) if total_amount is not None else subtotal
        return Sale(
            id=sale_id,
            items=sale_items,
            subtotal=subtotal,
            tax_amount=Decimal('0'),
            total_amount=total,
            payment_method=payment_method,
            channel=channel,
            employee_id='emp-1',
            timestamp=timestamp or datetime(2025, 3, 15, 12, 30, tzinfo=timezone.utc),
        )
    return _make


@pytest.fixture
def app():
    from invenhub.main import app as fastapi_app
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client_as(app):
    """
    Factory returning a TestClient authenticated with the given role

    The lifespan (and so the reorder scheduler) is not started.
    """
    from fastapi.testclient import TestClient

    def _client(role: str = "admin"):
        app.dependency_overrides[get_current_user] = lambda: TokenUser(
            id=1, email=f"{role}@example.com", name=f"{role.title()} User", role=role
        )
        return TestClient(app)

    return _client


@pytest.fixture
def anonymous_client(app):
    from fastapi.testclient import TestClient
    return TestClient(app)
