"""Shared test fixtures for all tests."""
import os
import tempfile

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "clinic_stock_test_logs"))

import pytest
from datetime import date, timedelta
from decimal import Decimal
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from clinic_stock.core.database import Base, build_engine, get_db
from clinic_stock.core.security import create_access_token
from clinic_stock.models import StockItem, StockKind, Order, OrderStatus
from clinic_stock.main import app


@pytest.fixture(scope="function")
def test_db():
    """Create a fresh in-memory SQLite database for each test."""
    engine = build_engine("sqlite:///:memory:")
    TestingSessionLocal = sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)

    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def client(test_db):
    """Create a test client with dependency override."""
    def override_get_db():
        try:
            yield test_db
            test_db.commit()
        except Exception:
            test_db.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_item(test_db):
    """Factory for stock items with sensible defaults."""
    counter = {"n": 0}

    def _make(**overrides) -> StockItem:
        counter["n"] += 1
        fields = {
            "kind": StockKind.GLASS,
            "product_name": f"Test Glass {counter['n']}",
            "category": "Clear",
            "batch_number": f"TEST-{counter['n']:03d}",
            "supplier": "Test Supplier",
            "current_quantity": 100,
            "original_quantity": 100,
            "unit_price": Decimal("10.00"),
        }
        fields.update(overrides)
        if "original_quantity" not in overrides:
            fields["original_quantity"] = fields["current_quantity"]
        item = StockItem(**fields)
        test_db.add(item)
        test_db.commit()
        return item

    return _make


@pytest.fixture
def glass_item(test_db):
    """A full batch of 6mm clear float glass sheets."""
    item = StockItem(
        kind=StockKind.GLASS,
        product_name="Clear Float Glass 6mm",
        category="Clear",
        batch_number="GL-2025-001",
        supplier="Pilkington",
        warehouse_location="Rack A3",
        current_quantity=100,
        original_quantity=100,
        unit_price=Decimal("45.00"),
        selling_price=Decimal("60.00"),
        thickness_mm=6.0,
        width_cm=244.0,
        height_cm=183.0,
        color="clear"
    )
    test_db.add(item)
    test_db.commit()
    return item


@pytest.fixture
def medicine_item(test_db):
    """A medicine batch with a distant expiry date."""
    item = StockItem(
        kind=StockKind.MEDICINE,
        product_name="Amoxicillin 500mg",
        category="Antibiotic",
        batch_number="MED-2025-001",
        supplier="Medipharm",
        current_quantity=500,
        original_quantity=500,
        unit_price=Decimal("0.50"),
        expiry_date=date.today() + timedelta(days=180),
        manufacturing_date=date.today() - timedelta(days=30)
    )
    test_db.add(item)
    test_db.commit()
    return item


@pytest.fixture
def sample_order(test_db):
    """A pending retail order."""
    order = Order(
        invoice_number="INV-20250101-0001",
        customer_name="Jane Mwangi",
        customer_phone="+254700000001",
        status=OrderStatus.PENDING,
        total_amount=Decimal("600.00"),
        amount_paid=Decimal("0.00"),
        balance_due=Decimal("600.00"),
        issued_by="cashier-1"
    )
    test_db.add(order)
    test_db.commit()
    return order


@pytest.fixture
def auth_headers():
    """Bearer token for a staff user."""
    token = create_access_token("staff-1", role="staff")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def manager_headers():
    """Bearer token for a manager."""
    token = create_access_token("manager-1", role="manager")
    return {"Authorization": f"Bearer {token}"}
