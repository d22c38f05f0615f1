"""Tests for database models and constraints."""
import pytest
from datetime import date, timedelta
from decimal import Decimal
from sqlalchemy.exc import IntegrityError

from clinic_stock.models import (
    StockItem,
    StockKind,
    LedgerEntry,
    LedgerEntryType,
    Order,
    OrderLine,
    OrderStatus
)


class TestStockItemModel:
    """Tests for StockItem model."""

    def test_create_stock_item(self, test_db):
        item = StockItem(
            kind=StockKind.GLASS,
            product_name="Tinted Glass 4mm",
            batch_number="TG-001",
            supplier="Guardian",
            current_quantity=10,
            original_quantity=10
        )
        test_db.add(item)
        test_db.commit()

        assert item.id is not None
        assert item.created_at is not None
        assert item.unit_price == Decimal("0")

    def test_unique_batch_number_constraint(self, test_db, glass_item):
        duplicate = StockItem(
            kind=StockKind.MEDICINE,
            product_name="Other",
            batch_number=glass_item.batch_number,
            supplier="Someone",
            current_quantity=1,
            original_quantity=1
        )
        test_db.add(duplicate)

        with pytest.raises(IntegrityError):
            test_db.commit()

    def test_current_cannot_exceed_original(self, test_db):
        item = StockItem(
            kind=StockKind.GLASS,
            product_name="Bad",
            batch_number="BAD-001",
            supplier="X",
            current_quantity=11,
            original_quantity=10
        )
        test_db.add(item)

        with pytest.raises(IntegrityError):
            test_db.commit()

    def test_negative_quantity_rejected(self, test_db):
        item = StockItem(
            kind=StockKind.GLASS,
            product_name="Bad",
            batch_number="BAD-002",
            supplier="X",
            current_quantity=-1,
            original_quantity=10
        )
        test_db.add(item)

        with pytest.raises(IntegrityError):
            test_db.commit()

    def test_total_area_converts_cm_to_m(self, glass_item):
        # 2.44m x 1.83m x 100 sheets
        assert glass_item.total_area_m2 == pytest.approx(446.52)

    def test_total_area_none_without_dimensions(self, medicine_item):
        assert medicine_item.total_area_m2 is None

    def test_total_value(self, glass_item):
        assert glass_item.total_value == Decimal("4500.00")

    def test_remaining_percentage(self, make_item):
        item = make_item(current_quantity=25, original_quantity=200)
        assert item.remaining_percentage == 12.5

    def test_remaining_percentage_without_baseline(self, make_item):
        item = make_item(current_quantity=0, original_quantity=0)
        assert item.remaining_percentage is None


class TestLowStockFlag:
    """Low stock is strictly below 20% of the baseline."""

    def test_exactly_twenty_percent_is_not_low(self, make_item):
        item = make_item(current_quantity=100, original_quantity=500)
        assert item.is_low_stock is False

    def test_just_below_twenty_percent_is_low(self, make_item):
        item = make_item(current_quantity=99, original_quantity=500)
        assert item.is_low_stock is True

    def test_zero_original_is_never_low(self, make_item):
        item = make_item(current_quantity=0, original_quantity=0)
        assert item.is_low_stock is False

    def test_empty_item_is_low(self, make_item):
        item = make_item(current_quantity=0, original_quantity=10)
        assert item.is_low_stock is True


class TestExpiryStatus:
    """Tests for medicine expiry classification."""

    def test_expired(self, medicine_item):
        today = medicine_item.expiry_date + timedelta(days=1)
        assert medicine_item.expiry_status_on(today) == "expired"

    def test_expiring_soon(self, medicine_item):
        today = medicine_item.expiry_date - timedelta(days=10)
        assert medicine_item.expiry_status_on(today) == "expiring-soon"

    def test_valid(self, medicine_item):
        today = medicine_item.expiry_date - timedelta(days=90)
        assert medicine_item.expiry_status_on(today) == "valid"

    def test_no_expiry_date(self, glass_item):
        assert glass_item.expiry_status is None
        assert glass_item.expiry_status_on(date.today()) is None


class TestLedgerEntryModel:
    """Tests for LedgerEntry model."""

    def test_negative_quantity_rejected(self, test_db, glass_item):
        entry = LedgerEntry(
            stock_item_id=glass_item.id,
            sequence=1,
            entry_type=LedgerEntryType.ISSUED,
            quantity=-5,
            previous_quantity=100,
            new_quantity=95,
            changed_by="tester"
        )
        test_db.add(entry)

        with pytest.raises(IntegrityError):
            test_db.commit()

    def test_entry_links_to_item(self, test_db, glass_item):
        entry = LedgerEntry(
            stock_item_id=glass_item.id,
            sequence=1,
            entry_type=LedgerEntryType.RESTOCKED,
            quantity=5,
            previous_quantity=100,
            new_quantity=105,
            changed_by="tester"
        )
        test_db.add(entry)
        test_db.commit()

        assert entry.occurred_at is not None
        assert entry.stock_item.batch_number == glass_item.batch_number

    def test_sequence_unique_per_item(self, test_db, glass_item):
        for _ in range(2):
            test_db.add(LedgerEntry(
                stock_item_id=glass_item.id,
                sequence=1,
                entry_type=LedgerEntryType.ISSUED,
                quantity=1,
                previous_quantity=100,
                new_quantity=99,
                changed_by="tester"
            ))

        with pytest.raises(IntegrityError):
            test_db.commit()


class TestOrderModel:
    """Tests for Order and OrderLine models."""

    def test_line_total_applies_discount(self, test_db, glass_item, sample_order):
        line = OrderLine(
            order_id=sample_order.id,
            stock_item_id=glass_item.id,
            quantity=4,
            unit_price=Decimal("60.00"),
            discount=Decimal("10")
        )
        test_db.add(line)
        test_db.commit()

        assert line.line_total == Decimal("216.00")

    @pytest.mark.parametrize("status,accepts", [
        (OrderStatus.PENDING, True),
        (OrderStatus.PROCESSING, True),
        (OrderStatus.COMPLETED, True),
        (OrderStatus.DELIVERED, False),
        (OrderStatus.INSTALLED, False),
        (OrderStatus.CANCELLED, False),
    ])
    def test_accepts_issuance(self, status, accepts):
        order = Order(status=status)
        assert order.accepts_issuance is accepts

    def test_unique_invoice_number(self, test_db, sample_order):
        duplicate = Order(
            invoice_number=sample_order.invoice_number,
            customer_name="Other",
            customer_phone="1",
            issued_by="x"
        )
        test_db.add(duplicate)

        with pytest.raises(IntegrityError):
            test_db.commit()
