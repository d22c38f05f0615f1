"""Tests for the append-only ledger."""
import types
import uuid
from freezegun import freeze_time

from clinic_stock.models import LedgerEntryType
from clinic_stock.services import Ledger


class TestLedger:

    def test_append_records_all_fields(self, test_db, glass_item):
        order_id = uuid.uuid4()
        entry = Ledger(test_db).append(
            glass_item.id,
            LedgerEntryType.ISSUED,
            5,
            100,
            95,
            "staff-1",
            "Issued 5 units for order INV-1",
            order_id=order_id
        )
        test_db.commit()

        assert entry.id is not None
        assert entry.quantity == 5
        assert entry.previous_quantity == 100
        assert entry.new_quantity == 95
        assert entry.order_id == order_id
        assert entry.prescription_id is None

    def test_history_is_lazy_and_ordered(self, test_db, glass_item, medicine_item):
        ledger = Ledger(test_db)
        with freeze_time("2025-03-01 09:00:00"):
            ledger.append(glass_item.id, LedgerEntryType.ISSUED, 10, 100, 90, "a")
            ledger.append(medicine_item.id, LedgerEntryType.ISSUED, 1, 500, 499, "a")
            ledger.append(glass_item.id, LedgerEntryType.RESTOCKED, 5, 90, 95, "b")
            ledger.append(glass_item.id, LedgerEntryType.RETURNED, 10, 95, 105, "c")
        test_db.commit()

        history = ledger.history_for(glass_item.id)
        assert isinstance(history, types.GeneratorType)

        entries = list(history)
        assert [e.entry_type for e in entries] == [
            LedgerEntryType.ISSUED,
            LedgerEntryType.RESTOCKED,
            LedgerEntryType.RETURNED,
        ]
        assert all(e.stock_item_id == glass_item.id for e in entries)
        assert [e.sequence for e in entries] == [1, 2, 3]

    def test_history_for_item_without_entries(self, test_db, glass_item):
        assert list(Ledger(test_db).history_for(glass_item.id)) == []

    def test_recent_newest_first(self, test_db, glass_item):
        ledger = Ledger(test_db)
        with freeze_time("2025-03-01 09:00:00"):
            for i in range(5):
                ledger.append(glass_item.id, LedgerEntryType.ISSUED, 1, 100 - i, 99 - i, "a")
        test_db.commit()

        recent = ledger.recent(limit=3)
        assert [e.new_quantity for e in recent] == [95, 96, 97]

    def test_recent_filtered_by_type(self, test_db, glass_item):
        ledger = Ledger(test_db)
        ledger.append(glass_item.id, LedgerEntryType.ISSUED, 1, 100, 99, "a")
        ledger.append(glass_item.id, LedgerEntryType.ADJUSTED, 0, 99, 99, "a")
        test_db.commit()

        recent = ledger.recent(entry_type=LedgerEntryType.ADJUSTED)
        assert len(recent) == 1
        assert recent[0].quantity == 0

    def test_sequence_counts_per_item(self, test_db, glass_item, medicine_item):
        ledger = Ledger(test_db)
        first = ledger.append(glass_item.id, LedgerEntryType.ISSUED, 1, 100, 99, "a")
        other = ledger.append(medicine_item.id, LedgerEntryType.ISSUED, 1, 500, 499, "a")
        second = ledger.append(glass_item.id, LedgerEntryType.ISSUED, 1, 99, 98, "a")

        assert (first.sequence, second.sequence) == (1, 2)
        assert other.sequence == 1
