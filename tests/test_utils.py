"""Tests for document numbering and time helpers."""
from datetime import date, datetime, timezone

from clinic_stock.utils import daily_prefix, next_document_number, start_of_month


class TestDocumentNumbers:

    def test_first_number_of_day(self):
        prefix = daily_prefix("ISS", date(2025, 1, 15))
        assert prefix == "ISS-20250115-"
        assert next_document_number([], prefix) == "ISS-20250115-0001"

    def test_continues_after_highest(self):
        prefix = "INV-20250115-"
        existing = ["INV-20250115-0002", "INV-20250115-0009", "INV-20250114-0050"]
        assert next_document_number(existing, prefix) == "INV-20250115-0010"

    def test_ignores_malformed_numbers(self):
        prefix = "ISS-20250115-"
        assert next_document_number(["ISS-20250115-abcd"], prefix) == "ISS-20250115-0001"


class TestTimeHelpers:

    def test_start_of_month(self):
        now = datetime(2025, 2, 17, 13, 45, 12, 999, tzinfo=timezone.utc)
        assert start_of_month(now) == datetime(2025, 2, 1, tzinfo=timezone.utc)
