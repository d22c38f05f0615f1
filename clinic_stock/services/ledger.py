"""
Append-only history of stock quantity changes.
"""
from typing import Iterator, Optional
import uuid

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from clinic_stock.logging_config import get_logger
from clinic_stock.models import LedgerEntry, LedgerEntryType

logger = get_logger("ledger")

HISTORY_BATCH_SIZE = 200


class Ledger:
    """Writes and reads ledger entries. Entries are never updated or deleted."""

    def __init__(self, db: Session):
        self.db = db

    def append(
        self,
        item_id: uuid.UUID,
        entry_type: LedgerEntryType,
        quantity: int,
        previous_quantity: int,
        new_quantity: int,
        changed_by: str,
        reason: Optional[str] = None,
        *,
        prescription_id: Optional[str] = None,
        order_id: Optional[uuid.UUID] = None,
        issuance_id: Optional[uuid.UUID] = None
    ) -> LedgerEntry:
        entry = LedgerEntry(
            stock_item_id=item_id,
            sequence=self._next_sequence(item_id),
            entry_type=entry_type,
            quantity=quantity,
            previous_quantity=previous_quantity,
            new_quantity=new_quantity,
            changed_by=changed_by,
            reason=reason,
            prescription_id=prescription_id,
            order_id=order_id,
            issuance_id=issuance_id
        )
        self.db.add(entry)
        self.db.flush()
        logger.debug(f"Ledger {entry_type.value} item={item_id} qty={quantity} {previous_quantity}->{new_quantity}")
        return entry

    def history_for(self, item_id: uuid.UUID) -> Iterator[LedgerEntry]:
        """Entries for one item in the order they were written, fetched in batches as consumed."""
        result = self.db.scalars(
            select(LedgerEntry)
            .where(LedgerEntry.stock_item_id == item_id)
            .order_by(LedgerEntry.sequence.asc())
            .execution_options(yield_per=HISTORY_BATCH_SIZE)
        )
        yield from result

    def recent(self, limit: int = 10, entry_type: Optional[LedgerEntryType] = None) -> list[LedgerEntry]:
        query = select(LedgerEntry)
        if entry_type is not None:
            query = query.where(LedgerEntry.entry_type == entry_type)
        query = query.order_by(
            LedgerEntry.occurred_at.desc(),
            LedgerEntry.sequence.desc(),
            LedgerEntry.id
        ).limit(limit)
        return list(self.db.scalars(query).all())

    def _next_sequence(self, item_id: uuid.UUID) -> int:
        """
        Callers append after the guarded quantity UPDATE on the same item, so
        the item row is already write-locked and no two writers share a number.
        """
        current = self.db.scalar(
            select(func.max(LedgerEntry.sequence)).where(LedgerEntry.stock_item_id == item_id)
        )
        return (current or 0) + 1
