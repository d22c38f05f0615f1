"""
Ledger entry model: the append-only audit trail of stock quantity changes.
"""
from typing import Optional
import enum
import uuid
from datetime import datetime
from sqlalchemy import String, Integer, ForeignKey, Index, Text, DateTime, CheckConstraint, Enum, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinic_stock.core.database import Base
from clinic_stock.utils import utcnow


class LedgerEntryType(str, enum.Enum):
    """Why a quantity changed."""
    ISSUED = "issued"
    RESTOCKED = "restocked"
    RETURNED = "returned"
    ADJUSTED = "adjusted"


class LedgerEntry(Base):
    """One immutable quantity change of a stock item."""

    __tablename__ = "stock_ledger_entries"

    stock_item_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("stock_items.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    # Position in the item's history, 1-based; assigned while the item row is held by the quantity update
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)

    entry_type: Mapped[LedgerEntryType] = mapped_column(
        Enum(LedgerEntryType, name="ledger_entry_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)  # magnitude, never signed
    previous_quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    new_quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    changed_by: Mapped[str] = mapped_column(String(100), nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Optional references to the document that caused the change
    prescription_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    order_id: Mapped[Optional[uuid.UUID]] = mapped_column(nullable=True)
    issuance_id: Mapped[Optional[uuid.UUID]] = mapped_column(nullable=True)

    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False
    )

    # Relationships
    stock_item = relationship("StockItem", back_populates="ledger_entries")

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="quantity_non_negative"),
        CheckConstraint("sequence > 0", name="sequence_positive"),
        UniqueConstraint("stock_item_id", "sequence"),
        Index("idx_ledger_item_occurred", "stock_item_id", "occurred_at"),
        Index("idx_ledger_entry_type", "entry_type"),
    )

    def __repr__(self) -> str:
        return (
            f"<LedgerEntry(item={self.stock_item_id}, type={self.entry_type}, "
            f"qty={self.quantity}, {self.previous_quantity}->{self.new_quantity})>"
        )
