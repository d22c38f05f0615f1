"""
Issuance model linking a stock deduction to an order or prescription.
"""
from typing import Optional
import enum
import uuid
from datetime import datetime
from sqlalchemy import String, Integer, ForeignKey, Index, Text, DateTime, CheckConstraint, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinic_stock.core.database import Base
from clinic_stock.utils import utcnow


class IssuanceStatus(str, enum.Enum):
    """Issuance lifecycle. Only ISSUED can transition."""
    ISSUED = "issued"
    RETURNED = "returned"
    DAMAGED = "damaged"


class Issuance(Base):
    """Quantity handed out of a stock item, reversible via return."""

    __tablename__ = "issuances"

    issuance_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)

    # Foreign keys
    stock_item_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("stock_items.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    order_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("orders.id", ondelete="RESTRICT"),
        nullable=True,
        index=True
    )

    order_number: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    prescription_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    issued_to: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)  # customer or patient

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    issued_by: Mapped[str] = mapped_column(String(100), nullable=False)
    returned_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    status: Mapped[IssuanceStatus] = mapped_column(
        Enum(IssuanceStatus, name="issuance_status", values_callable=lambda e: [m.value for m in e]),
        default=IssuanceStatus.ISSUED,
        nullable=False,
        index=True
    )
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    returned_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    stock_item = relationship("StockItem", back_populates="issuances")
    order = relationship("Order", back_populates="issuances")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="quantity_positive"),
        Index("idx_issuances_issued_at", "issued_at"),
        Index("idx_issuances_item_status", "stock_item_id", "status"),
        Index("idx_issuances_order_status", "order_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Issuance(number={self.issuance_number}, qty={self.quantity}, status={self.status})>"
