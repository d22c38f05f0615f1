"""
Stock item model for glass and medicine batches.
"""
from typing import Optional
import enum
from datetime import date, timedelta
from decimal import Decimal
from sqlalchemy import String, Integer, Text, Date, Index, CheckConstraint, DECIMAL, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinic_stock.core.config import settings
from clinic_stock.core.database import Base


class StockKind(str, enum.Enum):
    """What a stock batch holds."""
    GLASS = "glass"
    MEDICINE = "medicine"


class StockItem(Base):
    """Quantity-tracked inventory batch."""

    __tablename__ = "stock_items"

    kind: Mapped[StockKind] = mapped_column(
        Enum(StockKind, name="stock_kind", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        index=True
    )

    # Identification
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)  # glass type or drug class
    batch_number: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    supplier: Mapped[str] = mapped_column(String(255), nullable=False)
    warehouse_location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Quantities
    current_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    original_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Pricing
    unit_price: Mapped[Decimal] = mapped_column(DECIMAL(10, 2), default=Decimal("0"), nullable=False)
    selling_price: Mapped[Optional[Decimal]] = mapped_column(DECIMAL(10, 2), nullable=True)

    # Glass sheet dimensions
    thickness_mm: Mapped[Optional[float]] = mapped_column(nullable=True)
    width_cm: Mapped[Optional[float]] = mapped_column(nullable=True)
    height_cm: Mapped[Optional[float]] = mapped_column(nullable=True)
    color: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Medicine dates
    expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    manufacturing_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Relationships
    ledger_entries = relationship(
        "LedgerEntry",
        back_populates="stock_item",
        order_by="LedgerEntry.sequence",
        passive_deletes="all"
    )
    issuances = relationship("Issuance", back_populates="stock_item", passive_deletes="all")

    __table_args__ = (
        CheckConstraint("current_quantity >= 0", name="current_quantity_non_negative"),
        CheckConstraint("original_quantity >= 0", name="original_quantity_non_negative"),
        CheckConstraint("current_quantity <= original_quantity", name="current_within_original"),
        CheckConstraint("unit_price >= 0", name="unit_price_non_negative"),
        Index("idx_stock_items_fifo", "created_at", "current_quantity"),
        Index("idx_stock_items_category", "kind", "category"),
    )

    def __repr__(self) -> str:
        return f"<StockItem(id={self.id}, batch={self.batch_number}, qty={self.current_quantity})>"

    @property
    def remaining_percentage(self) -> Optional[float]:
        """Share of the baseline still on hand; None when there is no baseline."""
        if not self.original_quantity:
            return None
        return round(self.current_quantity / self.original_quantity * 100, 2)

    @property
    def total_value(self) -> Decimal:
        return Decimal(self.current_quantity) * (self.unit_price or Decimal("0"))

    @property
    def total_area_m2(self) -> Optional[float]:
        """Sheet area on hand, dimensions converted from cm to m."""
        if self.width_cm is None or self.height_cm is None:
            return None
        return round((self.width_cm / 100) * (self.height_cm / 100) * self.current_quantity, 2)

    @property
    def is_low_stock(self) -> bool:
        if self.original_quantity <= 0:
            return False
        return self.current_quantity / self.original_quantity < settings.low_stock_ratio

    @property
    def expiry_status(self) -> Optional[str]:
        return self.expiry_status_on(date.today())

    def expiry_status_on(self, today: date) -> Optional[str]:
        """valid, expiring-soon or expired; None for items without an expiry date."""
        if self.expiry_date is None:
            return None
        if self.expiry_date < today:
            return "expired"
        if self.expiry_date <= today + timedelta(days=settings.expiry_warning_days):
            return "expiring-soon"
        return "valid"
