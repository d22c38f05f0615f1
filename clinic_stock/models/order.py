"""
Glass order model. Orders are the documents stock gets issued against.
"""
from typing import Optional
import enum
import uuid
from decimal import Decimal
from sqlalchemy import String, Integer, Boolean, ForeignKey, Index, Text, CheckConstraint, DECIMAL, Enum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from clinic_stock.core.database import Base


class OrderType(str, enum.Enum):
    RETAIL = "retail"
    WHOLESALE = "wholesale"
    CONTRACT = "contract"


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    DELIVERED = "delivered"
    INSTALLED = "installed"
    CANCELLED = "cancelled"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    CREDIT = "credit"


# Orders in these states no longer accept stock
CLOSED_ORDER_STATUSES = frozenset({OrderStatus.CANCELLED, OrderStatus.DELIVERED, OrderStatus.INSTALLED})


def _enum_values(enum_cls):
    return [m.value for m in enum_cls]


class Order(Base):
    """Customer order for glass products."""

    __tablename__ = "orders"

    invoice_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)

    # Customer
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_phone: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    customer_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    order_type: Mapped[OrderType] = mapped_column(
        Enum(OrderType, name="order_type", values_callable=_enum_values),
        default=OrderType.RETAIL,
        nullable=False
    )
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus, name="order_status", values_callable=_enum_values),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True
    )

    # Money
    total_amount: Mapped[Decimal] = mapped_column(DECIMAL(12, 2), default=Decimal("0"), nullable=False)
    amount_paid: Mapped[Decimal] = mapped_column(DECIMAL(12, 2), default=Decimal("0"), nullable=False)
    balance_due: Mapped[Decimal] = mapped_column(DECIMAL(12, 2), default=Decimal("0"), nullable=False)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        Enum(PaymentMethod, name="payment_method", values_callable=_enum_values),
        default=PaymentMethod.CASH,
        nullable=False
    )

    # Delivery
    delivery_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    delivery_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    installation_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    issued_by: Mapped[str] = mapped_column(String(100), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    lines = relationship("OrderLine", back_populates="order", cascade="all, delete-orphan")
    issuances = relationship("Issuance", back_populates="order", passive_deletes="all")

    def __repr__(self) -> str:
        return f"<Order(invoice={self.invoice_number}, status={self.status})>"

    @property
    def accepts_issuance(self) -> bool:
        return self.status not in CLOSED_ORDER_STATUSES


class OrderLine(Base):
    """One stock item on an order."""

    __tablename__ = "order_lines"

    order_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    stock_item_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("stock_items.id", ondelete="RESTRICT"),
        nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(DECIMAL(10, 2), nullable=False)
    discount: Mapped[Decimal] = mapped_column(DECIMAL(5, 2), default=Decimal("0"), nullable=False)  # percent
    cut_to_size: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    order = relationship("Order", back_populates="lines")
    stock_item = relationship("StockItem")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="quantity_positive"),
        CheckConstraint("discount >= 0 AND discount <= 100", name="discount_percent"),
        Index("idx_order_lines_stock_item", "stock_item_id"),
    )

    @property
    def line_total(self) -> Decimal:
        gross = Decimal(self.quantity) * self.unit_price
        return gross - gross * (self.discount or Decimal("0")) / Decimal(100)
