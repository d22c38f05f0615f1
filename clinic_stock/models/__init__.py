"""
SQLAlchemy models for the clinic stock ledger.
Import all models here to ensure they're registered with SQLAlchemy.
"""
from clinic_stock.models.stock import StockItem, StockKind
from clinic_stock.models.ledger import LedgerEntry, LedgerEntryType
from clinic_stock.models.issuance import Issuance, IssuanceStatus
from clinic_stock.models.order import (
    Order,
    OrderLine,
    OrderType,
    OrderStatus,
    PaymentMethod,
    CLOSED_ORDER_STATUSES
)

__all__ = [
    "StockItem",
    "StockKind",
    "LedgerEntry",
    "LedgerEntryType",
    "Issuance",
    "IssuanceStatus",
    "Order",
    "OrderLine",
    "OrderType",
    "OrderStatus",
    "PaymentMethod",
    "CLOSED_ORDER_STATUSES",
]
