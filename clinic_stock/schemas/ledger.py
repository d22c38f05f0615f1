"""
Pydantic schemas for LedgerEntry model.
"""
from typing import Optional
from datetime import datetime
import uuid

from clinic_stock.models.ledger import LedgerEntryType
from clinic_stock.schemas.common import CamelModel
from clinic_stock.schemas.stock import StockItemResponse


class LedgerEntryResponse(CamelModel):
    id: uuid.UUID
    stock_item_id: uuid.UUID
    sequence: int
    entry_type: LedgerEntryType
    quantity: int
    previous_quantity: int
    new_quantity: int
    changed_by: str
    reason: Optional[str] = None
    prescription_id: Optional[str] = None
    order_id: Optional[uuid.UUID] = None
    issuance_id: Optional[uuid.UUID] = None
    occurred_at: datetime


class StockHistoryResponse(CamelModel):
    """A stock item with its full ledger, oldest entry first."""
    item: StockItemResponse
    entries: list[LedgerEntryResponse]
