"""
Pydantic schemas for StockItem model.
"""
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
import uuid
from pydantic import Field, model_validator

from clinic_stock.models.stock import StockKind
from clinic_stock.schemas.common import CamelModel


class StockItemBase(CamelModel):
    """Descriptive stock item fields."""
    kind: StockKind
    product_name: str = Field(..., min_length=1, max_length=255)
    category: Optional[str] = Field(None, max_length=100)
    batch_number: str = Field(..., min_length=1, max_length=100)
    supplier: str = Field(..., min_length=1, max_length=255)
    warehouse_location: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    unit_price: Decimal = Field(default=Decimal("0"), ge=0)
    selling_price: Optional[Decimal] = Field(None, ge=0)

    # Glass
    thickness_mm: Optional[float] = Field(None, gt=0)
    width_cm: Optional[float] = Field(None, gt=0)
    height_cm: Optional[float] = Field(None, gt=0)
    color: Optional[str] = Field(None, max_length=50)

    # Medicine
    expiry_date: Optional[date] = None
    manufacturing_date: Optional[date] = None


class StockItemCreate(StockItemBase):
    """Schema for receiving a new stock batch."""
    current_quantity: int = Field(..., ge=0)
    original_quantity: Optional[int] = Field(None, ge=0, description="Defaults to current quantity")

    @model_validator(mode="after")
    def check_quantities(self):
        if self.original_quantity is None:
            self.original_quantity = self.current_quantity
        if self.current_quantity > self.original_quantity:
            raise ValueError("current quantity cannot exceed original quantity")
        return self


class StockItemUpdate(CamelModel):
    """Descriptive fields only; quantities change through issue, restock and adjust."""
    product_name: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[str] = Field(None, max_length=100)
    batch_number: Optional[str] = Field(None, min_length=1, max_length=100)
    supplier: Optional[str] = Field(None, min_length=1, max_length=255)
    warehouse_location: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    unit_price: Optional[Decimal] = Field(None, ge=0)
    selling_price: Optional[Decimal] = Field(None, ge=0)
    thickness_mm: Optional[float] = Field(None, gt=0)
    width_cm: Optional[float] = Field(None, gt=0)
    height_cm: Optional[float] = Field(None, gt=0)
    color: Optional[str] = Field(None, max_length=50)
    expiry_date: Optional[date] = None
    manufacturing_date: Optional[date] = None


class StockItemResponse(StockItemBase):
    """Schema for stock item response."""
    id: uuid.UUID
    current_quantity: int
    original_quantity: int
    remaining_percentage: Optional[float] = None
    total_value: Decimal
    total_area_m2: Optional[float] = None
    is_low_stock: bool
    expiry_status: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class StockItemListResponse(CamelModel):
    items: list[StockItemResponse]
    total: int


class StockIssueRequest(CamelModel):
    """Direct issue from a stock item, e.g. dispensing against a prescription."""
    quantity: int = Field(..., gt=0)
    issued_by: Optional[str] = Field(None, max_length=100, description="Defaults to the token subject")
    prescription_id: Optional[str] = Field(None, max_length=100)
    issued_to: Optional[str] = Field(None, max_length=255)
    remarks: Optional[str] = None


class RestockRequest(CamelModel):
    quantity: int = Field(..., gt=0)
    reason: Optional[str] = None


class AdjustRequest(CamelModel):
    """Counted quantity from a stock take."""
    new_quantity: int = Field(..., ge=0)
    reason: Optional[str] = None
