"""
Pydantic schemas for Issuance model and the order issue workflow.
"""
from typing import Optional
from datetime import datetime
import uuid
from pydantic import Field

from clinic_stock.models.issuance import IssuanceStatus
from clinic_stock.schemas.common import CamelModel


class IssuanceResponse(CamelModel):
    id: uuid.UUID
    issuance_number: str
    stock_item_id: uuid.UUID
    order_id: Optional[uuid.UUID] = None
    order_number: Optional[str] = None
    prescription_id: Optional[str] = None
    issued_to: Optional[str] = None
    quantity: int
    issued_by: str
    returned_by: Optional[str] = None
    status: IssuanceStatus
    issued_at: datetime
    returned_at: Optional[datetime] = None
    remarks: Optional[str] = None


class IssuanceListResponse(CamelModel):
    items: list[IssuanceResponse]
    total: int


class OrderIssueRequest(CamelModel):
    """Issue stock against an order."""
    stock_item_id: uuid.UUID
    quantity: int = Field(..., gt=0)
    issued_by: Optional[str] = Field(None, max_length=100, description="Defaults to the token subject")
    issued_to: Optional[str] = Field(None, max_length=255)
    remarks: Optional[str] = None


class OrderIssueResponse(CamelModel):
    success: bool = True
    issuance: IssuanceResponse
    remaining_stock: int


class IssuanceActionRequest(CamelModel):
    """Body for returning or writing off an issuance."""
    remarks: Optional[str] = None
    returned_by: Optional[str] = Field(None, max_length=100)


class IssuanceActionResponse(CamelModel):
    success: bool = True
    issuance: IssuanceResponse
