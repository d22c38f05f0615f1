"""
Pydantic schemas for Order and OrderLine models.
"""
from typing import Optional
from datetime import datetime
from decimal import Decimal
import uuid
from pydantic import Field

from clinic_stock.models.order import OrderType, OrderStatus, PaymentMethod
from clinic_stock.schemas.common import CamelModel


class OrderLineCreate(CamelModel):
    stock_item_id: uuid.UUID
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0)
    discount: Decimal = Field(default=Decimal("0"), ge=0, le=100, description="Percent")
    cut_to_size: bool = False


class OrderLineResponse(OrderLineCreate):
    id: uuid.UUID
    line_total: Decimal


class OrderCreate(CamelModel):
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_phone: str = Field(..., min_length=1, max_length=50)
    customer_address: Optional[str] = None
    order_type: OrderType = OrderType.RETAIL
    payment_method: PaymentMethod = PaymentMethod.CASH
    amount_paid: Decimal = Field(default=Decimal("0"), ge=0)
    delivery_required: bool = False
    delivery_address: Optional[str] = None
    installation_required: bool = False
    notes: Optional[str] = None
    lines: list[OrderLineCreate] = Field(..., min_length=1)


class OrderUpdate(CamelModel):
    """Status, payment and delivery details. Invoice number and lines are fixed once created."""
    status: Optional[OrderStatus] = None
    amount_paid: Optional[Decimal] = Field(None, ge=0)
    payment_method: Optional[PaymentMethod] = None
    customer_name: Optional[str] = Field(None, min_length=1, max_length=255)
    customer_phone: Optional[str] = Field(None, min_length=1, max_length=50)
    customer_address: Optional[str] = None
    delivery_required: Optional[bool] = None
    delivery_address: Optional[str] = None
    installation_required: Optional[bool] = None
    notes: Optional[str] = None


class OrderResponse(CamelModel):
    id: uuid.UUID
    invoice_number: str
    customer_name: str
    customer_phone: str
    customer_address: Optional[str] = None
    order_type: OrderType
    status: OrderStatus
    total_amount: Decimal
    amount_paid: Decimal
    balance_due: Decimal
    payment_method: PaymentMethod
    delivery_required: bool
    delivery_address: Optional[str] = None
    installation_required: bool
    issued_by: str
    notes: Optional[str] = None
    lines: list[OrderLineResponse]
    created_at: datetime
    updated_at: datetime


class OrderListResponse(CamelModel):
    items: list[OrderResponse]
    total: int
