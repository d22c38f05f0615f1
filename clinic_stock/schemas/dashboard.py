"""
Pydantic schemas for Dashboard endpoints.
"""
from typing import Optional
from datetime import datetime
from decimal import Decimal

from clinic_stock.schemas.common import CamelModel
from clinic_stock.schemas.stock import StockItemResponse


class CategoryAreaResponse(CamelModel):
    """Glass area on hand for one glass type."""
    category: str
    item_count: int
    total_quantity: int
    total_area_m2: float


class StockStatsResponse(CamelModel):
    total_products: int
    total_units: int
    total_value: Decimal
    total_area_m2: float
    unique_suppliers: int
    low_stock_count: int
    out_of_stock_count: int
    average_unit_price: Decimal


class IssuanceStatsResponse(CamelModel):
    units_issued_this_month: int
    returned_this_month: int
    open_issuances: int


class DashboardStats(CamelModel):
    stock: StockStatsResponse
    issuances: IssuanceStatsResponse
    last_updated: datetime


class LowStockResponse(CamelModel):
    items: list[StockItemResponse]
    total: int
    threshold: float


class RecentActivity(CamelModel):
    """Recent ledger movement."""
    type: str  # ledger entry type
    title: str
    description: Optional[str] = None
    changed_by: str
    timestamp: datetime


class DashboardRecent(CamelModel):
    activities: list[RecentActivity]
    total: int


class HealthCheck(CamelModel):
    status: str
    version: str
    database: bool
    timestamp: datetime
