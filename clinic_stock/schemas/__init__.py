"""
Pydantic schemas for request/response validation.
"""
from clinic_stock.schemas.common import CamelModel
from clinic_stock.schemas.stock import (
    StockItemBase, StockItemCreate, StockItemUpdate, StockItemResponse,
    StockItemListResponse, StockIssueRequest, RestockRequest, AdjustRequest
)
from clinic_stock.schemas.ledger import LedgerEntryResponse, StockHistoryResponse
from clinic_stock.schemas.issuance import (
    IssuanceResponse, IssuanceListResponse, OrderIssueRequest, OrderIssueResponse,
    IssuanceActionRequest, IssuanceActionResponse
)
from clinic_stock.schemas.order import (
    OrderLineCreate, OrderLineResponse, OrderCreate, OrderUpdate, OrderResponse, OrderListResponse
)
from clinic_stock.schemas.dashboard import (
    CategoryAreaResponse, StockStatsResponse, IssuanceStatsResponse, DashboardStats,
    LowStockResponse, RecentActivity, DashboardRecent, HealthCheck
)

__all__ = [
    "CamelModel",
    "StockItemBase", "StockItemCreate", "StockItemUpdate", "StockItemResponse",
    "StockItemListResponse", "StockIssueRequest", "RestockRequest", "AdjustRequest",
    "LedgerEntryResponse", "StockHistoryResponse",
    "IssuanceResponse", "IssuanceListResponse", "OrderIssueRequest", "OrderIssueResponse",
    "IssuanceActionRequest", "IssuanceActionResponse",
    "OrderLineCreate", "OrderLineResponse", "OrderCreate", "OrderUpdate", "OrderResponse", "OrderListResponse",
    "CategoryAreaResponse", "StockStatsResponse", "IssuanceStatsResponse", "DashboardStats",
    "LowStockResponse", "RecentActivity", "DashboardRecent", "HealthCheck",
]
