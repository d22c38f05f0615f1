"""API v1 Router."""
from fastapi import APIRouter

from clinic_stock.api.v1 import stock, orders, issuances, dashboard

api_router = APIRouter(prefix="/api/v1")

# Include all route modules
api_router.include_router(stock.router)
api_router.include_router(orders.router)
api_router.include_router(issuances.router)
api_router.include_router(dashboard.router)

__all__ = ["api_router"]
