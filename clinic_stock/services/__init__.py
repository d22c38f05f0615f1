"""
Domain services. Each takes a Session and only flushes; the session owner commits.
"""
from clinic_stock.services.stock_repository import StockRepository, StockFilter, StockSort
from clinic_stock.services.ledger import Ledger
from clinic_stock.services.issuance_service import IssuanceService
from clinic_stock.services.reporting_service import ReportingService
from clinic_stock.services.order_service import OrderService

__all__ = [
    "StockRepository",
    "StockFilter",
    "StockSort",
    "Ledger",
    "IssuanceService",
    "ReportingService",
    "OrderService",
]
