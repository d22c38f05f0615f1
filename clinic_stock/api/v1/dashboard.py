"""
Dashboard API endpoints for stock levels and issuance metrics.
"""
from dataclasses import asdict
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from clinic_stock.core.config import settings
from clinic_stock.core.database import get_db
from clinic_stock.core.security import ActingUser, get_acting_user
from clinic_stock.models import StockKind
from clinic_stock.schemas.dashboard import (
    CategoryAreaResponse,
    StockStatsResponse,
    IssuanceStatsResponse,
    DashboardStats,
    LowStockResponse,
    RecentActivity,
    DashboardRecent
)
from clinic_stock.schemas.stock import StockItemListResponse
from clinic_stock.services import Ledger, ReportingService
from clinic_stock.utils import utcnow

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/low-stock", response_model=LowStockResponse)
def get_low_stock(
    limit: int = Query(settings.dashboard_list_limit, ge=1, le=200),
    current_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    """
    Items below the low-stock threshold of their batch size, emptiest first.

    Items with no batch size recorded are not reported.
    """
    items = ReportingService(db).low_stock(limit)
    return LowStockResponse(items=items, total=len(items), threshold=settings.low_stock_ratio)


@router.get("/glass-types", response_model=list[CategoryAreaResponse])
def get_glass_types(
    current_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    """Square metres of glass on hand per glass type, largest first."""
    return [
        CategoryAreaResponse(**asdict(entry))
        for entry in ReportingService(db).area_by_category(StockKind.GLASS)
    ]


@router.get("/stats", response_model=DashboardStats)
def get_dashboard_stats(
    current_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    reporting = ReportingService(db)
    now = utcnow()
    return DashboardStats(
        stock=StockStatsResponse(**asdict(reporting.stock_stats())),
        issuances=IssuanceStatsResponse(**asdict(reporting.issuance_stats(now))),
        last_updated=now
    )


@router.get("/expiring", response_model=StockItemListResponse)
def get_expiring_medicines(
    days: int = Query(settings.expiry_warning_days, ge=1, le=365),
    current_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    """Medicine batches in stock that expire within the next `days` days."""
    items = ReportingService(db).expiring_medicines(days)
    return StockItemListResponse(items=items, total=len(items))


@router.get("/recent", response_model=DashboardRecent)
def get_recent_activity(
    limit: int = Query(settings.dashboard_list_limit, ge=1, le=50),
    current_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    """Latest ledger movements across all stock."""
    activities = []
    for entry in Ledger(db).recent(limit):
        activities.append(RecentActivity(
            type=entry.entry_type.value,
            title=f"Stock {entry.entry_type.value}",
            description=f"{entry.stock_item.product_name} ({entry.stock_item.batch_number}): "
                        f"{entry.previous_quantity} -> {entry.new_quantity}",
            changed_by=entry.changed_by,
            timestamp=entry.occurred_at
        ))

    return DashboardRecent(activities=activities, total=len(activities))
