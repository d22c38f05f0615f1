"""
Issuance API endpoints (read only; issuing happens on stock and order routes).
"""
from typing import Optional
import uuid
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from clinic_stock.core.database import get_db
from clinic_stock.core.security import ActingUser, get_acting_user
from clinic_stock.models import IssuanceStatus
from clinic_stock.schemas.issuance import IssuanceResponse, IssuanceListResponse
from clinic_stock.services import IssuanceService

router = APIRouter(prefix="/issuances", tags=["Issuances"])


@router.get("", response_model=IssuanceListResponse)
def list_issuances(
    stock_item_id: Optional[uuid.UUID] = Query(None, alias="stockItemId"),
    order_id: Optional[uuid.UUID] = Query(None, alias="orderId"),
    status_filter: Optional[IssuanceStatus] = Query(None, alias="status"),
    limit: int = Query(100, ge=1, le=500),
    current_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    """Issuances, newest first."""
    items = IssuanceService(db).list_issuances(stock_item_id, order_id, status_filter, limit)
    return IssuanceListResponse(items=items, total=len(items))


@router.get("/{issuance_id}", response_model=IssuanceResponse)
def get_issuance(
    issuance_id: uuid.UUID,
    current_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    return IssuanceService(db).get_issuance(issuance_id)
