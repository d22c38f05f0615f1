"""
Stock API endpoints: stock items, quantity changes and ledger history.
"""
from typing import Optional
import uuid
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from clinic_stock.core.config import settings
from clinic_stock.core.database import get_db
from clinic_stock.core.security import ActingUser, get_acting_user, require_roles
from clinic_stock.models import StockItem, StockKind
from clinic_stock.schemas.stock import (
    StockItemCreate,
    StockItemUpdate,
    StockItemResponse,
    StockItemListResponse,
    StockIssueRequest,
    RestockRequest,
    AdjustRequest
)
from clinic_stock.schemas.issuance import IssuanceResponse
from clinic_stock.schemas.ledger import StockHistoryResponse
from clinic_stock.services import (
    StockRepository,
    StockFilter,
    StockSort,
    Ledger,
    IssuanceService,
    ReportingService
)

router = APIRouter(prefix="/stock", tags=["Stock"])


@router.get("", response_model=StockItemListResponse)
def list_stock(
    q: Optional[str] = Query(None, description="Search name, batch, category, supplier"),
    kind: Optional[StockKind] = None,
    category: Optional[str] = None,
    supplier: Optional[str] = None,
    min_quantity: Optional[int] = Query(None, ge=0),
    max_quantity: Optional[int] = Query(None, ge=0),
    sort_by: StockSort = StockSort.FIFO,
    limit: int = Query(100, ge=1, le=500),
    current_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    """
    List stock items with filtering.

    - **q**: Free-text search
    - **kind**: glass or medicine
    - **sort_by**: fifo (oldest batch first), quantity, name or batch
    """
    filters = StockFilter(
        query=q,
        kind=kind,
        category=category,
        supplier=supplier,
        min_quantity=min_quantity,
        max_quantity=max_quantity
    )
    items = StockRepository(db).list(filters, sort_by, limit)
    return StockItemListResponse(items=items, total=len(items))


@router.get("/search", response_model=StockItemListResponse)
def search_stock(
    q: Optional[str] = Query(None),
    kind: Optional[StockKind] = None,
    category: Optional[str] = None,
    sort_by: StockSort = StockSort.FIFO,
    current_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    """In-stock items only, oldest batch first, capped at the configured result limit."""
    items = ReportingService(db).search(
        StockFilter(query=q, kind=kind, category=category),
        sort_by,
        settings.search_result_limit
    )
    return StockItemListResponse(items=items, total=len(items))


@router.post("", response_model=StockItemResponse, status_code=status.HTTP_201_CREATED)
def create_stock_item(
    item_data: StockItemCreate,
    current_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    """
    Receive a new stock batch.

    - **batchNumber**: Unique across all stock
    - **currentQuantity**: Units on hand
    - **originalQuantity**: Batch size; defaults to currentQuantity
    """
    item = StockRepository(db).add(StockItem(**item_data.model_dump()))
    db.commit()
    return item


@router.get("/{item_id}", response_model=StockItemResponse)
def get_stock_item(
    item_id: uuid.UUID,
    current_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    return StockRepository(db).get(item_id)


@router.patch("/{item_id}", response_model=StockItemResponse)
def update_stock_item(
    item_id: uuid.UUID,
    item_data: StockItemUpdate,
    current_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    """Update descriptive fields. Quantities change only through issue, restock and adjust."""
    repo = StockRepository(db)
    item = repo.get(item_id)

    update_data = item_data.model_dump(exclude_unset=True)
    if "batch_number" in update_data and update_data["batch_number"] != item.batch_number:
        repo.ensure_batch_available(update_data["batch_number"], exclude_id=item_id)

    for field, value in update_data.items():
        setattr(item, field, value)

    db.commit()
    db.refresh(item)
    return item


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_stock_item(
    item_id: uuid.UUID,
    current_user: ActingUser = Depends(require_roles("manager")),
    db: Session = Depends(get_db)
):
    """Delete a stock item that has no ledger history, issuances or order lines."""
    StockRepository(db).delete(item_id)
    db.commit()


@router.post("/{item_id}/issue", response_model=IssuanceResponse, status_code=status.HTTP_201_CREATED)
def issue_stock(
    item_id: uuid.UUID,
    issue_data: StockIssueRequest,
    current_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    """
    Issue units directly from a stock item, e.g. dispensing against a prescription.

    Fails with 409 when the quantity exceeds what is on hand.
    """
    issuance = IssuanceService(db).issue(
        item_id,
        issue_data.quantity,
        issue_data.issued_by or current_user.user_id,
        prescription_id=issue_data.prescription_id,
        issued_to=issue_data.issued_to,
        remarks=issue_data.remarks
    )
    db.commit()
    return issuance


@router.post("/{item_id}/restock", response_model=StockItemResponse)
def restock_item(
    item_id: uuid.UUID,
    restock_data: RestockRequest,
    current_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    item = IssuanceService(db).restock(
        item_id,
        restock_data.quantity,
        current_user.user_id,
        restock_data.reason
    )
    db.commit()
    return item


@router.post("/{item_id}/adjust", response_model=StockItemResponse)
def adjust_item(
    item_id: uuid.UUID,
    adjust_data: AdjustRequest,
    current_user: ActingUser = Depends(require_roles("manager")),
    db: Session = Depends(get_db)
):
    """Set the quantity to a counted value. The ledger records the difference."""
    item = IssuanceService(db).adjust(
        item_id,
        adjust_data.new_quantity,
        current_user.user_id,
        adjust_data.reason
    )
    db.commit()
    return item


@router.get("/{item_id}/history", response_model=StockHistoryResponse)
def get_stock_history(
    item_id: uuid.UUID,
    current_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    """Full ledger of one stock item, oldest entry first."""
    item = StockRepository(db).get(item_id)
    entries = list(Ledger(db).history_for(item_id))
    return StockHistoryResponse(item=item, entries=entries)
