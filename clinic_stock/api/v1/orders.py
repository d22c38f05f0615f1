"""
Order API endpoints, including issuing stock against an order and
returning or writing off what was issued.
"""
from enum import Enum
from typing import Optional
import uuid
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from clinic_stock.core.database import get_db
from clinic_stock.core.security import ActingUser, get_acting_user
from clinic_stock.error_handlers import ValidationError
from clinic_stock.models import OrderStatus
from clinic_stock.schemas.issuance import (
    OrderIssueRequest,
    OrderIssueResponse,
    IssuanceActionRequest,
    IssuanceActionResponse
)
from clinic_stock.schemas.order import OrderCreate, OrderUpdate, OrderResponse, OrderListResponse
from clinic_stock.services import IssuanceService, OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])


class IssuanceAction(str, Enum):
    RETURN = "return"
    DAMAGED = "damaged"


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(
    order_data: OrderCreate,
    current_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    """
    Create an order. Totals and balance are computed from the lines.

    Stock is not deducted until it is issued against the order.
    """
    fields = order_data.model_dump(exclude={"lines"})
    order = OrderService(db).create(
        issued_by=current_user.user_id,
        lines=[line.model_dump() for line in order_data.lines],
        **fields
    )
    db.commit()
    return order


@router.get("", response_model=OrderListResponse)
def list_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    customer_phone: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    current_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    orders = OrderService(db).list(status_filter, customer_phone, skip, limit)
    return OrderListResponse(items=orders, total=len(orders))


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: uuid.UUID,
    current_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    return OrderService(db).get(order_id)


@router.patch("/{order_id}", response_model=OrderResponse)
def update_order(
    order_id: uuid.UUID,
    order_data: OrderUpdate,
    current_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    """
    Update status, payment or delivery details.

    Cancelling, delivering or installing an order closes it to further issues.
    """
    order = OrderService(db).update(order_id, **order_data.model_dump(exclude_unset=True))
    db.commit()
    return order


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order(
    order_id: uuid.UUID,
    current_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    OrderService(db).delete(order_id)
    db.commit()


@router.post("/{order_id}/issue", response_model=OrderIssueResponse, status_code=status.HTTP_201_CREATED)
def issue_for_order(
    order_id: uuid.UUID,
    issue_data: OrderIssueRequest,
    current_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    """
    Issue stock against an order.

    - **stockItemId**: Stock item to deduct from
    - **quantity**: Units to issue; must not exceed stock on hand
    - **issuedBy**: Defaults to the authenticated user
    """
    service = IssuanceService(db)
    issuance = service.issue(
        issue_data.stock_item_id,
        issue_data.quantity,
        issue_data.issued_by or current_user.user_id,
        order_id=order_id,
        issued_to=issue_data.issued_to,
        remarks=issue_data.remarks
    )
    remaining = service.stock.get(issue_data.stock_item_id).current_quantity
    db.commit()
    return OrderIssueResponse(success=True, issuance=issuance, remaining_stock=remaining)


@router.put("/{order_id}/issue", response_model=IssuanceActionResponse)
def update_order_issuance(
    order_id: uuid.UUID,
    issuance_id: uuid.UUID = Query(..., alias="issuanceId"),
    action: str = Query(..., description="return or damaged"),
    action_data: Optional[IssuanceActionRequest] = None,
    current_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    """Return an issuance to stock or write it off as damaged."""
    try:
        requested = IssuanceAction(action)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid action. Use 'return' or 'damaged'"
        )

    service = IssuanceService(db)
    if service.get_issuance(issuance_id).order_id != order_id:
        raise ValidationError(f"Issuance {issuance_id} does not belong to order {order_id}")

    action_data = action_data or IssuanceActionRequest()
    if requested == IssuanceAction.RETURN:
        issuance = service.return_issuance(
            issuance_id,
            returned_by=action_data.returned_by or current_user.user_id,
            remarks=action_data.remarks
        )
    else:
        issuance = service.mark_damaged(issuance_id, remarks=action_data.remarks)

    db.commit()
    return IssuanceActionResponse(success=True, issuance=issuance)
