"""
Issuance service: issue, return, restock and adjust stock quantities.

Every operation runs inside the caller's session transaction. The stock
update, the ledger entry and the issuance record are flushed together and
committed (or rolled back) as one unit by the session owner.
"""
from typing import Optional
import uuid

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from clinic_stock.error_handlers import (
    ResourceNotFoundError,
    AlreadyProcessedError,
    ValidationError
)
from clinic_stock.logging_config import get_logger
from clinic_stock.models import (
    StockItem,
    Issuance,
    IssuanceStatus,
    LedgerEntryType,
    Order,
    OrderStatus
)
from clinic_stock.services.ledger import Ledger
from clinic_stock.services.stock_repository import StockRepository
from clinic_stock.utils import utcnow, daily_prefix, next_document_number

logger = get_logger("issuance_service")


def _append_remark(existing: Optional[str], label: str, remarks: Optional[str]) -> Optional[str]:
    if not remarks:
        return existing
    note = f"{label}: {remarks}"
    return f"{existing} | {note}" if existing else note


class IssuanceService:
    """Validates and applies quantity changes, writing one ledger entry per change."""

    def __init__(self, db: Session):
        self.db = db
        self.stock = StockRepository(db)
        self.ledger = Ledger(db)

    # ------------------------------------------------------------------
    # Issue / return
    # ------------------------------------------------------------------

    def issue(
        self,
        stock_item_id: uuid.UUID,
        quantity: int,
        issued_by: str,
        *,
        order_id: Optional[uuid.UUID] = None,
        prescription_id: Optional[str] = None,
        issued_to: Optional[str] = None,
        remarks: Optional[str] = None
    ) -> Issuance:
        """
        Deduct quantity from a stock item and record who received it.

        Raises:
            ValidationError: quantity is not positive, issuer missing, or the
                order no longer accepts stock
            ResourceNotFoundError: stock item or order does not exist
            InsufficientStockError: quantity exceeds what is on hand
        """
        if quantity is None or quantity <= 0:
            raise ValidationError(
                "Quantity must be greater than zero",
                errors=[{"field": "quantity", "message": f"got {quantity}"}]
            )
        if not issued_by:
            raise ValidationError(
                "Issuer is required",
                errors=[{"field": "issued_by", "message": "missing"}]
            )

        order = None
        if order_id is not None:
            order = self.db.get(Order, order_id)
            if order is None:
                raise ResourceNotFoundError("Order", order_id)
            if not order.accepts_issuance:
                raise ValidationError(f"Cannot issue stock for order with status: {order.status.value}")

        item = self.stock.update(stock_item_id, -quantity)
        previous = item.current_quantity + quantity

        issuance = Issuance(
            issuance_number=self._next_issuance_number(),
            stock_item_id=item.id,
            order_id=order.id if order else None,
            order_number=order.invoice_number if order else None,
            prescription_id=prescription_id,
            issued_to=issued_to or (order.customer_name if order else None),
            quantity=quantity,
            issued_by=issued_by,
            status=IssuanceStatus.ISSUED,
            issued_at=utcnow(),
            remarks=remarks
        )
        self.db.add(issuance)
        self.db.flush()

        if order is not None:
            reference = f"order {order.invoice_number}"
        elif prescription_id:
            reference = f"prescription {prescription_id}"
        else:
            reference = "N/A"

        self.ledger.append(
            item.id,
            LedgerEntryType.ISSUED,
            quantity,
            previous,
            item.current_quantity,
            issued_by,
            f"Issued {quantity} units for {reference}",
            prescription_id=prescription_id,
            order_id=issuance.order_id,
            issuance_id=issuance.id
        )

        if order is not None and order.status == OrderStatus.PENDING:
            order.status = OrderStatus.PROCESSING
            self.db.flush()

        logger.info(
            f"Issued {quantity} of {item.batch_number} ({issuance.issuance_number}) "
            f"by {issued_by}; {previous} -> {item.current_quantity}"
        )
        return issuance

    def return_issuance(
        self,
        issuance_id: uuid.UUID,
        returned_by: Optional[str] = None,
        remarks: Optional[str] = None
    ) -> Issuance:
        """
        Put an issued quantity back into stock.

        Raises:
            ResourceNotFoundError: issuance does not exist
            AlreadyProcessedError: issuance was already returned or written off
        """
        issuance = self._transition(issuance_id, IssuanceStatus.RETURNED, returned_by)
        actor = returned_by or issuance.issued_by

        item = self.stock.update(issuance.stock_item_id, issuance.quantity)
        previous = item.current_quantity - issuance.quantity

        self.ledger.append(
            item.id,
            LedgerEntryType.RETURNED,
            issuance.quantity,
            previous,
            item.current_quantity,
            actor,
            f"Returned {issuance.quantity} units from {issuance.issuance_number}"
            + (f": {remarks}" if remarks else ""),
            prescription_id=issuance.prescription_id,
            order_id=issuance.order_id,
            issuance_id=issuance.id
        )

        issuance.remarks = _append_remark(issuance.remarks, "Returned", remarks)
        self.db.flush()

        logger.info(
            f"Returned {issuance.quantity} of {item.batch_number} ({issuance.issuance_number}) "
            f"by {actor}; {previous} -> {item.current_quantity}"
        )
        return issuance

    def mark_damaged(self, issuance_id: uuid.UUID, remarks: Optional[str] = None) -> Issuance:
        """Write off issued goods. Stock is not restored."""
        issuance = self._transition(issuance_id, IssuanceStatus.DAMAGED)
        issuance.remarks = _append_remark(issuance.remarks, "Damaged", remarks)
        self.db.flush()
        logger.info(f"Marked {issuance.issuance_number} as damaged")
        return issuance

    def _transition(
        self,
        issuance_id: uuid.UUID,
        new_status: IssuanceStatus,
        actor: Optional[str] = None
    ) -> Issuance:
        """Move an issuance out of ISSUED; the status guard makes a second attempt fail."""
        values = {"status": new_status, "updated_at": utcnow()}
        if new_status == IssuanceStatus.RETURNED:
            values["returned_at"] = utcnow()
            values["returned_by"] = actor

        result = self.db.execute(
            update(Issuance)
            .where(Issuance.id == issuance_id, Issuance.status == IssuanceStatus.ISSUED)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            current = self.db.scalar(select(Issuance.status).where(Issuance.id == issuance_id))
            if current is None:
                raise ResourceNotFoundError("Issuance", issuance_id)
            logger.warning(f"Rejected {new_status.value} of issuance {issuance_id}: already {current.value}")
            raise AlreadyProcessedError("Issuance", issuance_id, current.value)

        return self.db.get(Issuance, issuance_id, populate_existing=True)

    # ------------------------------------------------------------------
    # Restock / adjust
    # ------------------------------------------------------------------

    def restock(
        self,
        item_id: uuid.UUID,
        quantity: int,
        changed_by: str,
        reason: Optional[str] = None
    ) -> StockItem:
        if quantity is None or quantity <= 0:
            raise ValidationError(
                "Restock quantity must be greater than zero",
                errors=[{"field": "quantity", "message": f"got {quantity}"}]
            )

        item = self.stock.update(item_id, quantity)
        previous = item.current_quantity - quantity
        self.ledger.append(
            item.id,
            LedgerEntryType.RESTOCKED,
            quantity,
            previous,
            item.current_quantity,
            changed_by,
            reason or f"Restocked {quantity} units"
        )
        logger.info(f"Restocked {item.batch_number} by {quantity}; {previous} -> {item.current_quantity}")
        return item

    def adjust(
        self,
        item_id: uuid.UUID,
        new_quantity: int,
        changed_by: str,
        reason: Optional[str] = None
    ) -> StockItem:
        """
        Reconcile a stock item to a counted quantity.

        The single ledger entry is typed by the direction of the correction:
        issued when stock went down, restocked otherwise. A count that confirms
        the recorded level is still written, as a restock of 0 units.
        """
        if new_quantity is None or new_quantity < 0:
            raise ValidationError(
                "Counted quantity cannot be negative",
                errors=[{"field": "new_quantity", "message": f"got {new_quantity}"}]
            )

        item, previous = self.stock.set_quantity(item_id, new_quantity)
        difference = new_quantity - previous
        entry_type = LedgerEntryType.ISSUED if difference < 0 else LedgerEntryType.RESTOCKED

        self.ledger.append(
            item.id,
            entry_type,
            abs(difference),
            previous,
            new_quantity,
            changed_by,
            reason or f"Manual adjustment to {new_quantity} units"
        )
        logger.info(f"Adjusted {item.batch_number} {previous} -> {new_quantity} by {changed_by}")
        return item

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_issuance(self, issuance_id: uuid.UUID) -> Issuance:
        issuance = self.db.get(Issuance, issuance_id)
        if issuance is None:
            raise ResourceNotFoundError("Issuance", issuance_id)
        return issuance

    def list_issuances(
        self,
        stock_item_id: Optional[uuid.UUID] = None,
        order_id: Optional[uuid.UUID] = None,
        status: Optional[IssuanceStatus] = None,
        limit: Optional[int] = None
    ) -> list[Issuance]:
        query = select(Issuance)
        if stock_item_id is not None:
            query = query.where(Issuance.stock_item_id == stock_item_id)
        if order_id is not None:
            query = query.where(Issuance.order_id == order_id)
        if status is not None:
            query = query.where(Issuance.status == status)
        query = query.order_by(Issuance.issued_at.desc())
        if limit is not None:
            query = query.limit(limit)
        return list(self.db.scalars(query).all())

    def _next_issuance_number(self) -> str:
        prefix = daily_prefix("ISS", utcnow().date())
        existing = self.db.scalars(
            select(Issuance.issuance_number).where(Issuance.issuance_number.like(f"{prefix}%"))
        ).all()
        return next_document_number(list(existing), prefix)
