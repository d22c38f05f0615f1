"""
Order records that stock is issued against.
"""
from decimal import Decimal
from typing import Optional, Iterable
import uuid

from sqlalchemy import select, exists
from sqlalchemy.orm import Session, selectinload

from clinic_stock.error_handlers import ResourceNotFoundError, ValidationError, AppException
from clinic_stock.logging_config import get_logger
from clinic_stock.models import Order, OrderLine, OrderStatus, StockItem, Issuance
from clinic_stock.utils import utcnow, daily_prefix, next_document_number

logger = get_logger("order_service")


class OrderService:
    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        *,
        customer_name: str,
        customer_phone: str,
        issued_by: str,
        lines: Iterable[dict],
        amount_paid: Decimal = Decimal("0"),
        **fields
    ) -> Order:
        """
        Create an order with its lines and computed totals.

        Each line dict carries stock_item_id, quantity, unit_price and
        optionally discount (percent) and cut_to_size. Stock is not touched
        here; quantities leave stock only through issuances.
        """
        order_lines = []
        for line in lines:
            if self.db.get(StockItem, line["stock_item_id"]) is None:
                raise ResourceNotFoundError("StockItem", line["stock_item_id"])
            order_lines.append(OrderLine(
                stock_item_id=line["stock_item_id"],
                quantity=line["quantity"],
                unit_price=Decimal(str(line["unit_price"])),
                discount=Decimal(str(line.get("discount") or 0)),
                cut_to_size=bool(line.get("cut_to_size", False))
            ))

        if not order_lines:
            raise ValidationError(
                "Order must contain at least one line",
                errors=[{"field": "lines", "message": "empty"}]
            )

        total = sum((line.line_total for line in order_lines), Decimal("0")).quantize(Decimal("0.01"))
        amount_paid = Decimal(str(amount_paid or 0))
        if amount_paid > total:
            raise ValidationError(
                "Amount paid cannot exceed order total",
                errors=[{"field": "amount_paid", "message": f"{amount_paid} > {total}"}]
            )

        order = Order(
            invoice_number=self._next_invoice_number(),
            customer_name=customer_name,
            customer_phone=customer_phone,
            issued_by=issued_by,
            total_amount=total,
            amount_paid=amount_paid,
            balance_due=total - amount_paid,
            status=OrderStatus.PENDING,
            lines=order_lines,
            **fields
        )
        self.db.add(order)
        self.db.flush()
        logger.info(f"Created order {order.invoice_number} total={total} by {issued_by}")
        return order

    def get(self, order_id: uuid.UUID) -> Order:
        order = self.db.scalar(
            select(Order).options(selectinload(Order.lines)).where(Order.id == order_id)
        )
        if order is None:
            raise ResourceNotFoundError("Order", order_id)
        return order

    def list(
        self,
        status: Optional[OrderStatus] = None,
        customer_phone: Optional[str] = None,
        skip: int = 0,
        limit: int = 50
    ) -> list[Order]:
        query = select(Order).options(selectinload(Order.lines))
        if status is not None:
            query = query.where(Order.status == status)
        if customer_phone:
            query = query.where(Order.customer_phone == customer_phone)
        query = query.order_by(Order.created_at.desc()).offset(skip).limit(limit)
        return list(self.db.scalars(query).all())

    def update(self, order_id: uuid.UUID, **changes) -> Order:
        """
        Apply status, payment and delivery changes to an order.

        The invoice number and lines never change. Setting amount_paid
        recomputes balance_due. A cancelled order cannot be reopened.
        """
        order = self.get(order_id)
        changes.pop("invoice_number", None)
        changes.pop("lines", None)

        new_status = changes.get("status")
        if (
            new_status is not None
            and order.status == OrderStatus.CANCELLED
            and new_status != OrderStatus.CANCELLED
        ):
            raise ValidationError(
                f"Order {order.invoice_number} is cancelled and cannot change status",
                errors=[{"field": "status", "message": f"cancelled -> {new_status.value}"}]
            )

        if changes.get("amount_paid") is not None:
            amount_paid = Decimal(str(changes["amount_paid"]))
            if amount_paid > order.total_amount:
                raise ValidationError(
                    "Amount paid cannot exceed order total",
                    errors=[{"field": "amount_paid", "message": f"{amount_paid} > {order.total_amount}"}]
                )
            changes["amount_paid"] = amount_paid
            order.balance_due = order.total_amount - amount_paid

        previous_status = order.status
        for field, value in changes.items():
            if value is None and field in ("status", "amount_paid", "payment_method"):
                continue
            setattr(order, field, value)
        self.db.flush()

        if order.status != previous_status:
            logger.info(f"Order {order.invoice_number} {previous_status.value} -> {order.status.value}")
        return order

    def delete(self, order_id: uuid.UUID) -> None:
        order = self.get(order_id)
        if self.db.scalar(select(exists().where(Issuance.order_id == order_id))):
            logger.warning(f"Refused to delete order {order.invoice_number}: stock was issued against it")
            raise AppException(
                message=f"Order {order.invoice_number} has issuances and cannot be deleted",
                status_code=409,
                details={"order_id": str(order_id)}
            )
        self.db.delete(order)
        self.db.flush()
        logger.info(f"Deleted order {order.invoice_number}")

    def _next_invoice_number(self) -> str:
        prefix = daily_prefix("INV", utcnow().date())
        existing = self.db.scalars(
            select(Order.invoice_number).where(Order.invoice_number.like(f"{prefix}%"))
        ).all()
        return next_document_number(list(existing), prefix)
