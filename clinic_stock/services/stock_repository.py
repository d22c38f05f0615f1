"""
Stock repository: the only place that writes stock quantities.

Quantity changes are applied as single guarded UPDATE statements so two
concurrent decrements on one item can never both pass the availability
check against a stale read.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional
import uuid

from sqlalchemy import select, update, exists, or_, case, func
from sqlalchemy.orm import Session

from clinic_stock.error_handlers import (
    ResourceNotFoundError,
    InsufficientStockError,
    StockItemInUseError,
    DuplicateResourceError,
    ValidationError
)
from clinic_stock.logging_config import get_logger
from clinic_stock.models import StockItem, StockKind, LedgerEntry, Issuance, OrderLine

logger = get_logger("stock_repository")


class StockSort(str, Enum):
    """Orderings offered by stock listings."""
    FIFO = "fifo"
    QUANTITY = "quantity"
    NAME = "name"
    BATCH = "batch"


SORT_COLUMNS = {
    # Oldest batch first, then the fuller of equally old batches
    StockSort.FIFO: (StockItem.created_at.asc(), StockItem.current_quantity.desc()),
    StockSort.QUANTITY: (StockItem.current_quantity.desc(), StockItem.product_name.asc()),
    StockSort.NAME: (StockItem.product_name.asc(), StockItem.created_at.asc()),
    StockSort.BATCH: (StockItem.batch_number.asc(), StockItem.created_at.asc()),
}


@dataclass
class StockFilter:
    """Criteria for listing stock items. Unset fields do not filter."""
    query: Optional[str] = None
    kind: Optional[StockKind] = None
    category: Optional[str] = None
    supplier: Optional[str] = None
    min_quantity: Optional[int] = None
    max_quantity: Optional[int] = None
    in_stock_only: bool = False


class StockRepository:
    """Mutable quantity records keyed by stock item id."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, item_id: uuid.UUID) -> StockItem:
        item = self.db.get(StockItem, item_id)
        if item is None:
            raise ResourceNotFoundError("StockItem", item_id)
        return item

    def add(self, item: StockItem) -> StockItem:
        if item.current_quantity > item.original_quantity:
            raise ValidationError(
                "Current quantity cannot exceed original quantity",
                errors=[{
                    "field": "current_quantity",
                    "message": f"{item.current_quantity} > {item.original_quantity}"
                }]
            )
        self.ensure_batch_available(item.batch_number)
        self.db.add(item)
        self.db.flush()
        logger.info(f"Created stock item {item.id} batch={item.batch_number} qty={item.current_quantity}")
        return item

    def ensure_batch_available(self, batch_number: str, exclude_id: Optional[uuid.UUID] = None) -> None:
        """Batch numbers are unique across all stock kinds."""
        query = select(StockItem.id).where(StockItem.batch_number == batch_number)
        if exclude_id is not None:
            query = query.where(StockItem.id != exclude_id)
        if self.db.scalar(query) is not None:
            raise DuplicateResourceError("StockItem", "batch_number", batch_number)

    def update(self, item_id: uuid.UUID, delta: int) -> StockItem:
        """
        Atomically add delta (negative to decrement) to current_quantity.

        The WHERE clause carries the availability guard, so a decrement that
        would go below zero matches no row. A level above the baseline lifts
        original_quantity in the same statement.
        """
        new_level = StockItem.current_quantity + delta
        stmt = (
            update(StockItem)
            .where(StockItem.id == item_id)
            .values(
                current_quantity=new_level,
                original_quantity=case(
                    (new_level > StockItem.original_quantity, new_level),
                    else_=StockItem.original_quantity
                )
            )
            .execution_options(synchronize_session=False)
        )
        if delta < 0:
            stmt = stmt.where(StockItem.current_quantity >= -delta)

        result = self.db.execute(stmt)
        if result.rowcount == 0:
            current = self.db.scalar(
                select(StockItem.current_quantity).where(StockItem.id == item_id)
            )
            if current is None:
                raise ResourceNotFoundError("StockItem", item_id)
            logger.warning(
                f"Rejected decrement on {item_id}: available={current}, requested={-delta}"
            )
            raise InsufficientStockError(available=current, requested=-delta, item_id=item_id)

        return self.db.get(StockItem, item_id, populate_existing=True)

    def set_quantity(self, item_id: uuid.UUID, new_quantity: int) -> tuple[StockItem, int]:
        """
        Overwrite current_quantity under a row lock.

        Returns the refreshed item and the quantity it held before.
        """
        item = self.db.scalar(
            select(StockItem)
            .where(StockItem.id == item_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        if item is None:
            raise ResourceNotFoundError("StockItem", item_id)

        previous = item.current_quantity
        item.current_quantity = new_quantity
        if new_quantity > item.original_quantity:
            item.original_quantity = new_quantity
        self.db.flush()
        return item, previous

    def list(
        self,
        filters: Optional[StockFilter] = None,
        sort: StockSort = StockSort.FIFO,
        limit: Optional[int] = None
    ) -> list[StockItem]:
        filters = filters or StockFilter()
        query = select(StockItem)

        if filters.query and filters.query.strip():
            term = f"%{filters.query.strip()}%"
            query = query.where(
                or_(
                    StockItem.product_name.ilike(term),
                    StockItem.batch_number.ilike(term),
                    StockItem.category.ilike(term),
                    StockItem.supplier.ilike(term),
                    StockItem.description.ilike(term),
                )
            )

        if filters.kind:
            query = query.where(StockItem.kind == filters.kind)

        if filters.category:
            query = query.where(StockItem.category == filters.category)

        if filters.supplier:
            query = query.where(StockItem.supplier == filters.supplier)

        if filters.min_quantity is not None:
            query = query.where(StockItem.current_quantity >= filters.min_quantity)

        if filters.max_quantity is not None:
            query = query.where(StockItem.current_quantity <= filters.max_quantity)

        if filters.in_stock_only:
            query = query.where(StockItem.current_quantity > 0)

        query = query.order_by(*SORT_COLUMNS[StockSort(sort)])

        if limit is not None:
            query = query.limit(limit)

        return list(self.db.scalars(query).all())

    def count(self) -> int:
        return self.db.scalar(select(func.count(StockItem.id))) or 0

    def has_references(self, item_id: uuid.UUID) -> bool:
        """True when any ledger entry, issuance or order line points at the item."""
        return bool(self.db.scalar(
            select(
                or_(
                    exists().where(LedgerEntry.stock_item_id == item_id),
                    exists().where(Issuance.stock_item_id == item_id),
                    exists().where(OrderLine.stock_item_id == item_id),
                )
            )
        ))

    def delete(self, item_id: uuid.UUID) -> None:
        """Delete an item that has never moved. Items with history are kept."""
        item = self.get(item_id)
        if self.has_references(item_id):
            logger.warning(f"Refused to delete stock item {item_id}: history exists")
            raise StockItemInUseError(item_id)
        self.db.delete(item)
        self.db.flush()
        logger.info(f"Deleted stock item {item_id}")
