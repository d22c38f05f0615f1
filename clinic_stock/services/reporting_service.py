"""
Read-only aggregations over stock, ledger and issuances for dashboards.
"""
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from fractions import Fraction
from typing import Optional

from sqlalchemy import select, func, and_
from sqlalchemy.orm import Session

from clinic_stock.core.config import settings
from clinic_stock.models import StockItem, StockKind, Issuance, IssuanceStatus
from clinic_stock.services.stock_repository import StockRepository, StockFilter, StockSort
from clinic_stock.utils import utcnow, start_of_month


@dataclass
class CategoryArea:
    category: str
    item_count: int
    total_quantity: int
    total_area_m2: float


@dataclass
class StockStats:
    total_products: int
    total_units: int
    total_value: Decimal
    total_area_m2: float
    unique_suppliers: int
    low_stock_count: int
    out_of_stock_count: int
    average_unit_price: Decimal


@dataclass
class IssuanceStats:
    units_issued_this_month: int
    returned_this_month: int
    open_issuances: int


def _low_stock_condition(ratio: float):
    """current/original < ratio, compared as integers to keep the boundary exact."""
    fraction = Fraction(str(ratio)).limit_denominator(10_000)
    return and_(
        StockItem.original_quantity > 0,
        StockItem.current_quantity * fraction.denominator < StockItem.original_quantity * fraction.numerator
    )


class ReportingService:
    def __init__(self, db: Session):
        self.db = db
        self.stock = StockRepository(db)

    def low_stock(self, limit: Optional[int] = None, ratio: Optional[float] = None) -> list[StockItem]:
        """
        Items whose remaining share of the baseline is below the threshold.

        Items with no baseline (original_quantity 0) are never reported.
        """
        ratio = settings.low_stock_ratio if ratio is None else ratio
        query = (
            select(StockItem)
            .where(_low_stock_condition(ratio))
            .order_by(StockItem.current_quantity.asc(), StockItem.created_at.asc())
        )
        if limit is not None:
            query = query.limit(limit)
        return list(self.db.scalars(query).all())

    def search(
        self,
        filters: Optional[StockFilter] = None,
        sort: StockSort = StockSort.FIFO,
        limit: Optional[int] = None
    ) -> list[StockItem]:
        """In-stock items matching the filters, oldest batch first by default."""
        filters = replace(filters or StockFilter(), in_stock_only=True)
        return self.stock.list(filters, sort, limit or settings.search_result_limit)

    def area_by_category(self, kind: StockKind = StockKind.GLASS) -> list[CategoryArea]:
        items = self.db.scalars(
            select(StockItem).where(StockItem.kind == kind)
        ).all()

        categories: dict[str, CategoryArea] = {}
        for item in items:
            name = item.category or "Uncategorized"
            if name not in categories:
                categories[name] = CategoryArea(category=name, item_count=0, total_quantity=0, total_area_m2=0.0)
            entry = categories[name]
            entry.item_count += 1
            entry.total_quantity += item.current_quantity
            entry.total_area_m2 += item.total_area_m2 or 0.0

        result = list(categories.values())
        for entry in result:
            entry.total_area_m2 = round(entry.total_area_m2, 2)
        result.sort(key=lambda x: x.total_area_m2, reverse=True)
        return result

    def stock_stats(self) -> StockStats:
        total_products, total_units, total_value, unique_suppliers = self.db.execute(
            select(
                func.count(StockItem.id),
                func.coalesce(func.sum(StockItem.current_quantity), 0),
                func.coalesce(func.sum(StockItem.current_quantity * StockItem.unit_price), 0),
                func.count(func.distinct(StockItem.supplier))
            )
        ).one()

        low_stock_count = self.db.scalar(
            select(func.count(StockItem.id)).where(_low_stock_condition(settings.low_stock_ratio))
        ) or 0
        out_of_stock_count = self.db.scalar(
            select(func.count(StockItem.id)).where(StockItem.current_quantity == 0)
        ) or 0

        glass = self.db.scalars(
            select(StockItem).where(
                StockItem.kind == StockKind.GLASS,
                StockItem.width_cm.isnot(None),
                StockItem.height_cm.isnot(None)
            )
        ).all()
        total_area = round(sum(item.total_area_m2 or 0.0 for item in glass), 2)

        total_value = Decimal(str(total_value)).quantize(Decimal("0.01"))
        # Weighted by quantity on hand
        average = (total_value / total_units).quantize(Decimal("0.01")) if total_units else Decimal("0.00")

        return StockStats(
            total_products=total_products,
            total_units=int(total_units),
            total_value=total_value,
            total_area_m2=total_area,
            unique_suppliers=unique_suppliers,
            low_stock_count=low_stock_count,
            out_of_stock_count=out_of_stock_count,
            average_unit_price=average
        )

    def issuance_stats(self, now: Optional[datetime] = None) -> IssuanceStats:
        month_start = start_of_month(now or utcnow())

        units_issued = self.db.scalar(
            select(func.coalesce(func.sum(Issuance.quantity), 0)).where(Issuance.issued_at >= month_start)
        )
        returned = self.db.scalar(
            select(func.count(Issuance.id)).where(
                Issuance.status == IssuanceStatus.RETURNED,
                Issuance.returned_at >= month_start
            )
        )
        open_issuances = self.db.scalar(
            select(func.count(Issuance.id)).where(Issuance.status == IssuanceStatus.ISSUED)
        )

        return IssuanceStats(
            units_issued_this_month=int(units_issued or 0),
            returned_this_month=returned or 0,
            open_issuances=open_issuances or 0
        )

    def expiring_medicines(self, days: Optional[int] = None, today: Optional[date] = None) -> list[StockItem]:
        """In-stock medicine batches whose expiry date falls within the next `days` days."""
        days = settings.expiry_warning_days if days is None else days
        today = today or date.today()
        return list(self.db.scalars(
            select(StockItem)
            .where(
                StockItem.kind == StockKind.MEDICINE,
                StockItem.current_quantity > 0,
                StockItem.expiry_date.isnot(None),
                StockItem.expiry_date >= today,
                StockItem.expiry_date <= today + timedelta(days=days)
            )
            .order_by(StockItem.expiry_date.asc())
        ).all())
