# backend/services/report_service.py
"""
Report aggregation over persisted sales.

Two read-only views over an inclusive ``[start, end]`` window:

- the sales ledger: one row per sale plus count / revenue totals;
- the seller ranking: sellers with at least one sale in the window,
  ordered by revenue (descending, ties keep store order).

Aggregation returns plain data (``SalesLedger``, ``SellerRanking``);
``to_table()`` turns it into a ``ReportTable`` that the spreadsheet sink
renders to xlsx or csv bytes.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, List, Optional

from config import settings
from repositories.entity_store import EntityStore
from services.sale_service import money
from utils.exceptions import InvalidInputError
from utils.spreadsheet import ReportTable, render

logger = logging.getLogger(__name__)

DATE_TIME_FORMAT = "%d/%m/%Y %H:%M"

LEDGER_HEADERS = ["Duck", "Status", "Customer", "Customer Type", "Amount", "Date/Time", "Seller"]
RANKING_HEADERS = ["Position", "Seller", "Total Sales", "Total Revenue", "Average Ticket", "CPF", "Employee ID"]


@dataclass
class LedgerRow:
    sale_id: int
    duck_name: str
    duck_status: str
    customer_name: str
    customer_type: str
    final_price: Decimal
    sale_date: datetime
    seller_name: str

    def cells(self) -> list:
        return [
            self.duck_name,
            self.duck_status,
            self.customer_name,
            self.customer_type,
            self.final_price,
            self.sale_date.strftime(DATE_TIME_FORMAT),
            self.seller_name,
        ]


@dataclass
class SalesLedger:
    start: datetime
    end: datetime
    generated_at: datetime
    rows: List[LedgerRow] = field(default_factory=list)
    total_sales: int = 0
    total_revenue: Decimal = Decimal("0.00")
    # Tracked for callers; intentionally not part of the rendered summary
    total_discount: Decimal = Decimal("0.00")

    def to_table(self) -> ReportTable:
        return ReportTable(
            title="Sales Report",
            start=self.start,
            end=self.end,
            generated_at=self.generated_at,
            headers=LEDGER_HEADERS,
            rows=[row.cells() for row in self.rows],
            summary=[("Total Sales:", self.total_sales), ("Total Revenue:", self.total_revenue)],
            currency_columns={4},
            sheet_name="Sales Report",
        )


@dataclass
class SellerMetrics:
    seller_id: int
    seller_name: str
    cpf: str
    employee_id: str
    total_sales: int
    total_revenue: Decimal
    average_ticket: Decimal
    position: int = 0

    def cells(self) -> list:
        return [
            self.position,
            self.seller_name,
            self.total_sales,
            self.total_revenue,
            self.average_ticket,
            self.cpf,
            self.employee_id,
        ]


@dataclass
class SellerRanking:
    start: Optional[datetime]
    end: Optional[datetime]
    generated_at: datetime
    rows: List[SellerMetrics] = field(default_factory=list)

    @property
    def total_sellers(self) -> int:
        return len(self.rows)

    @property
    def total_sales(self) -> int:
        return sum(m.total_sales for m in self.rows)

    @property
    def total_revenue(self) -> Decimal:
        return money(sum((m.total_revenue for m in self.rows), Decimal("0")))

    def to_table(self) -> ReportTable:
        return ReportTable(
            title="Seller Ranking",
            start=self.start,
            end=self.end,
            generated_at=self.generated_at,
            headers=RANKING_HEADERS,
            rows=[m.cells() for m in self.rows],
            summary=[
                ("Total Sellers:", self.total_sellers),
                ("Total Sales:", self.total_sales),
                ("Total Revenue:", self.total_revenue),
            ],
            currency_columns={3, 4},
            sheet_name="Seller Ranking",
        )


def local_naive(value: datetime) -> datetime:
    """Sale dates are stored as naive local time; bring offset-aware bounds onto that clock."""
    if value.tzinfo is None or value.utcoffset() is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def validate_window(start: datetime, end: datetime):
    if start is None or end is None:
        raise InvalidInputError("Start date and end date are required")
    start, end = local_naive(start), local_naive(end)
    if start > end:
        raise InvalidInputError("Start date must not be after end date")
    return start, end


def average_ticket(revenue: Decimal, count: int) -> Decimal:
    if count == 0:
        return money(0)
    return money(revenue / count)


def customer_type(discount_eligible: bool) -> str:
    return "Discount eligible" if discount_eligible else "Not eligible"


class ReportService:

    def __init__(self, store: EntityStore, clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self.clock = clock

    def default_window(self, days: Optional[int] = None):
        """Window used by the "current period" endpoints: the last N days up to now."""
        end = self.clock()
        start = end - timedelta(days=days if days is not None else settings.REPORT_DEFAULT_DAYS)
        return start, end

    # ==================== AGGREGATION ====================

    def sales_ledger(self, start: datetime, end: datetime) -> SalesLedger:
        start, end = validate_window(start, end)
        logger.info("Building sales ledger from %s to %s", start, end)

        ledger = SalesLedger(start=start, end=end, generated_at=self.clock())
        revenue = Decimal("0")
        discount = Decimal("0")

        for sale in self.store.find_sales_in_range(start, end):
            ducks = sale.ducks
            ledger.rows.append(LedgerRow(
                sale_id=sale.id,
                duck_name=", ".join(d.name for d in ducks),
                duck_status=", ".join(sorted({_status(d.status) for d in ducks})),
                customer_name=sale.customer.name,
                customer_type=customer_type(sale.customer.discount_eligible),
                final_price=money(sale.final_price),
                sale_date=sale.sale_date,
                seller_name=sale.seller.name,
            ))
            revenue += Decimal(sale.final_price)
            discount += Decimal(sale.discount_amount or 0)

        ledger.total_sales = len(ledger.rows)
        ledger.total_revenue = money(revenue)
        ledger.total_discount = money(discount)
        return ledger

    def seller_metrics(self, seller, start: Optional[datetime], end: Optional[datetime]) -> SellerMetrics:
        if start is None and end is None:
            sales = self.store.find_sales_by_seller(seller.id)
        else:
            sales = self.store.find_sales_by_seller_in_range(seller.id, start, end)
        revenue = money(sum((Decimal(s.final_price) for s in sales), Decimal("0")))
        return SellerMetrics(
            seller_id=seller.id,
            seller_name=seller.name,
            cpf=seller.cpf,
            employee_id=seller.employee_id,
            total_sales=len(sales),
            total_revenue=revenue,
            average_ticket=average_ticket(revenue, len(sales)),
        )

    def seller_ranking(self, start: Optional[datetime], end: Optional[datetime]) -> SellerRanking:
        """Ranking over ``[start, end]``; both ``None`` ranks over all recorded sales."""
        if start is not None or end is not None:
            start, end = validate_window(start, end)
        logger.info("Building seller ranking from %s to %s", start, end)

        metrics = [self.seller_metrics(seller, start, end) for seller in self.store.find_all_sellers()]
        ranked = sorted((m for m in metrics if m.total_sales > 0),
                        key=lambda m: m.total_revenue, reverse=True)
        for position, m in enumerate(ranked, start=1):
            m.position = position

        return SellerRanking(start=start, end=end, generated_at=self.clock(), rows=ranked)

    # ==================== EXPORT ====================

    def generate_sales_report(self, start: datetime, end: datetime, fmt: str = "xlsx") -> bytes:
        ledger = self.sales_ledger(start, end)
        return render(ledger.to_table(), fmt)

    def generate_seller_ranking_report(self, start: datetime, end: datetime, fmt: str = "xlsx") -> bytes:
        start, end = validate_window(start, end)
        ranking = self.seller_ranking(start, end)
        return render(ranking.to_table(), fmt)


def _status(status) -> str:
    return status.value if hasattr(status, "value") else str(status)
