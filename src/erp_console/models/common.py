"""
View-state models shared by the aggregators, the services and the pages.

These are the derived shapes the console renders: account rollups,
technician statistics, chart points, dashboard metrics and server-paged
result sets. Models that travel through dcc.Store provide to_dict/from_dict
for JSON serialization.
"""

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Generic, Sequence, TypeVar

from erp_console.models.records import Bill, Customer

T = TypeVar("T")

OPEN = "Open"
CLOSED = "Closed"


@dataclass(slots=True)
class LedgerEntry:
    """A bill on a customer's ledger tagged as Open or Closed."""

    bill: Bill
    state: str


@dataclass(slots=True)
class CustomerAccount:
    """
    Per-customer rollup of open and closed bills.

    Attributes:
        due: Sum of balances over the customer's open bills.
        entries: Every open and closed bill for the customer.
    """

    customer_id: str
    name: str
    phone: str = ""
    open_count: int = 0
    closed_count: int = 0
    due: float = 0.0
    entries: list[LedgerEntry] = field(default_factory=list)

    @property
    def is_open(self) -> bool:
        return self.open_count > 0


@dataclass(slots=True)
class CustomerLedger:
    """
    A customer's outstanding bills.

    Attributes:
        total_due: Server total, the sum of balances over ``bills``.
        bills: Open bills only; a clean record has none.
    """

    customer: Customer
    total_due: float = 0.0
    bills: list[Bill] = field(default_factory=list)


@dataclass(slots=True)
class TechnicianStats:
    """Completion statistics for one technician."""

    name: str
    total: int = 0
    completed: int = 0

    @property
    def pending(self) -> int:
        return self.total - self.completed

    @property
    def rate(self) -> int:
        """Completion rate as a whole percent, halves rounded up, 0 when there are no tasks."""
        if self.total == 0:
            return 0
        return math.floor(self.completed / self.total * 100 + 0.5)


@dataclass(slots=True)
class TaskTypeShare:
    """Share of tasks of one type."""

    task_type: str
    count: int
    percent: float


@dataclass(slots=True)
class RevenuePoint:
    """Revenue and profit for one calendar month."""

    name: str
    revenue: float = 0.0
    profit: float = 0.0


@dataclass(slots=True)
class HeatmapDay:
    """Task counts for one day of the displayed month."""

    day: int
    total: int = 0
    completed: int = 0

    @property
    def pending(self) -> int:
        return self.total - self.completed


@dataclass(slots=True)
class InventoryOverview:
    """Stock totals and the categories holding the most stock value."""

    total_value: float = 0.0
    total_items: int = 0
    low_stock: int = 0
    out_of_stock: int = 0
    categories: list[dict[str, Any]] = field(default_factory=list)


@dataclass(slots=True)
class DashboardMetrics:
    """Headline numbers on the dashboard stat cards."""

    customers: int = 0
    sales: float = 0.0
    profit: float = 0.0
    services: int = 0
    low_stock: int = 0

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict | None) -> "DashboardMetrics":
        if not data:
            return cls()
        return cls(
            customers=data.get("customers", 0),
            sales=data.get("sales", 0.0),
            profit=data.get("profit", 0.0),
            services=data.get("services", 0),
            low_stock=data.get("low_stock", 0),
        )


@dataclass(slots=True)
class ListPage(Generic[T]):
    """
    A server-paged slice of records.

    Attributes:
        items: Records on this page.
        total: Total records matching the query on the server.
        page: Page number (1-indexed).
        page_size: Requested page size.
    """

    items: Sequence[T]
    total: int
    page: int
    page_size: int

    @property
    def has_more(self) -> bool:
        """Return True when additional pages are available."""
        if len(self.items) < self.page_size:
            return False
        return self.page * self.page_size < self.total


@dataclass(slots=True)
class SalesSummary:
    """Totals returned with a sales report."""

    count: int = 0
    revenue: float = 0.0
    profit: float = 0.0


@dataclass(slots=True)
class SalesReport:
    """Bills in a reporting period and their summary."""

    bills: Sequence[Bill] = field(default_factory=list)
    summary: SalesSummary = field(default_factory=SalesSummary)

    def by_status(self, status: str) -> list[Bill]:
        """Return the bills whose invoice status equals ``status``."""
        return [bill for bill in self.bills if bill.invoice_status == status]
