"""
Derived aggregations over record lists.

Every function here is pure: it folds already-parsed records into the
rollups, chart series and counts the pages render. Missing relations were
replaced by placeholders when the records were parsed, so nothing below
needs to guard against absent customers or technicians.
"""

import calendar
from collections import Counter, defaultdict
from datetime import date, timedelta
from typing import Iterable, Sequence

from erp_console.models.common import (
    CLOSED,
    OPEN,
    CustomerAccount,
    DashboardMetrics,
    HeatmapDay,
    InventoryOverview,
    LedgerEntry,
    RevenuePoint,
    TaskTypeShare,
    TechnicianStats,
)
from erp_console.models.records import (
    Bill,
    Customer,
    Product,
    RestockEntry,
    ServiceTask,
    Warranty,
)
from erp_console.utils import matches_query, short_date

MONTH_ORDER = {name: index for index, name in enumerate(calendar.month_abbr) if name}

# Upper bounds (inclusive) of the heatmap density tiers: 0, 1, 2-3, 4+
_DENSITY_BOUNDS = (0, 1, 3)


def customer_ledger_rollup(
    debtor_bills: Iterable[Bill],
    history_bills: Iterable[Bill],
) -> list[CustomerAccount]:
    """
    Fold bills into one account per customer.

    Open bills come from the debtors list and add their balance to the
    customer's due. Closed bills come from the billing history, keeping only
    those with payment status Paid. Customers appear in first-seen order and
    a customer with no bill in either source is not listed.

    Args:
        debtor_bills: Bills with an outstanding balance.
        history_bills: Full billing history.

    Returns:
        List of CustomerAccount rollups.
    """
    accounts: dict[str, CustomerAccount] = {}

    def _account(bill: Bill) -> CustomerAccount:
        account = accounts.get(bill.customer_id)
        if account is None:
            account = CustomerAccount(
                customer_id=bill.customer_id,
                name=bill.customer_name,
                phone=bill.customer_phone,
            )
            accounts[bill.customer_id] = account
        return account

    for bill in debtor_bills:
        account = _account(bill)
        account.open_count += 1
        account.due += bill.balance
        account.entries.append(LedgerEntry(bill=bill, state=OPEN))

    for bill in history_bills:
        if not bill.is_paid:
            continue
        account = _account(bill)
        account.closed_count += 1
        account.entries.append(LedgerEntry(bill=bill, state=CLOSED))

    return list(accounts.values())


def account_counts(accounts: Iterable[CustomerAccount]) -> tuple[int, int]:
    """Return ``(open_accounts, closed_accounts)`` for the summary cards."""
    open_accounts = closed_accounts = 0
    for account in accounts:
        if account.open_count > 0:
            open_accounts += 1
        elif account.closed_count > 0:
            closed_accounts += 1
    return open_accounts, closed_accounts


def search_accounts(accounts: Sequence[CustomerAccount], term: str | None) -> list[CustomerAccount]:
    """Filter accounts by customer name or phone."""
    return [a for a in accounts if matches_query((a.name, a.phone), term)]


def technician_performance(tasks: Iterable[ServiceTask]) -> list[TechnicianStats]:
    """
    Group tasks by technician and count completions.

    Returns:
        One TechnicianStats per technician, busiest first.
    """
    stats: dict[str, TechnicianStats] = {}
    for task in tasks:
        entry = stats.setdefault(task.technician, TechnicianStats(name=task.technician))
        entry.total += 1
        if task.is_completed:
            entry.completed += 1
    return sorted(stats.values(), key=lambda s: s.total, reverse=True)


def task_type_distribution(tasks: Sequence[ServiceTask]) -> list[TaskTypeShare]:
    """Group tasks by type with each type's share of the total."""
    counts = Counter(task.task_type for task in tasks)
    grand_total = sum(counts.values())
    return [
        TaskTypeShare(
            task_type=task_type,
            count=count,
            percent=round(count / grand_total * 100, 1) if grand_total else 0.0,
        )
        for task_type, count in counts.most_common()
    ]


def bill_cost(bill: Bill, products_by_id: dict[str, Product]) -> float:
    """Return the purchase cost of the items on ``bill``."""
    cost = 0.0
    for item in bill.items:
        product = products_by_id.get(item.product_id)
        if product is not None:
            cost += product.purchase_price * item.quantity
    return cost


def monthly_revenue_series(
    bills: Iterable[Bill],
    products: Iterable[Product] = (),
) -> list[RevenuePoint]:
    """
    Sum revenue and profit per calendar month.

    Months are keyed by their abbreviated name and ordered Jan..Dec by a
    fixed table, not by first appearance. Bills without a date are skipped.
    Profit is revenue less the purchase cost of the bill's items; items whose
    product is unknown cost nothing. Without a product catalog the
    server-computed ``calculated_profit`` of each bill is used instead.
    """
    products_by_id = {p.id: p for p in products}
    points: dict[str, RevenuePoint] = {}
    for bill in bills:
        if bill.created_at is None:
            continue
        month = calendar.month_abbr[bill.created_at.month]
        point = points.setdefault(month, RevenuePoint(name=month))
        revenue = bill.amount
        point.revenue += revenue
        if not products_by_id and bill.calculated_profit is not None:
            point.profit += bill.calculated_profit
        else:
            point.profit += revenue - bill_cost(bill, products_by_id)
    return sorted(points.values(), key=lambda p: MONTH_ORDER[p.name])


def service_heatmap(tasks: Iterable[ServiceTask], year: int, month: int) -> dict[int, HeatmapDay]:
    """
    Count tasks per day of the displayed month.

    Args:
        tasks: Tasks with ``service_date`` as ``YYYY-MM-DD``.
        year: Displayed year.
        month: Displayed month, 1-12.

    Returns:
        Mapping of day-of-month to counts; days without tasks are absent.
    """
    days: dict[int, HeatmapDay] = {}
    for task in tasks:
        parts = task.service_date[:10].split("-")
        if len(parts) != 3:
            continue
        try:
            task_year, task_month, task_day = (int(p) for p in parts)
        except ValueError:
            continue
        if (task_year, task_month) != (year, month):
            continue
        day = days.setdefault(task_day, HeatmapDay(day=task_day))
        day.total += 1
        if task.status.lower() in {"completed", "done"}:
            day.completed += 1
    return days


def density_tier(count: int) -> int:
    """Map a day's task count to a density tier 0..3 (0, 1, 2-3, 4+)."""
    for tier, bound in enumerate(_DENSITY_BOUNDS):
        if count <= bound:
            return tier
    return len(_DENSITY_BOUNDS)


def restock_by_date(entries: Iterable[RestockEntry]) -> list[dict]:
    """
    Total restocked quantity per calendar date for the restock chart.

    Returns:
        Points like ``{"date": "Jun 1", "Quantity": 8}`` in date order.
    """
    totals: dict[date, int] = defaultdict(int)
    for entry in entries:
        if entry.created_at is None:
            continue
        totals[entry.created_at.date()] += entry.quantity
    return [
        {"date": short_date(day), "Quantity": quantity}
        for day, quantity in sorted(totals.items())
    ]


def inventory_overview(products: Iterable[Product], top: int = 8) -> InventoryOverview:
    """Summarize stock value and levels, with the top categories by value."""
    overview = InventoryOverview()
    by_category: dict[str, float] = defaultdict(float)
    for product in products:
        stock = product.stock_quantity
        value = product.stock_value
        overview.total_items += stock
        overview.total_value += value
        if stock == 0:
            overview.out_of_stock += 1
        elif stock <= product.low_stock_limit:
            overview.low_stock += 1
        by_category[product.category_name] += value
    ranked = sorted(by_category.items(), key=lambda kv: kv[1], reverse=True)
    overview.categories = [{"name": name, "Value": value} for name, value in ranked[:top]]
    return overview


def stock_alerts(products: Iterable[Product], limit: int = 5) -> tuple[list[Product], list[Product]]:
    """Return ``(out_of_stock, low_stock)`` among active products."""
    out_of_stock: list[Product] = []
    low_stock: list[Product] = []
    for product in products:
        if not product.is_active:
            continue
        if product.stock_quantity == 0:
            out_of_stock.append(product)
        elif product.stock_quantity <= limit:
            low_stock.append(product)
    return out_of_stock, low_stock


def services_due_on(tasks: Iterable[ServiceTask], day: date) -> list[ServiceTask]:
    """
    Return open tasks whose next (or current) service date falls on ``day``.

    This is the single rule behind both the startup reminder and the
    dashboard notification bell.
    """
    iso_day = day.isoformat()
    return [
        task
        for task in tasks
        if task.due_date and task.due_date.startswith(iso_day) and not task.is_completed
    ]


def services_due_tomorrow(tasks: Iterable[ServiceTask], today: date) -> list[ServiceTask]:
    return services_due_on(tasks, today + timedelta(days=1))


def dashboard_metrics(
    customers: Sequence[Customer],
    products: Sequence[Product],
    bills: Sequence[Bill],
    upcoming: Sequence[ServiceTask],
) -> DashboardMetrics:
    """Compute the dashboard stat cards from the loaded collections."""
    products_by_id = {p.id: p for p in products}
    revenue = sum(bill.amount for bill in bills)
    cost = sum(bill_cost(bill, products_by_id) for bill in bills)
    return DashboardMetrics(
        customers=len(customers),
        sales=revenue,
        profit=revenue - cost,
        services=sum(1 for task in upcoming if not task.is_completed),
        low_stock=sum(1 for p in products if p.stock_quantity <= p.low_stock_limit),
    )


def filter_tasks(tasks: Iterable[ServiceTask], term: str | None) -> list[ServiceTask]:
    """
    Search a technician's tasks.

    Matches customer, task type, status, notes, the ISO service date and the
    same date written as DDMMYYYY.
    """
    results = []
    for task in tasks:
        compact = ""
        parts = task.service_date.split("-")
        if len(parts) == 3:
            compact = f"{parts[2]}{parts[1]}{parts[0]}"
        terms = (
            task.customer_name,
            task.task_type,
            task.status,
            task.notes,
            task.service_date,
            compact,
        )
        if matches_query(terms, term):
            results.append(task)
    return results


def tasks_in_view(tasks: Iterable[ServiceTask], view: str) -> list[ServiceTask]:
    """Return open tasks for ``active``, completed ones for ``history``, else all."""
    if view == "active":
        return [t for t in tasks if not t.is_completed]
    if view == "history":
        return [t for t in tasks if t.is_completed]
    return list(tasks)


def warranty_status(warranty: Warranty, today: date) -> str:
    """
    Resolve the badge shown for a warranty.

    Explicit Claimed, Resolved and Rejected statuses win; otherwise the
    warranty is Expired once its end date has passed, else Active.
    """
    if warranty.status in {"Claimed", "Resolved", "Rejected"}:
        return warranty.status
    if warranty.end_date and warranty.end_date < today.isoformat():
        return "Expired"
    return "Active"
