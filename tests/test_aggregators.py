from datetime import date, datetime

import pytest

from erp_console import aggregators
from erp_console.models.common import TechnicianStats
from erp_console.models.records import Bill, BillItem, Product, RestockEntry, ServiceTask, Warranty


def _bill(bill_id, customer_id, balance=0.0, status="Paid", **extra):
    return Bill(
        id=bill_id,
        customer_id=customer_id,
        customer_name=f"Customer {customer_id}",
        balance=balance,
        payment_status=status,
        **extra,
    )


def _task(task_id, technician="Arjun", status="Pending", service_date="2024-06-03", **extra):
    return ServiceTask(id=task_id, technician=technician, status=status, service_date=service_date, **extra)


def test_ledger_rollup_sums_open_balances():
    debtors = [_bill("s1", "c1", 100, "Partial"), _bill("s2", "c1", 50, "Pending"), _bill("s3", "c2", 25, "Partial")]
    history = [_bill("s4", "c3"), _bill("s5", "c4", status="Partial"), _bill("s6", "c1")]

    accounts = aggregators.customer_ledger_rollup(debtors, history)

    assert [a.customer_id for a in accounts] == ["c1", "c2", "c3"]
    assert sum(a.due for a in accounts) == sum(b.balance for b in debtors)
    c1 = accounts[0]
    assert (c1.open_count, c1.closed_count, c1.due) == (2, 1, 150)
    assert [e.state for e in c1.entries] == ["Open", "Open", "Closed"]
    assert aggregators.account_counts(accounts) == (2, 1)


def test_ledger_rollup_without_bills_is_empty():
    assert aggregators.customer_ledger_rollup([], []) == []


def test_search_accounts_matches_name_or_phone():
    accounts = aggregators.customer_ledger_rollup(
        [Bill(id="s1", customer_id="c1", customer_name="Ravi", customer_phone="98765", balance=10)],
        [Bill(id="s2", customer_id="c2", customer_name="Anita", customer_phone="11111", payment_status="Paid")],
    )
    assert [a.name for a in aggregators.search_accounts(accounts, "987")] == ["Ravi"]
    assert [a.name for a in aggregators.search_accounts(accounts, "ANI")] == ["Anita"]
    assert len(aggregators.search_accounts(accounts, "  ")) == 2


def test_technician_performance():
    tasks = [
        _task("t1", status="Completed"),
        _task("t2"),
        _task("t3", technician="Vikram", status="Completed"),
        _task("t4", technician="Arjun", status="Completed"),
    ]
    stats = aggregators.technician_performance(tasks)
    assert [(s.name, s.total, s.completed, s.pending, s.rate) for s in stats] == [
        ("Arjun", 3, 2, 1, 67),
        ("Vikram", 1, 1, 0, 100),
    ]


def test_task_type_distribution():
    tasks = [
        _task("t1", task_type="Repair"),
        _task("t2", task_type="Repair"),
        _task("t3", task_type="Installation"),
        _task("t4", task_type="Repair"),
    ]
    shares = aggregators.task_type_distribution(tasks)
    assert [(s.task_type, s.count, s.percent) for s in shares] == [("Repair", 3, 75.0), ("Installation", 1, 25.0)]
    assert aggregators.task_type_distribution([]) == []


def test_monthly_revenue_series_orders_months_by_calendar():
    bills = [
        Bill(id="s1", customer_id="c1", final_amount=300, created_at=datetime(2024, 11, 2), calculated_profit=30),
        Bill(id="s2", customer_id="c1", final_amount=100, created_at=datetime(2024, 2, 5), calculated_profit=10),
        Bill(id="s3", customer_id="c1", total_amount=50, created_at=datetime(2024, 2, 20), calculated_profit=5),
        Bill(id="s4", customer_id="c1", final_amount=999),
    ]
    series = aggregators.monthly_revenue_series(bills)
    assert [(p.name, p.revenue, p.profit) for p in series] == [("Feb", 150, 15), ("Nov", 300, 30)]


def test_monthly_revenue_series_costs_items_from_catalog():
    products = [Product(id="p1", name="Inverter", purchase_price=400)]
    bill = Bill(
        id="s1",
        customer_id="c1",
        final_amount=1000,
        created_at=datetime(2024, 6, 1),
        items=[BillItem(product_id="p1", quantity=2), BillItem(product_id="gone", quantity=5)],
    )
    [point] = aggregators.monthly_revenue_series([bill], products)
    assert (point.revenue, point.profit) == (1000, 200)


def test_service_heatmap_counts_days_in_month():
    tasks = [
        _task("t1", service_date="2024-06-03", status="Completed"),
        _task("t2", service_date="2024-06-03"),
        _task("t3", service_date="2024-06-15"),
        _task("t4", service_date="2024-07-03"),
        _task("t5", service_date=""),
    ]
    days = aggregators.service_heatmap(tasks, 2024, 6)
    assert sorted(days) == [3, 15]
    assert (days[3].total, days[3].completed, days[3].pending) == (2, 1, 1)


def test_density_tiers():
    assert [aggregators.density_tier(n) for n in (0, 1, 2, 3, 4, 12)] == [0, 1, 2, 2, 3, 3]


def test_restock_entries_on_same_day_make_one_point():
    entries = [
        RestockEntry.from_payload({"date": "2024-06-01", "qty": 5}),
        RestockEntry.from_payload({"date": "2024-06-01", "qty": 3}),
    ]
    assert aggregators.restock_by_date(entries) == [{"date": "Jun 1", "Quantity": 8}]


def test_restock_points_are_in_date_order():
    entries = [
        RestockEntry(product_id="p1", quantity=2, created_at=datetime(2024, 6, 10)),
        RestockEntry(product_id="p1", quantity=1, created_at=datetime(2024, 5, 31)),
        RestockEntry(product_id="p1", quantity=9),
    ]
    assert aggregators.restock_by_date(entries) == [
        {"date": "May 31", "Quantity": 1},
        {"date": "Jun 10", "Quantity": 2},
    ]


def test_inventory_overview_and_alerts():
    products = [
        Product(id="p1", name="Inverter", category_name="Inverters", stock_quantity=10, purchase_price=100),
        Product(id="p2", name="Battery", category_name="Batteries", stock_quantity=3, purchase_price=1000),
        Product(id="p3", name="Trolley", category_name="Accessories", stock_quantity=0, purchase_price=50),
        Product(id="p4", name="Panel", category_name="Solar", stock_quantity=1, is_active=False),
    ]
    overview = aggregators.inventory_overview(products, top=2)
    assert overview.total_value == 4000
    assert overview.total_items == 14
    assert (overview.low_stock, overview.out_of_stock) == (2, 1)
    assert [c["name"] for c in overview.categories] == ["Batteries", "Inverters"]

    out_of_stock, low_stock = aggregators.stock_alerts(products, limit=5)
    assert [p.id for p in out_of_stock] == ["p3"]
    assert [p.id for p in low_stock] == ["p2"]


def test_services_due_tomorrow():
    today = date(2024, 6, 1)
    tasks = [
        _task("next", service_date="2024-05-20", next_service_date="2024-06-02"),
        _task("same", service_date="2024-06-02"),
        _task("done", service_date="2024-06-02", status="Completed"),
        _task("later", service_date="2024-06-03"),
        _task("moved", service_date="2024-06-02", next_service_date="2024-07-01"),
    ]
    due = aggregators.services_due_tomorrow(tasks, today)
    assert [t.id for t in due] == ["next", "same"]


def test_filter_tasks_matches_compact_date():
    tasks = [
        _task("t1", service_date="2024-06-03", customer_name="Ravi"),
        _task("t2", service_date="2024-07-04", notes="battery swap"),
    ]
    assert [t.id for t in aggregators.filter_tasks(tasks, "03062024")] == ["t1"]
    assert [t.id for t in aggregators.filter_tasks(tasks, "SWAP")] == ["t2"]
    assert [t.id for t in aggregators.filter_tasks(tasks, "2024-07")] == ["t2"]
    assert len(aggregators.filter_tasks(tasks, None)) == 2


def test_tasks_in_view():
    tasks = [_task("open"), _task("done", status="Completed"), _task("later")]
    assert [t.id for t in aggregators.tasks_in_view(tasks, "active")] == ["open", "later"]
    assert [t.id for t in aggregators.tasks_in_view(tasks, "history")] == ["done"]
    assert len(aggregators.tasks_in_view(tasks, "all")) == 3


def test_warranty_status():
    today = date(2024, 6, 1)
    assert aggregators.warranty_status(Warranty(id="w", end_date="2024-05-31"), today) == "Expired"
    assert aggregators.warranty_status(Warranty(id="w", end_date="2024-06-01"), today) == "Active"
    assert aggregators.warranty_status(Warranty(id="w", end_date="2020-01-01", status="Claimed"), today) == "Claimed"


def test_dashboard_metrics():
    products = [
        Product(id="p1", name="Inverter", stock_quantity=2, low_stock_limit=5, purchase_price=400),
        Product(id="p2", name="Battery", stock_quantity=20, low_stock_limit=5),
    ]
    bills = [Bill(id="s1", customer_id="c1", final_amount=1000, items=[BillItem(product_id="p1", quantity=1)])]
    upcoming = [_task("t1"), _task("t2", status="Completed")]
    metrics = aggregators.dashboard_metrics(["c1", "c2"], products, bills, upcoming)
    assert (metrics.customers, metrics.sales, metrics.profit, metrics.services, metrics.low_stock) == (
        2,
        1000,
        600,
        1,
        1,
    )


@pytest.mark.parametrize(("completed", "total", "rate"), [(1, 8, 13), (3, 8, 38), (1, 3, 33), (0, 0, 0)])
def test_completion_rate_rounds_halves_up(completed, total, rate):
    assert TechnicianStats(name="Arjun", total=total, completed=completed).rate == rate
