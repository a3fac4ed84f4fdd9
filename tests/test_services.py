from datetime import date, timedelta

import pytest
from conftest import BASE_URL, FakeResponse

from erp_console.forms import customer_payload, employee_payload, product_payload, task_payload
from erp_console.lib.caches import DiskCache
from erp_console.lib.clients import ApiError
from erp_console.models.records import UNASSIGNED, UNKNOWN_CUSTOMER
from erp_console.services import DemoErpService, ErpServiceImpl, get_erp_service


@pytest.fixture
def demo():
    return DemoErpService()


@pytest.fixture
def reference_cache(tmp_path):
    cache = DiskCache(tmp_path / "reference")
    yield cache
    cache.close()


@pytest.fixture
def impl(api, reference_cache):
    return ErpServiceImpl(client=api, cache=reference_cache, reference_ttl=60)


def test_factory_caches_and_rejects_unknown_kind():
    assert get_erp_service("demo") is get_erp_service("demo")
    assert isinstance(get_erp_service("demo"), DemoErpService)
    with pytest.raises(ValueError, match="Unknown ERP service kind"):
        get_erp_service("mainframe")


# --- Demo ---------------------------------------------------------------


def test_demo_fixtures_parse_missing_relations(demo):
    bill = next(b for b in demo.billing_history() if b.id == "s3")
    assert bill.customer_name == UNKNOWN_CUSTOMER
    task = next(t for t in demo.list_services() if t.id == "t4")
    assert task.technician == UNASSIGNED


def test_demo_products_filter(demo):
    assert [p.id for p in demo.list_products(search="battery")] == ["p2", "p3"]
    assert "p5" not in [p.id for p in demo.list_products(status="active")]
    assert [p.id for p in demo.list_products(status="inactive")] == ["p5"]


def test_demo_debtors_exclude_cancelled_and_paid(demo):
    assert sorted(b.id for b in demo.debtors()) == ["s2", "s3"]


def test_demo_pay_due_closes_bill(demo):
    demo.pay_due("s2", 5000)
    bill = next(b for b in demo.billing_history() if b.id == "s2")
    assert bill.balance == 0
    assert bill.is_paid
    assert [b.id for b in demo.debtors()] == ["s3"]


def test_demo_restock_updates_stock_and_history(demo):
    demo.restock("p3", 6)
    assert next(p for p in demo.list_products() if p.id == "p3").stock_quantity == 6
    assert [e.quantity for e in demo.product_restock_history("p3")] == [6]
    assert 6 in [e.quantity for e in demo.restock_history("daily")]


def test_demo_create_bill_decrements_stock(demo):
    result = demo.create_bill(
        {
            "customer_id": "c4",
            "items": [
                {
                    "product_id": "p1",
                    "product_name": "Inverter 900VA",
                    "quantity": 2,
                    "unit_price": 5500,
                    "final_price": 5500,
                    "total": 11000,
                }
            ],
            "paid_amount": 1000,
            "next_service_date": (date.today() + timedelta(days=90)).isoformat(),
        }
    )
    bill = next(b for b in demo.billing_history() if b.id == result["id"])
    assert bill.customer_name == "Sunita Rao"
    assert bill.balance == 10000
    assert next(p for p in demo.list_products() if p.id == "p1").stock_quantity == 10
    assert bill in demo.debtors()


def test_demo_toggle_and_sales_report(demo):
    report = demo.sales_report("daily")
    assert [b.id for b in report.by_status("Cancelled")] == ["s4"]
    assert report.summary.count == 0

    demo.toggle_invoice_status("s4")
    report = demo.sales_report("daily")
    assert report.summary.count == 1
    assert report.summary.revenue == 5500


def test_demo_complete_service(demo):
    demo.complete_service("t2")
    assert "t2" not in [t.id for t in demo.upcoming_services()]
    with pytest.raises(KeyError):
        demo.complete_service("missing")


def test_demo_warranty_filters_and_paging(demo):
    assert [w.id for w in demo.list_warranties(filter_type="expired").items] == ["w3"]
    assert [w.id for w in demo.list_warranties(filter_type="expiring").items] == ["w2"]
    first = demo.list_warranties(page=1, page_size=2)
    assert first.total == 3
    assert first.has_more
    assert not demo.list_warranties(page=2, page_size=2).has_more

    demo.update_warranty("w1", "Claimed", "Display dead")
    claimed = demo.list_warranties(status="Claimed").items
    assert sorted(w.id for w in claimed) == ["w1", "w2"]


def test_demo_dashboard_metrics(demo):
    metrics = demo.dashboard_metrics()
    assert metrics.customers == 4
    assert metrics.sales == 18000 + 12000 + 1000
    assert metrics.low_stock >= 2


def test_demo_reference_lists(demo):
    assert [c["name"] for c in demo.reference_list("brands")] == ["Luminous", "Exide"]
    with pytest.raises(ValueError):
        demo.reference_list("colours")


def test_demo_customer_phone_must_be_unique(demo):
    assert demo.check_phone("98765 00001") == "Ravi Kumar"
    assert demo.check_phone("9999999999") is None
    with pytest.raises(ApiError) as excinfo:
        demo.create_customer(customer_payload("Ravi Again", "9876500001"))
    assert excinfo.value.status == 400
    assert "Ravi Kumar" in excinfo.value.detail

    demo.create_customer(customer_payload("Meena", "9999999999", "Station Road"))
    assert demo.check_phone("9999999999") == "Meena"


def test_demo_delete_customer_refuses_billing_history(demo):
    with pytest.raises(ApiError, match="400"):
        demo.delete_customer("c1")
    demo.delete_customer("c4")
    assert "c4" not in [c.id for c in demo.list_customers()]


def test_demo_customer_ledger_lists_open_bills(demo):
    ledger = demo.customer_ledger("c2")
    assert ledger.customer.name == "Anita Sharma"
    assert ledger.total_due == 5000
    assert [b.id for b in ledger.bills] == ["s2"]
    assert demo.customer_ledger("c4").bills == []


def test_demo_product_editing(demo):
    demo.create_product(product_payload("Charger", "b1", "k3", 300, 350))
    created = next(p for p in demo.list_products() if p.name == "Charger")
    assert (created.brand_name, created.category_name, created.sell_price) == ("Luminous", "Accessories", 350)

    demo.update_product("p3", product_payload("Battery Trolley XL", "b2", "k3", 420))
    trolley = next(p for p in demo.list_products() if p.id == "p3")
    assert (trolley.name, trolley.brand_name, trolley.sell_price) == ("Battery Trolley XL", "Exide", 420)

    demo.set_product_status("p1", False)
    assert "p1" in [p.id for p in demo.list_products(status="inactive")]


def test_demo_delete_product_refuses_sold_items(demo):
    with pytest.raises(ApiError, match="400"):
        demo.delete_product("p1")
    demo.delete_product("p3")
    assert "p3" not in [p.id for p in demo.list_products()]


def test_demo_reference_rename_reaches_products(demo):
    demo.save_reference("brands", {"name": "Luminous India"}, "b1")
    assert next(p for p in demo.list_products() if p.id == "p1").brand_name == "Luminous India"
    demo.save_reference("brands", {"name": "Amaron"})
    assert [b["name"] for b in demo.reference_list("brands")][-1] == "Amaron"


@pytest.mark.parametrize(
    "kind, item_id",
    [("brands", "b1"), ("categories", "k2"), ("categories", "k4"), ("sub-categories", "sk1")],
)
def test_demo_delete_reference_refuses_items_in_use(demo, kind, item_id):
    with pytest.raises(ApiError) as excinfo:
        demo.delete_reference(kind, item_id)
    assert excinfo.value.detail == "Delete failed. Item is in use."


def test_demo_delete_unused_reference(demo):
    demo.save_reference("categories", {"name": "Cables"})
    created = next(c for c in demo.reference_list("categories") if c["name"] == "Cables")
    demo.delete_reference("categories", created["id"])
    assert "Cables" not in [c["name"] for c in demo.reference_list("categories")]


def test_demo_task_lifecycle(demo):
    demo.assign_service(task_payload("c4", "e1", "2024-06-05", "Repair", "Fuse"))
    task = demo.list_services()[-1]
    assert (task.customer_name, task.technician, task.task_type) == ("Sunita Rao", "Arjun", "Repair")

    demo.update_service(task.id, task_payload("c4", None, "2024-06-07", "Inspection"))
    task = next(t for t in demo.list_services() if t.id == task.id)
    assert (task.technician, task.service_date, task.task_type) == (UNASSIGNED, "2024-06-07", "Inspection")

    demo.delete_service(task.id)
    assert task.id not in [t.id for t in demo.list_services()]


def test_demo_employee_add_and_remove(demo):
    demo.create_employee(employee_payload("Kiran", "9000000009"))
    kiran = demo.list_employees()[-1]
    assert (kiran.name, kiran.role) == ("Kiran", "Technician")
    demo.delete_employee(kiran.id)
    assert "Kiran" not in [e.name for e in demo.list_employees()]


# --- REST ---------------------------------------------------------------


def test_impl_customers_unwraps_data(impl, fake_session):
    fake_session.routes[("GET", f"{BASE_URL}/customers/")] = FakeResponse(
        {"data": [{"id": "c1", "name": "Ravi"}, {"id": "c2"}]}
    )
    customers = impl.list_customers()
    assert [c.name for c in customers] == ["Ravi", UNKNOWN_CUSTOMER]


def test_impl_products_sends_filters(impl, fake_session):
    fake_session.routes[("GET", f"{BASE_URL}/inventory/products")] = FakeResponse([{"id": "p1", "name": "Inverter"}])
    impl.list_products(search="  inv ", status="active")
    params = fake_session.calls[0][2]["params"]
    assert params == {"page": 1, "limit": 1000, "status": "active", "search": "inv"}


def test_impl_reference_lists_are_cached(impl, fake_session):
    fake_session.routes[("GET", f"{BASE_URL}/inventory/categories")] = FakeResponse([{"id": "k1", "name": "Inverters"}])
    assert impl.reference_list("categories") == [{"id": "k1", "name": "Inverters"}]
    assert impl.reference_list("categories") == [{"id": "k1", "name": "Inverters"}]
    assert len(fake_session.calls) == 1
    with pytest.raises(ValueError):
        impl.reference_list("colours")


def test_impl_sales_report(impl, fake_session):
    fake_session.routes[("GET", f"{BASE_URL}/billing/report")] = FakeResponse(
        {
            "bills": [{"id": "s1", "final_amount": 100}, {"id": "s2", "invoice_status": "Cancelled"}],
            "summary": {"count": 1, "revenue": "100", "profit": 20},
        }
    )
    report = impl.sales_report("custom", "2024-06-01", "2024-06-30")
    assert fake_session.calls[0][2]["params"] == {
        "period": "custom",
        "start_date": "2024-06-01",
        "end_date": "2024-06-30",
    }
    assert (report.summary.count, report.summary.revenue, report.summary.profit) == (1, 100.0, 20.0)
    assert [b.id for b in report.by_status("Cancelled")] == ["s2"]

    impl.sales_report("weekly", "2024-06-01", "2024-06-30")
    assert fake_session.calls[1][2]["params"] == {"period": "weekly"}


def test_impl_writes(impl, fake_session):
    for method, path in [
        ("POST", "/billing/pay-due"),
        ("POST", "/inventory/restock"),
        ("PUT", "/billing/s1/status"),
        ("PUT", "/services/t1/complete"),
        ("PUT", "/warranty/w1"),
    ]:
        fake_session.routes[(method, f"{BASE_URL}{path}")] = FakeResponse({"ok": True})

    impl.pay_due("s1", 250.0)
    impl.restock("p1", 4)
    impl.toggle_invoice_status("s1")
    impl.complete_service("t1")
    impl.update_warranty("w1", "Resolved", "Replaced")

    bodies = [call[2].get("json") for call in fake_session.calls]
    assert bodies == [
        {"sale_id": "s1", "amount_paying": 250.0},
        {"product_id": "p1", "quantity_arrived": 4},
        None,
        None,
        {"status": "Resolved", "notes": "Replaced"},
    ]


def test_impl_warranties_page(impl, fake_session):
    fake_session.routes[("GET", f"{BASE_URL}/warranty/list")] = FakeResponse(
        {"data": [{"id": f"w{i}"} for i in range(10)], "total": 25}
    )
    page = impl.list_warranties(page=2, page_size=10, search=" inv ", filter_type="expiring")
    assert page.total == 25
    assert page.has_more
    assert fake_session.calls[0][2]["params"] == {
        "page": 2,
        "limit": 10,
        "search": "inv",
        "status": "all",
        "filter_type": "expiring",
    }


def test_impl_dashboard_metrics_accepts_wrapped_payload(impl, fake_session):
    fake_session.routes[("GET", f"{BASE_URL}/dashboard/metrics")] = FakeResponse(
        {"data": {"customers": 12, "sales": "1500.5", "profit": 300, "services": 4, "lowStock": 2}}
    )
    metrics = impl.dashboard_metrics()
    assert (metrics.customers, metrics.sales, metrics.low_stock) == (12, 1500.5, 2)


def test_impl_errors_propagate(impl, fake_session):
    fake_session.routes[("GET", f"{BASE_URL}/accounts/debtors")] = FakeResponse({"detail": "boom"}, status_code=500)
    with pytest.raises(ApiError, match="500"):
        impl.debtors()


def test_impl_check_phone(impl, fake_session):
    route = ("GET", f"{BASE_URL}/customers/check-phone")
    fake_session.routes[route] = FakeResponse({"exists": True, "customer_name": "Ravi"})
    assert impl.check_phone("9876500001") == "Ravi"
    assert fake_session.calls[0][2]["params"] == {"phone": "9876500001"}

    fake_session.routes[route] = FakeResponse({"exists": True})
    assert impl.check_phone("9876500001") == "another customer"
    fake_session.routes[route] = FakeResponse({"exists": False})
    assert impl.check_phone("9876500009") is None


def test_impl_customer_ledger_sums_balances_when_total_missing(impl, fake_session):
    fake_session.routes[("GET", f"{BASE_URL}/customers/c2/ledger")] = FakeResponse(
        {
            "customer": {"id": "c2", "name": "Anita", "phone": "9876500002"},
            "bills": [{"id": "s2", "balance": 5000}, {"id": "s5", "balance": "250"}],
        }
    )
    ledger = impl.customer_ledger("c2")
    assert ledger.customer.name == "Anita"
    assert [b.id for b in ledger.bills] == ["s2", "s5"]
    assert ledger.total_due == 5250

    fake_session.routes[("GET", f"{BASE_URL}/customers/c2/ledger")] = FakeResponse({"total_due": 100})
    ledger = impl.customer_ledger("c2")
    assert (ledger.customer.id, ledger.total_due, ledger.bills) == ("c2", 100, [])


def test_impl_record_editing_writes(impl, fake_session):
    requests_made = [
        ("POST", "/customers"),
        ("DELETE", "/customers/c9"),
        ("POST", "/inventory/products"),
        ("PUT", "/inventory/products/p1"),
        ("PATCH", "/inventory/products/p1/status"),
        ("DELETE", "/inventory/products/p1"),
        ("POST", "/services/assign"),
        ("PUT", "/services/t1"),
        ("DELETE", "/services/t1"),
        ("POST", "/employees"),
        ("DELETE", "/employees/e9"),
    ]
    for method, path in requests_made:
        fake_session.routes[(method, f"{BASE_URL}{path}")] = FakeResponse({"ok": True})
    customer = customer_payload("Meena", "9999999999")
    product = product_payload("Charger", "b1", "k3", 300)
    task = task_payload("c1", "e1", "2024-06-05")
    employee = employee_payload("Kiran", "9000000009")

    impl.create_customer(customer)
    impl.delete_customer("c9")
    impl.create_product(product)
    impl.update_product("p1", product)
    impl.set_product_status("p1", False)
    impl.delete_product("p1")
    impl.assign_service(task)
    impl.update_service("t1", task)
    impl.delete_service("t1")
    impl.create_employee(employee)
    impl.delete_employee("e9")

    assert [(method, url) for method, url, _ in fake_session.calls] == [
        (method, f"{BASE_URL}{path}") for method, path in requests_made
    ]
    bodies = [call[2].get("json") for call in fake_session.calls]
    assert bodies == [customer, None, product, product, {"is_active": False}, None, task, task, None, employee, None]


def test_impl_reference_write_clears_cached_list(impl, fake_session):
    fake_session.routes[("GET", f"{BASE_URL}/inventory/brands")] = FakeResponse([{"id": "b1", "name": "Luminous"}])
    fake_session.routes[("PUT", f"{BASE_URL}/inventory/brands/b1")] = FakeResponse({"ok": True})
    fake_session.routes[("DELETE", f"{BASE_URL}/inventory/brands/b1")] = FakeResponse({"ok": True})

    impl.reference_list("brands")
    impl.save_reference("brands", {"name": "Luminous India"}, "b1")
    impl.reference_list("brands")
    impl.delete_reference("brands", "b1")
    impl.reference_list("brands")

    assert [(method, url.removeprefix(BASE_URL)) for method, url, _ in fake_session.calls] == [
        ("GET", "/inventory/brands"),
        ("PUT", "/inventory/brands/b1"),
        ("GET", "/inventory/brands"),
        ("DELETE", "/inventory/brands/b1"),
        ("GET", "/inventory/brands"),
    ]
    with pytest.raises(ValueError):
        impl.save_reference("colours", {"name": "Red"})


def test_impl_category_write_clears_sub_categories(impl, fake_session):
    fake_session.routes[("GET", f"{BASE_URL}/inventory/sub-categories")] = FakeResponse(
        [{"id": "sk1", "name": "Tubular", "category_id": "k2"}]
    )
    fake_session.routes[("POST", f"{BASE_URL}/inventory/categories")] = FakeResponse({"id": "k9"})

    impl.reference_list("sub-categories")
    impl.reference_list("sub-categories")
    assert len(fake_session.calls) == 1
    impl.save_reference("categories", {"name": "Solar"})
    impl.reference_list("sub-categories")
    assert [method for method, _, _ in fake_session.calls] == ["GET", "POST", "GET"]
    assert fake_session.calls[1][2]["json"] == {"name": "Solar"}
