from datetime import datetime

from erp_console.models.records import (
    UNASSIGNED,
    UNKNOWN_CUSTOMER,
    Bill,
    Product,
    RestockEntry,
    ServiceTask,
    Warranty,
    parse_all,
)


def test_bill_without_customer_relation_gets_placeholder():
    bill = Bill.from_payload(
        {
            "id": "s3",
            "customer_id": "c3",
            "users": None,
            "date": "2024-06-01",
            "total_amount": "1000",
            "balance": 1000,
        }
    )
    assert bill.customer_name == UNKNOWN_CUSTOMER
    assert bill.customer_phone == ""
    assert bill.created_at == datetime(2024, 6, 1)
    assert bill.amount == 1000.0
    assert bill.invoice_no == "s3"
    assert bill.invoice_status == "Accepted"
    assert bill.calculated_profit is None


def test_bill_reads_nested_customer_and_items():
    bill = Bill.from_payload(
        {
            "id": "s1",
            "invoice_no": "GP-1001",
            "users": {"id": "c1", "name": "Ravi", "phone": "98765"},
            "created_at": "2024-06-01T10:15:00Z",
            "final_amount": 1100,
            "total_amount": 1200,
            "calculated_profit": "150.5",
            "items": [{"product_id": "p1", "quantity": 2, "unit_price": 550}],
        }
    )
    assert bill.customer_id == "c1"
    assert bill.customer_name == "Ravi"
    assert bill.amount == 1100.0
    assert bill.calculated_profit == 150.5
    assert bill.created_at == datetime(2024, 6, 1, 10, 15)
    assert bill.items[0].final_price == 550.0
    assert bill.items[0].total == 1100.0


def test_service_task_without_technician():
    task = ServiceTask.from_payload(
        {"id": "t4", "users": None, "employees": None, "status": "Pending", "service_date": "2024-06-02"}
    )
    assert task.customer_name == UNKNOWN_CUSTOMER
    assert task.technician == UNASSIGNED
    assert task.task_type == "General"
    assert task.due_date == "2024-06-02"


def test_service_task_alternate_field_names():
    task = ServiceTask.from_payload(
        {
            "id": "t3",
            "employees": {"name": "Vikram"},
            "service_type": "Repair",
            "service_status": "Completed",
            "service_date": "2024-06-01",
            "next_service_date": "2024-12-01",
        }
    )
    assert task.task_type == "Repair"
    assert task.is_completed
    assert task.due_date == "2024-12-01"


def test_product_coerces_numeric_strings():
    product = Product.from_payload(
        {
            "id": "p4",
            "name": "Distilled Water",
            "categories": {"name": "Accessories"},
            "brands": None,
            "stock_quantity": "40",
            "purchase_price": "60",
            "sell_price": "100",
        }
    )
    assert product.stock_quantity == 40
    assert product.stock_value == 2400.0
    assert product.category_name == "Accessories"
    assert product.brand_name == ""
    assert product.is_active
    assert product.low_stock_limit == 5


def test_warranty_reads_invoice_from_sale():
    warranty = Warranty.from_payload({"id": "w1", "sales": {"invoice_no": "GP-1"}, "users": None})
    assert warranty.invoice_no == "GP-1"
    assert warranty.customer_name == UNKNOWN_CUSTOMER
    assert warranty.status == "Active"


def test_restock_entry_accepts_qty_or_quantity():
    short = RestockEntry.from_payload({"product_id": "p1", "qty": 5, "date": "2024-06-01"})
    long = RestockEntry.from_payload({"product_id": "p1", "quantity": "3", "created_at": "2024-06-01T08:00:00"})
    assert (short.quantity, long.quantity) == (5, 3)
    assert short.created_at.date() == long.created_at.date()


def test_parse_all_skips_non_mappings():
    bills = parse_all(Bill.from_payload, [{"id": "s1"}, None, "junk"])
    assert [b.id for b in bills] == ["s1"]
    assert parse_all(Bill.from_payload, None) == []


def test_product_ignores_non_finite_numbers():
    product = Product.from_payload(
        {"id": "p9", "name": "LED Lamp", "stock_quantity": "NaN", "purchase_price": "inf", "sell_price": float("-inf")}
    )
    assert product.stock_quantity == 0
    assert product.purchase_price == 0.0
    assert product.sell_price == 0.0


def test_product_reads_reference_ids_from_relations_or_fields():
    nested = Product.from_payload(
        {
            "id": "p2",
            "name": "Battery",
            "brands": {"id": "b2", "name": "Exide"},
            "categories": {"id": "k2", "name": "Batteries"},
            "sub_categories": {"id": "sk1", "name": "Tubular"},
            "warranty_details": "36 months",
        }
    )
    assert (nested.brand_id, nested.category_id, nested.sub_category_id) == ("b2", "k2", "sk1")
    assert nested.warranty_details == "36 months"

    flat = Product.from_payload({"id": "p5", "name": "Panel", "category_id": 4, "brands": None})
    assert (flat.brand_id, flat.category_id, flat.sub_category_id) == ("", "4", "")


def test_service_task_reads_customer_and_employee_ids():
    task = ServiceTask.from_payload(
        {"id": "t1", "users": {"id": "c1", "name": "Ravi"}, "assigned_employee_id": "e2", "employees": {"id": "e1"}}
    )
    assert (task.customer_id, task.employee_id) == ("c1", "e2")
    task = ServiceTask.from_payload({"id": "t2", "employees": {"id": "e1", "name": "Arjun"}})
    assert (task.customer_id, task.employee_id) == ("", "e1")
