"""
Demo payloads shaped like the remote API responses.

Dates are laid out relative to the import day so the heatmap, the monthly
chart and the due-tomorrow reminder always have something to show. Some
records deliberately omit relations (no ``users`` on a bill, no
``employees`` on a task) the way the live API sometimes does.
"""

from datetime import date, timedelta

_TODAY = date.today()


def _day(offset: int) -> str:
    return (_TODAY + timedelta(days=offset)).isoformat()


def _month_start(months_back: int) -> str:
    year, month = _TODAY.year, _TODAY.month - months_back
    while month < 1:
        month += 12
        year -= 1
    return date(year, month, 5).isoformat()


DEMO_CUSTOMERS = [
    {"id": "c1", "name": "Ravi Kumar", "phone": "9876500001", "address": "MG Road"},
    {"id": "c2", "name": "Anita Sharma", "phone": "9876500002", "address": "Park Street"},
    {"id": "c3", "name": "Mohan Das", "phone": "9876500003", "address": "Lake View"},
    {"id": "c4", "name": "Sunita Rao", "phone": "9876500004"},
]

DEMO_EMPLOYEES = [
    {"id": "e1", "name": "Arjun", "role": "Technician", "phone": "9000000001"},
    {"id": "e2", "name": "Vikram", "role": "Technician", "phone": "9000000002"},
    {"id": "e3", "name": "Priya", "role": "Manager", "phone": "9000000003"},
]

DEMO_PRODUCTS = [
    {
        "id": "p1",
        "name": "Inverter 900VA",
        "sku": "INV-900",
        "categories": {"id": "k1", "name": "Inverters"},
        "brands": {"id": "b1", "name": "Luminous"},
        "stock_quantity": 12,
        "low_stock_limit": 3,
        "purchase_price": 4200,
        "net_price": 4800,
        "sell_price": 5500,
        "is_active": True,
    },
    {
        "id": "p2",
        "name": "Tubular Battery 150Ah",
        "sku": "BAT-150",
        "categories": {"id": "k2", "name": "Batteries"},
        "brands": {"id": "b2", "name": "Exide"},
        "sub_category_id": "sk1",
        "warranty_details": "36 months replacement",
        "stock_quantity": 4,
        "low_stock_limit": 5,
        "purchase_price": 9800,
        "net_price": 11000,
        "sell_price": 12500,
        "is_active": True,
    },
    {
        "id": "p3",
        "name": "Battery Trolley",
        "sku": "ACC-TRL",
        "categories": {"id": "k3", "name": "Accessories"},
        "stock_quantity": 0,
        "purchase_price": 350,
        "net_price": 420,
        "sell_price": 500,
        "is_active": True,
    },
    {
        "id": "p4",
        "name": "Distilled Water 5L",
        "sku": "ACC-H2O",
        "categories": {"id": "k3", "name": "Accessories"},
        "stock_quantity": "40",
        "purchase_price": "60",
        "net_price": "80",
        "sell_price": "100",
    },
    {
        "id": "p5",
        "name": "Solar Panel 330W",
        "sku": "SOL-330",
        "category_name": "Solar",
        "category_id": "k4",
        "brands": None,
        "stock_quantity": 2,
        "purchase_price": 8000,
        "net_price": 9000,
        "sell_price": 10500,
        "is_active": False,
    },
]

DEMO_BILLS = [
    {
        "id": "s1",
        "invoice_no": "GP-1001",
        "customer_id": "c1",
        "users": {"id": "c1", "name": "Ravi Kumar", "phone": "9876500001"},
        "created_at": _month_start(2) + "T10:15:00Z",
        "total_amount": 18000,
        "final_amount": 18000,
        "paid_amount": 18000,
        "balance": 0,
        "payment_status": "Paid",
        "items": [
            {"product_id": "p1", "product_name": "Inverter 900VA", "quantity": 1, "unit_price": 5500},
            {"product_id": "p2", "product_name": "Tubular Battery 150Ah", "quantity": 1, "unit_price": 12500},
        ],
    },
    {
        "id": "s2",
        "invoice_no": "GP-1002",
        "customer_id": "c2",
        "users": {"id": "c2", "name": "Anita Sharma", "phone": "9876500002"},
        "created_at": _month_start(1) + "T12:00:00Z",
        "total_amount": 12500,
        "final_amount": 12000,
        "paid_amount": 7000,
        "balance": 5000,
        "payment_status": "Partial",
        "items": [
            {
                "product_id": "p2",
                "product_name": "Tubular Battery 150Ah",
                "quantity": 1,
                "unit_price": 12500,
                "discount": 500,
            },
        ],
    },
    {
        "id": "s3",
        "invoice_no": "GP-1003",
        "customer_id": "c3",
        "users": None,
        "date": _day(-1),
        "total_amount": 1000,
        "paid_amount": 0,
        "balance": 1000,
        "payment_status": "Pending",
        "items": [
            {"product_id": "p4", "product_name": "Distilled Water 5L", "quantity": 10, "unit_price": 100},
        ],
    },
    {
        "id": "s4",
        "invoice_no": "GP-1004",
        "customer_id": "c2",
        "users": {"id": "c2", "name": "Anita Sharma", "phone": "9876500002"},
        "created_at": _day(0) + "T09:30:00Z",
        "total_amount": 5500,
        "final_amount": 5500,
        "paid_amount": 5500,
        "balance": 0,
        "payment_status": "Paid",
        "invoice_status": "Cancelled",
        "items": [
            {"product_id": "p1", "product_name": "Inverter 900VA", "quantity": 1, "unit_price": 5500},
        ],
    },
]

DEMO_SERVICES = [
    {
        "id": "t1",
        "users": {"id": "c1", "name": "Ravi Kumar"},
        "employees": {"id": "e1", "name": "Arjun"},
        "task_type": "Installation",
        "status": "Completed",
        "service_date": _day(-6),
        "notes": "Inverter mounted",
    },
    {
        "id": "t2",
        "users": {"id": "c2", "name": "Anita Sharma"},
        "employees": {"id": "e1", "name": "Arjun"},
        "task_type": "Battery Check",
        "status": "Pending",
        "service_date": _day(-2),
        "next_service_date": _day(1),
    },
    {
        "id": "t3",
        "users": {"id": "c3", "name": "Mohan Das"},
        "employees": {"id": "e2", "name": "Vikram"},
        "service_type": "Repair",
        "service_status": "Completed",
        "service_date": _day(-2),
    },
    {
        "id": "t4",
        "users": None,
        "employees": None,
        "status": "Pending",
        "service_date": _day(1),
        "notes": "Walk-in request",
    },
    {
        "id": "t5",
        "users": {"id": "c4", "name": "Sunita Rao"},
        "employees": {"id": "e2", "name": "Vikram"},
        "task_type": "Battery Check",
        "status": "Pending",
        "service_date": _day(3),
    },
]

DEMO_WARRANTIES = [
    {
        "id": "w1",
        "product_name": "Inverter 900VA",
        "users": {"name": "Ravi Kumar", "phone": "9876500001"},
        "sales": {"invoice_no": "GP-1001"},
        "start_date": _month_start(2),
        "end_date": _day(700),
        "status": "Active",
    },
    {
        "id": "w2",
        "product_name": "Tubular Battery 150Ah",
        "users": {"name": "Anita Sharma", "phone": "9876500002"},
        "sales": {"invoice_no": "GP-1002"},
        "start_date": _month_start(1),
        "end_date": _day(20),
        "status": "Claimed",
        "claim_notes": "Backup dropping",
    },
    {
        "id": "w3",
        "product_name": "Battery Trolley",
        "users": None,
        "sales": None,
        "start_date": _day(-400),
        "end_date": _day(-35),
        "status": "Active",
    },
]

DEMO_RESTOCKS = [
    {"product_id": "p1", "products": {"name": "Inverter 900VA"}, "qty": 5, "created_at": _day(-9) + "T11:00:00"},
    {"product_id": "p2", "products": {"name": "Tubular Battery 150Ah"}, "qty": 3, "created_at": _day(-9) + "T15:00:00"},
    {"product_id": "p4", "products": {"name": "Distilled Water 5L"}, "quantity": 20, "date": _day(-3)},
]

DEMO_BRANDS = [{"id": "b1", "name": "Luminous"}, {"id": "b2", "name": "Exide"}]
DEMO_CATEGORIES = [
    {"id": "k1", "name": "Inverters"},
    {"id": "k2", "name": "Batteries"},
    {"id": "k3", "name": "Accessories"},
    {"id": "k4", "name": "Solar"},
]
DEMO_SUB_CATEGORIES = [{"id": "sk1", "name": "Tubular", "category_id": "k2"}]
