from datetime import date

import pytest

from erp_console.billing import ValidationError
from erp_console.forms import (
    DEFAULT_ROLE,
    DEFAULT_TASK_TYPE,
    customer_payload,
    employee_payload,
    is_complete_phone,
    normalize_phone,
    product_payload,
    reference_payload,
    sub_categories_of,
    task_payload,
)


def test_phone_normalization():
    assert normalize_phone(" 98765-00001 ") == "9876500001"
    assert normalize_phone(None) == ""
    assert is_complete_phone("98765 00001")
    assert not is_complete_phone("98765")


def test_customer_payload():
    assert customer_payload(" Ravi ", "98765 00001", None) == {
        "name": "Ravi",
        "phone": "9876500001",
        "address": "",
    }
    with pytest.raises(ValidationError, match="Name is required"):
        customer_payload("  ", "9876500001")
    with pytest.raises(ValidationError, match="10 digits"):
        customer_payload("Ravi", "98765")


def test_employee_payload_defaults_role():
    assert employee_payload("Arjun", "9000000001")["role"] == DEFAULT_ROLE
    assert employee_payload("Priya", "9000000003", "Manager")["role"] == "Manager"


def test_task_payload():
    payload = task_payload("c1", "", "2024-06-05", None, " check water ")
    assert payload == {
        "customer_id": "c1",
        "employee_id": None,
        "service_date": "2024-06-05",
        "task_type": DEFAULT_TASK_TYPE,
        "notes": "check water",
    }
    assert task_payload("c1", "e1", date(2024, 6, 5), "Repair")["employee_id"] == "e1"


@pytest.mark.parametrize(
    "customer_id, service_date, message",
    [
        (None, "2024-06-05", "Customer is required"),
        ("c1", None, "Service date is required"),
        ("c1", "not a date", "Service date is required"),
    ],
)
def test_task_payload_requires_customer_and_date(customer_id, service_date, message):
    with pytest.raises(ValidationError, match=message):
        task_payload(customer_id, None, service_date)


def test_product_payload_sell_price_falls_back_to_net():
    payload = product_payload("Inverter", "b1", "k1", "4800", "", sku="  ")
    assert payload["net_price"] == 4800.0
    assert payload["sell_price"] == 4800.0
    assert payload["sku"] is None
    assert payload["sub_category_id"] is None
    assert payload["is_active"] is True
    assert product_payload("Inverter", "b1", "k1", 4800, 5500)["sell_price"] == 5500.0


@pytest.mark.parametrize(
    "args, message",
    [
        (("", "b1", "k1", 100), "Name is required"),
        (("Inverter", None, "k1", 100), "Brand is required"),
        (("Inverter", "b1", "", 100), "Category is required"),
        (("Inverter", "b1", "k1", 0), "Net price"),
        (("Inverter", "b1", "k1", "abc"), "Net price"),
        (("Inverter", "b1", "k1", 100, -5), "Sell price"),
    ],
)
def test_product_payload_rejects_incomplete_input(args, message):
    with pytest.raises(ValidationError, match=message):
        product_payload(*args)


def test_reference_payload():
    assert reference_payload("brands", " Exide ") == {"name": "Exide"}
    assert reference_payload("sub-categories", "Tubular", "k2") == {"name": "Tubular", "category_id": "k2"}
    with pytest.raises(ValidationError, match="Parent category"):
        reference_payload("sub-categories", "Tubular")


def test_sub_categories_of():
    subs = [{"id": "sk1", "category_id": "k2"}, {"id": "sk2", "category_id": 3}]
    assert sub_categories_of(subs, "k2") == [subs[0]]
    assert sub_categories_of(subs, "3") == [subs[1]]
    assert sub_categories_of(subs, None) == []
