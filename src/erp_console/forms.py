"""
Validation and request bodies for the record editors.

Each ``*_payload`` function takes raw form values, rejects incomplete input
with ValidationError, and returns the body the API expects. Nothing here
sends a request; the pages call the service with the returned body.
"""

from datetime import date
from typing import Any, Sequence

from erp_console.billing import ValidationError
from erp_console.utils import parse_date, to_float

PHONE_DIGITS = 10
DEFAULT_ROLE = "Technician"
EMPLOYEE_ROLES = (DEFAULT_ROLE, "Manager", "Sales")
DEFAULT_TASK_TYPE = "General Service"
TASK_TYPES = (DEFAULT_TASK_TYPE, "Installation", "Repair", "Inspection")


def _required(value: Any, label: str) -> str:
    text = str(value or "").strip()
    if not text:
        raise ValidationError(f"{label} is required.")
    return text


def normalize_phone(value: str | None) -> str:
    """Strip spaces, dashes and other separators from a phone number."""
    return "".join(ch for ch in str(value or "") if ch.isdigit())


def is_complete_phone(value: str | None) -> bool:
    """Return True once a number has enough digits to check for duplicates."""
    return len(normalize_phone(value)) >= PHONE_DIGITS


def _phone(value: str | None) -> str:
    phone = normalize_phone(value)
    if len(phone) < PHONE_DIGITS:
        raise ValidationError(f"Phone must have at least {PHONE_DIGITS} digits.")
    return phone


def customer_payload(name: str | None, phone: str | None, address: str | None = None) -> dict:
    """Build the ``POST /customers`` body."""
    return {
        "name": _required(name, "Name"),
        "phone": _phone(phone),
        "address": (address or "").strip(),
    }


def employee_payload(name: str | None, phone: str | None, role: str | None = None) -> dict:
    """Build the ``POST /employees`` body; the role defaults to Technician."""
    return {
        "name": _required(name, "Name"),
        "phone": _phone(phone),
        "role": role or DEFAULT_ROLE,
    }


def task_payload(
    customer_id: str | None,
    employee_id: str | None,
    service_date: date | str | None,
    task_type: str | None = None,
    notes: str | None = None,
) -> dict:
    """
    Build the body for assigning or editing a service task.

    Args:
        customer_id: Required customer.
        employee_id: Technician, or empty for an unassigned task.
        service_date: Visit date as a date or ISO string.
        task_type: One of TASK_TYPES; defaults to General Service.
        notes: Free text for the technician.
    """
    customer = _required(customer_id, "Customer")
    if isinstance(service_date, str):
        parsed = parse_date(service_date)
        service_date = parsed.date() if parsed else None
    if service_date is None:
        raise ValidationError("Service date is required.")
    return {
        "customer_id": customer,
        "employee_id": employee_id or None,
        "service_date": service_date.isoformat(),
        "task_type": task_type or DEFAULT_TASK_TYPE,
        "notes": (notes or "").strip(),
    }


def product_payload(
    name: str | None,
    brand_id: str | None,
    category_id: str | None,
    net_price: Any,
    sell_price: Any = None,
    sku: str | None = None,
    sub_category_id: str | None = None,
    warranty_details: str | None = None,
    is_active: bool = True,
) -> dict:
    """
    Build the body for creating or updating a product.

    Name, brand, category and a positive net price are required. An empty
    sell price falls back to the net price.
    """
    product_name = _required(name, "Name")
    brand = _required(brand_id, "Brand")
    category = _required(category_id, "Category")
    net = to_float(net_price)
    if net <= 0:
        raise ValidationError("Net price must be greater than zero.")
    sell = to_float(sell_price, net) if sell_price not in (None, "") else net
    if sell < 0:
        raise ValidationError("Sell price cannot be negative.")
    return {
        "name": product_name,
        "sku": (sku or "").strip() or None,
        "brand_id": brand,
        "category_id": category,
        "sub_category_id": sub_category_id or None,
        "net_price": net,
        "sell_price": sell,
        "warranty_details": (warranty_details or "").strip(),
        "is_active": bool(is_active),
    }


def reference_payload(kind: str, name: str | None, category_id: str | None = None) -> dict:
    """Build the body for a brand, category or sub-category; sub-categories need a parent."""
    payload = {"name": _required(name, "Name")}
    if kind == "sub-categories":
        payload["category_id"] = _required(category_id, "Parent category")
    return payload


def sub_categories_of(sub_categories: Sequence[dict], category_id: str | None) -> list[dict]:
    """Return the sub-categories under ``category_id``; none without a category."""
    if not category_id:
        return []
    return [s for s in sub_categories if str(s.get("category_id")) == str(category_id)]
