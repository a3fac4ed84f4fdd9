"""
Record models for the entities served by the remote API.

The API is the source of truth and its payloads are loosely shaped:
relations such as ``users`` (the customer of a bill or task) and
``employees`` (the assigned technician) may be missing or null, and
numbers sometimes arrive as strings. Every ``from_payload`` parser below
wraps the raw mapping in a benedict so nested keys can be read by key path,
and substitutes explicit placeholders once, here, instead of in every
aggregation or render function.

    Bill
    ├── customer (users.name, users.phone)
    └── BillItem[]
    ServiceTask
    ├── customer (users.name)
    └── technician (employees.name)
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Sequence

from benedict import benedict

from erp_console.utils import parse_date, to_float, to_int

UNKNOWN_CUSTOMER = "Unknown"
UNASSIGNED = "Unassigned"
GENERAL_TASK = "General"
ACCEPTED = "Accepted"
CANCELLED = "Cancelled"
COMPLETED = "Completed"
PAID = "Paid"


def _wrap(payload: Mapping[str, Any] | None) -> benedict:
    return benedict(dict(payload or {}))


def _text(b: benedict, *keypaths: str, default: str = "") -> str:
    """Return the first non-empty value among ``keypaths`` as a string."""
    for keypath in keypaths:
        value = b.get(keypath)
        if value not in (None, ""):
            return str(value)
    return default


def _optional_text(b: benedict, *keypaths: str) -> str | None:
    return _text(b, *keypaths) or None


@dataclass(slots=True)
class Customer:
    """A customer as listed on the customers page."""

    id: str
    name: str
    phone: str = ""
    email: str = ""
    address: str = ""
    total_due: float = 0.0
    lifetime_billed: float = 0.0
    lifetime_paid: float = 0.0

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Customer":
        b = _wrap(payload)
        return cls(
            id=_text(b, "id"),
            name=_text(b, "name", default=UNKNOWN_CUSTOMER),
            phone=_text(b, "phone"),
            email=_text(b, "email"),
            address=_text(b, "address"),
            total_due=to_float(b.get("total_due")),
            lifetime_billed=to_float(b.get("lifetime_billed")),
            lifetime_paid=to_float(b.get("lifetime_paid")),
        )


@dataclass(slots=True)
class Product:
    """An inventory product with its pricing and stock levels."""

    id: str
    name: str
    sku: str = ""
    category_name: str = "Other"
    brand_name: str = ""
    brand_id: str = ""
    category_id: str = ""
    sub_category_id: str = ""
    stock_quantity: int = 0
    low_stock_limit: int = 5
    purchase_price: float = 0.0
    net_price: float = 0.0
    sell_price: float = 0.0
    warranty_details: str = ""
    is_active: bool = True

    @property
    def stock_value(self) -> float:
        """Return stock on hand valued at purchase price."""
        return self.stock_quantity * self.purchase_price

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Product":
        b = _wrap(payload)
        active = b.get("is_active")
        return cls(
            id=_text(b, "id"),
            name=_text(b, "name"),
            sku=_text(b, "sku"),
            category_name=_text(b, "category_name", "categories.name", default="Other"),
            brand_name=_text(b, "brand_name", "brands.name"),
            brand_id=_text(b, "brand_id", "brands.id"),
            category_id=_text(b, "category_id", "categories.id"),
            sub_category_id=_text(b, "sub_category_id", "sub_categories.id"),
            stock_quantity=to_int(b.get("stock_quantity")),
            low_stock_limit=to_int(b.get("low_stock_limit")) or 5,
            purchase_price=to_float(b.get("purchase_price")),
            net_price=to_float(b.get("net_price")),
            sell_price=to_float(b.get("sell_price")),
            is_active=True if active is None else bool(active),
            warranty_details=_text(b, "warranty_details"),
        )


@dataclass(slots=True)
class BillItem:
    """A line on a bill."""

    product_id: str
    product_name: str = ""
    quantity: int = 1
    unit_price: float = 0.0
    discount: float = 0.0
    final_price: float = 0.0
    total: float = 0.0

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "BillItem":
        b = _wrap(payload)
        quantity = to_int(b.get("quantity")) or 1
        final_price = to_float(b.get("final_price"), to_float(b.get("unit_price")))
        return cls(
            product_id=_text(b, "product_id"),
            product_name=_text(b, "product_name", "products.name"),
            quantity=quantity,
            unit_price=to_float(b.get("unit_price")),
            discount=to_float(b.get("discount")),
            final_price=final_price,
            total=to_float(b.get("total"), final_price * quantity),
        )


@dataclass(slots=True)
class Bill:
    """
    A finalized sale.

    Attributes:
        balance: Amount still owed; a bill with balance > 0 is open.
        invoice_status: Accepted or Cancelled; missing means Accepted.
    """

    id: str
    customer_id: str
    customer_name: str = UNKNOWN_CUSTOMER
    customer_phone: str = ""
    invoice_no: str = ""
    created_at: datetime | None = None
    final_amount: float = 0.0
    total_amount: float = 0.0
    paid_amount: float = 0.0
    balance: float = 0.0
    calculated_profit: float | None = None
    payment_status: str = ""
    invoice_status: str = ACCEPTED
    items: Sequence[BillItem] = field(default_factory=list)

    @property
    def amount(self) -> float:
        """Return the billed revenue, preferring the final amount."""
        return self.final_amount or self.total_amount

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PAID

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Bill":
        b = _wrap(payload)
        profit = b.get("calculated_profit")
        return cls(
            id=_text(b, "id"),
            customer_id=_text(b, "customer_id", "users.id"),
            customer_name=_text(b, "users.name", "customer_name", default=UNKNOWN_CUSTOMER),
            customer_phone=_text(b, "users.phone", "customer_phone"),
            invoice_no=_text(b, "invoice_no", "id"),
            created_at=parse_date(
                b.get("created_at") or b.get("sale_date") or b.get("date")
            ),
            final_amount=to_float(b.get("final_amount")),
            total_amount=to_float(b.get("total_amount")),
            paid_amount=to_float(b.get("paid_amount")),
            balance=to_float(b.get("balance")),
            calculated_profit=None if profit is None else to_float(profit),
            payment_status=_text(b, "payment_status"),
            invoice_status=_text(b, "invoice_status", default=ACCEPTED),
            items=[BillItem.from_payload(item) for item in b.get("items") or []],
        )


@dataclass(slots=True)
class ServiceTask:
    """A scheduled or completed service visit."""

    id: str
    customer_id: str = ""
    employee_id: str = ""
    customer_name: str = UNKNOWN_CUSTOMER
    technician: str = UNASSIGNED
    task_type: str = GENERAL_TASK
    status: str = ""
    service_date: str = ""
    next_service_date: str | None = None
    notes: str = ""

    @property
    def is_completed(self) -> bool:
        return self.status == COMPLETED

    @property
    def due_date(self) -> str:
        """Return the next service date, falling back to the service date."""
        return self.next_service_date or self.service_date

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ServiceTask":
        b = _wrap(payload)
        return cls(
            id=_text(b, "id"),
            customer_id=_text(b, "customer_id", "users.id"),
            employee_id=_text(b, "assigned_employee_id", "employee_id", "employees.id"),
            customer_name=_text(b, "users.name", default=UNKNOWN_CUSTOMER),
            technician=_text(b, "employees.name", default=UNASSIGNED),
            task_type=_text(b, "task_type", "service_type", default=GENERAL_TASK),
            status=_text(b, "status", "service_status"),
            service_date=_text(b, "service_date"),
            next_service_date=_optional_text(b, "next_service_date"),
            notes=_text(b, "notes"),
        )


@dataclass(slots=True)
class Warranty:
    """A product warranty registered against a sale."""

    id: str
    product_name: str = ""
    customer_name: str = UNKNOWN_CUSTOMER
    customer_phone: str = ""
    invoice_no: str = ""
    start_date: str = ""
    end_date: str = ""
    status: str = "Active"
    claim_notes: str = ""

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Warranty":
        b = _wrap(payload)
        return cls(
            id=_text(b, "id"),
            product_name=_text(b, "product_name"),
            customer_name=_text(b, "users.name", default=UNKNOWN_CUSTOMER),
            customer_phone=_text(b, "users.phone"),
            invoice_no=_text(b, "sales.invoice_no"),
            start_date=_text(b, "start_date"),
            end_date=_text(b, "end_date"),
            status=_text(b, "status", default="Active"),
            claim_notes=_text(b, "claim_notes"),
        )


@dataclass(slots=True)
class RestockEntry:
    """An inventory increase for one product."""

    product_id: str
    quantity: int
    created_at: datetime | None = None
    product_name: str = ""

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RestockEntry":
        b = _wrap(payload)
        return cls(
            product_id=_text(b, "product_id"),
            quantity=to_int(b.get("qty") if b.get("qty") is not None else b.get("quantity")),
            created_at=parse_date(b.get("created_at") or b.get("date")),
            product_name=_text(b, "product_name", "products.name"),
        )


@dataclass(slots=True)
class Employee:
    """A staff member who can be assigned service tasks."""

    id: str
    name: str
    role: str = ""
    phone: str = ""

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Employee":
        b = _wrap(payload)
        return cls(
            id=_text(b, "id"),
            name=_text(b, "name", default=UNASSIGNED),
            role=_text(b, "role"),
            phone=_text(b, "phone"),
        )


def parse_all(parser, payloads: Sequence[Mapping[str, Any]] | None) -> list:
    """Apply a ``from_payload`` parser to every mapping in ``payloads``."""
    return [parser(item) for item in payloads or [] if isinstance(item, Mapping)]
