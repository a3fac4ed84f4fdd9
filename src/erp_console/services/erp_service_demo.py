"""
Demo implementation of ErpService using in-memory data.

This service is useful for:
- Local development without a running API
- Testing pages and callbacks with realistic data
- Demonstrating the console offline

Fixtures are parsed with the same ``from_payload`` parsers as live
responses. Writes mutate the in-memory copies so pay-due, restock and
status toggles are visible on the next read.

Writes the live API refuses (a duplicate phone, deleting a customer with
bills, deleting a brand still on a product) raise the same 400 ApiError.
"""

import copy
import itertools
from datetime import date, datetime, timedelta
from typing import Sequence

from erp_console import aggregators
from erp_console.data import demo_records
from erp_console.forms import normalize_phone
from erp_console.lib import logs
from erp_console.lib.clients import ApiError
from erp_console.models.common import (
    CustomerLedger,
    DashboardMetrics,
    ListPage,
    SalesReport,
    SalesSummary,
)
from erp_console.models.records import (
    ACCEPTED,
    CANCELLED,
    COMPLETED,
    GENERAL_TASK,
    PAID,
    UNASSIGNED,
    UNKNOWN_CUSTOMER,
    Bill,
    BillItem,
    Customer,
    Employee,
    Product,
    RestockEntry,
    ServiceTask,
    Warranty,
    parse_all,
)
from erp_console.services.erp_service import REFERENCE_KINDS, ErpService
from erp_console.utils import matches_query, parse_date

LOG = logs.logger(__file__)

_EXPIRING_WINDOW = timedelta(days=30)


def _rejected(request: str, detail: str) -> ApiError:
    """Build the error the API returns when it refuses a write."""
    return ApiError(f"{request} returned 400", status=400, detail=detail)


class DemoErpService(ErpService):
    """
    In-memory ERP service backed by the demo fixtures.

    Attributes:
        today: Reference day for reports, warranty filters and reminders.
    """

    def __init__(self, today: date | None = None) -> None:
        """
        Initialize with fresh copies of the demo fixtures.

        Args:
            today: Reference day, or None for the current date.
        """
        self.today = today or date.today()
        self._customers: list[Customer] = parse_all(Customer.from_payload, demo_records.DEMO_CUSTOMERS)
        self._products: list[Product] = parse_all(Product.from_payload, demo_records.DEMO_PRODUCTS)
        self._bills: list[Bill] = parse_all(Bill.from_payload, demo_records.DEMO_BILLS)
        self._services: list[ServiceTask] = parse_all(ServiceTask.from_payload, demo_records.DEMO_SERVICES)
        self._employees: list[Employee] = parse_all(Employee.from_payload, demo_records.DEMO_EMPLOYEES)
        self._warranties: list[Warranty] = parse_all(Warranty.from_payload, demo_records.DEMO_WARRANTIES)
        self._restocks: list[RestockEntry] = parse_all(RestockEntry.from_payload, demo_records.DEMO_RESTOCKS)
        self._reference = {
            "brands": copy.deepcopy(demo_records.DEMO_BRANDS),
            "categories": copy.deepcopy(demo_records.DEMO_CATEGORIES),
            "sub-categories": copy.deepcopy(demo_records.DEMO_SUB_CATEGORIES),
        }
        self._ids = itertools.count(len(self._bills) + 1)
        self._seq = itertools.count(100)

    # --- Customers -------------------------------------------------------

    def list_customers(self) -> Sequence[Customer]:
        return list(self._customers)

    def check_phone(self, phone: str) -> str | None:
        wanted = normalize_phone(phone)
        match = next((c for c in self._customers if wanted and normalize_phone(c.phone) == wanted), None)
        return match.name if match else None

    def create_customer(self, payload: dict) -> None:
        owner = self.check_phone(payload["phone"])
        if owner:
            raise _rejected("POST /customers", f"Phone number already used by {owner}")
        customer = Customer(
            id=f"c{next(self._seq)}",
            name=payload["name"],
            phone=payload["phone"],
            address=payload.get("address", ""),
        )
        self._customers.append(customer)
        LOG.info("Demo customer %s created", customer.name)

    def delete_customer(self, customer_id: str) -> None:
        customer = self._customer(customer_id)
        if any(b.customer_id == customer_id for b in self._bills):
            raise _rejected(f"DELETE /customers/{customer_id}", "Cannot delete: customer has billing history.")
        self._customers.remove(customer)

    def customer_ledger(self, customer_id: str) -> CustomerLedger:
        customer = self._customer(customer_id)
        bills = [b for b in self.debtors() if b.customer_id == customer_id]
        return CustomerLedger(customer=customer, total_due=sum(b.balance for b in bills), bills=bills)

    # --- Inventory -------------------------------------------------------

    def list_products(self, search: str | None = None, status: str = "all") -> Sequence[Product]:
        products = [p for p in self._products if matches_query((p.name, p.sku), search)]
        if status == "active":
            products = [p for p in products if p.is_active]
        elif status == "inactive":
            products = [p for p in products if not p.is_active]
        return products

    def reference_list(self, kind: str) -> Sequence[dict]:
        return list(self._reference_items(kind))

    def create_product(self, payload: dict) -> None:
        product = Product(id=f"p{next(self._seq)}", name=payload["name"])
        self._apply_product(product, payload)
        self._products.append(product)
        LOG.info("Demo product %s created", product.name)

    def update_product(self, product_id: str, payload: dict) -> None:
        self._apply_product(self._product(product_id), payload)

    def delete_product(self, product_id: str) -> None:
        product = self._product(product_id)
        if any(item.product_id == product_id for bill in self._bills for item in bill.items):
            raise _rejected(
                f"DELETE /inventory/products/{product_id}", "Product is on a bill; mark it inactive instead."
            )
        self._products.remove(product)

    def set_product_status(self, product_id: str, is_active: bool) -> None:
        self._product(product_id).is_active = is_active

    def save_reference(self, kind: str, payload: dict, item_id: str | None = None) -> None:
        items = self._reference_items(kind)
        if item_id:
            item = next((i for i in items if i["id"] == item_id), None)
            if item is None:
                raise KeyError(item_id)
            item.update(payload)
            self._rename_reference(kind, item)
        else:
            items.append({"id": f"{kind[0]}{next(self._seq)}", **payload})

    def delete_reference(self, kind: str, item_id: str) -> None:
        items = self._reference_items(kind)
        if item_id not in {i["id"] for i in items}:
            raise KeyError(item_id)
        field_name = {"brands": "brand_id", "categories": "category_id", "sub-categories": "sub_category_id"}[kind]
        in_use = any(getattr(p, field_name) == item_id for p in self._products)
        if kind == "categories":
            in_use = in_use or any(s.get("category_id") == item_id for s in self._reference["sub-categories"])
        if in_use:
            raise _rejected(f"DELETE /inventory/{kind}/{item_id}", "Delete failed. Item is in use.")
        self._reference[kind] = [i for i in items if i["id"] != item_id]

    def restock(self, product_id: str, quantity: int) -> None:
        product = self._product(product_id)
        product.stock_quantity += quantity
        self._restocks.append(
            RestockEntry(
                product_id=product.id,
                quantity=quantity,
                created_at=datetime.now(),
                product_name=product.name,
            )
        )
        LOG.info("Demo restock: %s +%d", product.name, quantity)

    def restock_history(self, period: str = "monthly") -> Sequence[RestockEntry]:
        start = self._period_start(period)
        return [e for e in self._restocks if e.created_at and e.created_at.date() >= start]

    def product_restock_history(self, product_id: str) -> Sequence[RestockEntry]:
        return [e for e in self._restocks if e.product_id == product_id]

    # --- Billing ---------------------------------------------------------

    def billing_history(self) -> Sequence[Bill]:
        return list(self._bills)

    def debtors(self) -> Sequence[Bill]:
        return [b for b in self._bills if b.balance > 0 and b.invoice_status != CANCELLED]

    def sales_report(
        self,
        period: str = "daily",
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> SalesReport:
        if period == "custom":
            start = parse_date(start_date)
            end = parse_date(end_date)
            first = start.date() if start else date.min
            last = end.date() if end else self.today
        else:
            first, last = self._period_start(period), self.today
        bills = [
            b for b in self._bills if b.created_at and first <= b.created_at.date() <= last
        ]
        accepted = [b for b in bills if b.invoice_status == ACCEPTED]
        products_by_id = {p.id: p for p in self._products}
        revenue = sum(b.amount for b in accepted)
        cost = sum(aggregators.bill_cost(b, products_by_id) for b in accepted)
        return SalesReport(
            bills=bills,
            summary=SalesSummary(count=len(accepted), revenue=revenue, profit=revenue - cost),
        )

    def create_bill(self, payload: dict) -> dict:
        customer = next((c for c in self._customers if c.id == payload["customer_id"]), None)
        items = [
            BillItem(
                product_id=item["product_id"],
                product_name=item.get("product_name", ""),
                quantity=item["quantity"],
                unit_price=item["unit_price"],
                discount=item.get("discount", 0.0),
                final_price=item["final_price"],
                total=item["total"],
            )
            for item in payload["items"]
        ]
        total = sum(item.total for item in items)
        paid = payload.get("paid_amount", 0.0)
        number = next(self._ids)
        bill = Bill(
            id=f"s{number}",
            customer_id=payload["customer_id"],
            customer_name=customer.name if customer else UNKNOWN_CUSTOMER,
            customer_phone=customer.phone if customer else "",
            invoice_no=f"GP-{1000 + number}",
            created_at=datetime.now(),
            final_amount=total,
            total_amount=total,
            paid_amount=paid,
            balance=total - paid,
            payment_status=PAID if paid >= total else "Partial" if paid else "Pending",
            items=items,
        )
        for item in items:
            self._product(item.product_id).stock_quantity -= item.quantity
        self._bills.append(bill)
        if payload.get("next_service_date"):
            self._services.append(
                ServiceTask(
                    id=f"t{next(self._seq)}",
                    customer_id=bill.customer_id,
                    customer_name=bill.customer_name,
                    status="Pending",
                    service_date=payload["next_service_date"],
                )
            )
        LOG.info("Demo bill %s created for %s", bill.invoice_no, bill.customer_name)
        return {"id": bill.id, "invoice_no": bill.invoice_no}

    def pay_due(self, bill_id: str, amount: float) -> None:
        bill = self._bill(bill_id)
        bill.paid_amount += amount
        bill.balance = max(bill.balance - amount, 0.0)
        bill.payment_status = PAID if bill.balance == 0 else "Partial"

    def toggle_invoice_status(self, bill_id: str) -> None:
        bill = self._bill(bill_id)
        bill.invoice_status = ACCEPTED if bill.invoice_status == CANCELLED else CANCELLED

    # --- Services --------------------------------------------------------

    def upcoming_services(self) -> Sequence[ServiceTask]:
        today = self.today.isoformat()
        return [t for t in self._services if not t.is_completed and t.due_date >= today]

    def list_services(self) -> Sequence[ServiceTask]:
        return list(self._services)

    def complete_service(self, task_id: str) -> None:
        self._task(task_id).status = COMPLETED

    def assign_service(self, payload: dict) -> None:
        task = ServiceTask(id=f"t{next(self._seq)}", status="Pending")
        self._apply_task(task, payload)
        self._services.append(task)
        LOG.info("Demo task %s assigned to %s", task.task_type, task.technician)

    def update_service(self, task_id: str, payload: dict) -> None:
        self._apply_task(self._task(task_id), payload)

    def delete_service(self, task_id: str) -> None:
        self._services.remove(self._task(task_id))

    def list_employees(self) -> Sequence[Employee]:
        return list(self._employees)

    def create_employee(self, payload: dict) -> None:
        employee = Employee(
            id=f"e{next(self._seq)}",
            name=payload["name"],
            role=payload.get("role", ""),
            phone=payload.get("phone", ""),
        )
        self._employees.append(employee)

    def delete_employee(self, employee_id: str) -> None:
        employee = next((e for e in self._employees if e.id == employee_id), None)
        if employee is None:
            raise KeyError(employee_id)
        self._employees.remove(employee)

    # --- Warranties ------------------------------------------------------

    def list_warranties(
        self,
        page: int = 1,
        page_size: int = 10,
        search: str | None = None,
        status: str = "all",
        filter_type: str = "all",
    ) -> ListPage[Warranty]:
        page, page_size = max(page, 1), max(page_size, 1)
        today = self.today.isoformat()
        horizon = (self.today + _EXPIRING_WINDOW).isoformat()
        filtered = [
            w
            for w in self._warranties
            if matches_query((w.product_name, w.customer_name, w.customer_phone, w.invoice_no), search)
        ]
        if status != "all":
            filtered = [w for w in filtered if w.status == status]
        if filter_type == "expired":
            filtered = [w for w in filtered if w.end_date and w.end_date < today]
        elif filter_type == "expiring":
            filtered = [w for w in filtered if w.end_date and today <= w.end_date <= horizon]
        start = (page - 1) * page_size
        return ListPage(
            items=filtered[start : start + page_size],
            total=len(filtered),
            page=page,
            page_size=page_size,
        )

    def update_warranty(self, warranty_id: str, status: str, notes: str = "") -> None:
        warranty = next((w for w in self._warranties if w.id == warranty_id), None)
        if warranty is None:
            raise KeyError(warranty_id)
        warranty.status = status
        warranty.claim_notes = notes

    # --- Dashboard -------------------------------------------------------

    def dashboard_metrics(self) -> DashboardMetrics:
        return aggregators.dashboard_metrics(
            self._customers,
            self._products,
            [b for b in self._bills if b.invoice_status == ACCEPTED],
            self.upcoming_services(),
        )

    # --- Helpers ---------------------------------------------------------

    def _period_start(self, period: str) -> date:
        if period == "weekly":
            return self.today - timedelta(days=7)
        if period == "monthly":
            return self.today.replace(day=1)
        return self.today

    def _product(self, product_id: str) -> Product:
        product = next((p for p in self._products if p.id == product_id), None)
        if product is None:
            raise KeyError(product_id)
        return product

    def _bill(self, bill_id: str) -> Bill:
        bill = next((b for b in self._bills if b.id == bill_id), None)
        if bill is None:
            raise KeyError(bill_id)
        return bill

    def _customer(self, customer_id: str) -> Customer:
        customer = next((c for c in self._customers if c.id == customer_id), None)
        if customer is None:
            raise KeyError(customer_id)
        return customer

    def _task(self, task_id: str) -> ServiceTask:
        task = next((t for t in self._services if t.id == task_id), None)
        if task is None:
            raise KeyError(task_id)
        return task

    def _reference_items(self, kind: str) -> list[dict]:
        if kind not in REFERENCE_KINDS:
            raise ValueError(f"Unknown reference list: {kind}")
        return self._reference[kind]

    def _apply_product(self, product: Product, payload: dict) -> None:
        brands = {b["id"]: b["name"] for b in self._reference["brands"]}
        categories = {c["id"]: c["name"] for c in self._reference["categories"]}
        product.name = payload["name"]
        product.sku = payload.get("sku") or ""
        product.brand_id = payload["brand_id"]
        product.brand_name = brands.get(product.brand_id, "")
        product.category_id = payload["category_id"]
        product.category_name = categories.get(product.category_id, "Other")
        product.sub_category_id = payload.get("sub_category_id") or ""
        product.net_price = payload["net_price"]
        product.sell_price = payload.get("sell_price", product.net_price)
        product.warranty_details = payload.get("warranty_details", "")
        product.is_active = payload.get("is_active", True)

    def _rename_reference(self, kind: str, item: dict) -> None:
        """Carry a renamed brand or category onto the products that show it."""
        for product in self._products:
            if kind == "brands" and product.brand_id == item["id"]:
                product.brand_name = item["name"]
            elif kind == "categories" and product.category_id == item["id"]:
                product.category_name = item["name"]

    def _apply_task(self, task: ServiceTask, payload: dict) -> None:
        customer = next((c for c in self._customers if c.id == payload["customer_id"]), None)
        employee = next((e for e in self._employees if e.id == payload.get("employee_id")), None)
        task.customer_id = payload["customer_id"]
        task.customer_name = customer.name if customer else UNKNOWN_CUSTOMER
        task.employee_id = employee.id if employee else ""
        task.technician = employee.name if employee else UNASSIGNED
        task.service_date = payload["service_date"]
        task.task_type = payload.get("task_type") or GENERAL_TASK
        task.notes = payload.get("notes", "")
