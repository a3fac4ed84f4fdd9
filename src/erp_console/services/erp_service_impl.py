"""
REST implementation of ErpService against the remote API.

This module provides the production data service that:
- Issues every read and write through the shared ApiClient
- Unwraps list payloads that arrive either bare or as ``{"data": [...]}``
- Parses payloads into record models at the boundary
- Caches slow-changing reference lists (brands, categories,
  sub-categories) to disk
- Drops a cached reference list whenever one of its items is written

Errors are not handled here: ApiError propagates to the page callback that
issued the request.
"""

from typing import Any, Sequence

from benedict import benedict

from erp_console import config
from erp_console.billing import payment_payload
from erp_console.lib import logs, objects
from erp_console.lib.caches import DiskCache, reference_cache
from erp_console.lib.clients import ApiClient, api_client, unwrap_list
from erp_console.models.common import (
    CustomerLedger,
    DashboardMetrics,
    ListPage,
    SalesReport,
    SalesSummary,
)
from erp_console.models.records import (
    Bill,
    Customer,
    Employee,
    Product,
    RestockEntry,
    ServiceTask,
    Warranty,
    parse_all,
)
from erp_console.services.erp_service import REFERENCE_KINDS, ErpService
from erp_console.utils import to_float, to_int

LOG = logs.logger(__file__)


class ErpServiceImpl(ErpService):
    """
    ERP service backed by the remote REST API.

    Attributes:
        client: API client used for every request.
        reference_ttl: Seconds reference lists stay in the disk cache.
    """

    def __init__(
        self,
        client: ApiClient | None = None,
        cache: DiskCache | None = None,
        reference_ttl: int | None = None,
    ) -> None:
        """
        Initialize the service.

        Args:
            client: API client, or None for the process-wide client.
            cache: Disk cache for reference lists, or None for the shared one.
            reference_ttl: Reference list TTL, or None for ERP_REFERENCE_TTL.
        """
        self.client = client or api_client()
        self._cache = cache or reference_cache()
        self.reference_ttl = reference_ttl or config.REFERENCE_TTL

    def list_customers(self) -> Sequence[Customer]:
        return parse_all(Customer.from_payload, self._get_list("/customers/"))

    def check_phone(self, phone: str) -> str | None:
        b = benedict(self.client.get("/customers/check-phone", params={"phone": phone}) or {})
        if not b.get("exists"):
            return None
        return str(b.get("customer_name") or "another customer")

    def create_customer(self, payload: dict) -> None:
        LOG.info("Creating customer %s", payload.get("name"))
        self.client.post("/customers", json=payload)

    def delete_customer(self, customer_id: str) -> None:
        self.client.delete(f"/customers/{customer_id}")

    def customer_ledger(self, customer_id: str) -> CustomerLedger:
        b = benedict(self.client.get(f"/customers/{customer_id}/ledger") or {})
        bills = parse_all(Bill.from_payload, b.get("bills") or [])
        return CustomerLedger(
            customer=Customer.from_payload(b.get("customer") or {"id": customer_id}),
            total_due=to_float(b.get("total_due"), sum(bill.balance for bill in bills)),
            bills=bills,
        )

    def list_products(self, search: str | None = None, status: str = "all") -> Sequence[Product]:
        params: dict[str, Any] = {"page": 1, "limit": 1000, "status": status}
        if search and search.strip():
            params["search"] = search.strip()
        return parse_all(Product.from_payload, self._get_list("/inventory/products", params))

    def reference_list(self, kind: str) -> Sequence[dict]:
        """
        Return a reference list, served from the disk cache when fresh.

        Raises:
            ValueError: If ``kind`` is not a known reference list.
        """
        self._check_kind(kind)
        cache_key = self._reference_key(kind)

        def _load() -> list[dict]:
            LOG.info("Loading reference list: %s", kind)
            return self._get_list(f"/inventory/{kind}")

        return self._cache.get_or_load(cache_key, _load, expire=self.reference_ttl).value

    def create_product(self, payload: dict) -> None:
        LOG.info("Creating product %s", payload.get("name"))
        self.client.post("/inventory/products", json=payload)

    def update_product(self, product_id: str, payload: dict) -> None:
        self.client.put(f"/inventory/products/{product_id}", json=payload)

    def delete_product(self, product_id: str) -> None:
        self.client.delete(f"/inventory/products/{product_id}")

    def set_product_status(self, product_id: str, is_active: bool) -> None:
        self.client.patch(f"/inventory/products/{product_id}/status", json={"is_active": is_active})

    def save_reference(self, kind: str, payload: dict, item_id: str | None = None) -> None:
        self._check_kind(kind)
        if item_id:
            self.client.put(f"/inventory/{kind}/{item_id}", json=payload)
        else:
            self.client.post(f"/inventory/{kind}", json=payload)
        self._invalidate(kind)

    def delete_reference(self, kind: str, item_id: str) -> None:
        self._check_kind(kind)
        self.client.delete(f"/inventory/{kind}/{item_id}")
        self._invalidate(kind)

    def restock(self, product_id: str, quantity: int) -> None:
        self.client.post(
            "/inventory/restock",
            json={"product_id": str(product_id), "quantity_arrived": quantity},
        )

    def restock_history(self, period: str = "monthly") -> Sequence[RestockEntry]:
        payload = self._get_list("/inventory/restock-history", {"period": period})
        return parse_all(RestockEntry.from_payload, payload)

    def product_restock_history(self, product_id: str) -> Sequence[RestockEntry]:
        payload = self._get_list(f"/inventory/restock-history/{product_id}")
        entries = parse_all(RestockEntry.from_payload, payload)
        for entry in entries:
            entry.product_id = entry.product_id or str(product_id)
        return entries

    def billing_history(self) -> Sequence[Bill]:
        return parse_all(Bill.from_payload, self._get_list("/billing/history"))

    def debtors(self) -> Sequence[Bill]:
        return parse_all(Bill.from_payload, self._get_list("/accounts/debtors"))

    def sales_report(
        self,
        period: str = "daily",
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> SalesReport:
        params: dict[str, Any] = {"period": period}
        if period == "custom" and start_date and end_date:
            params["start_date"] = start_date
            params["end_date"] = end_date
        b = benedict(self.client.get("/billing/report", params=params) or {})
        bills = parse_all(Bill.from_payload, b.get("bills") or [])
        summary = SalesSummary(
            count=to_int(b.get("summary.count"), len(bills)),
            revenue=to_float(b.get("summary.revenue")),
            profit=to_float(b.get("summary.profit")),
        )
        return SalesReport(bills=bills, summary=summary)

    def create_bill(self, payload: dict) -> dict:
        LOG.info("Creating bill for customer %s", payload.get("customer_id"))
        return self.client.post("/billing/create", json=payload) or {}

    def pay_due(self, bill_id: str, amount: float) -> None:
        self.client.post("/billing/pay-due", json=payment_payload(bill_id, amount))

    def toggle_invoice_status(self, bill_id: str) -> None:
        self.client.put(f"/billing/{bill_id}/status")

    def upcoming_services(self) -> Sequence[ServiceTask]:
        return parse_all(ServiceTask.from_payload, self._get_list("/services/upcoming"))

    def list_services(self) -> Sequence[ServiceTask]:
        return parse_all(ServiceTask.from_payload, self._get_list("/services/"))

    def complete_service(self, task_id: str) -> None:
        self.client.put(f"/services/{task_id}/complete")

    def assign_service(self, payload: dict) -> None:
        LOG.info("Assigning %s for customer %s", payload.get("task_type"), payload.get("customer_id"))
        self.client.post("/services/assign", json=payload)

    def update_service(self, task_id: str, payload: dict) -> None:
        self.client.put(f"/services/{task_id}", json=payload)

    def delete_service(self, task_id: str) -> None:
        self.client.delete(f"/services/{task_id}")

    def list_employees(self) -> Sequence[Employee]:
        return parse_all(Employee.from_payload, self._get_list("/employees"))

    def create_employee(self, payload: dict) -> None:
        self.client.post("/employees", json=payload)

    def delete_employee(self, employee_id: str) -> None:
        self.client.delete(f"/employees/{employee_id}")

    def list_warranties(
        self,
        page: int = 1,
        page_size: int = 10,
        search: str | None = None,
        status: str = "all",
        filter_type: str = "all",
    ) -> ListPage[Warranty]:
        page, page_size = max(page, 1), max(page_size, 1)
        params = {
            "page": page,
            "limit": page_size,
            "search": (search or "").strip(),
            "status": status,
            "filter_type": filter_type,
        }
        payload = self.client.get("/warranty/list", params=params) or {}
        items = parse_all(Warranty.from_payload, unwrap_list(payload))
        total = to_int(payload.get("total"), len(items)) if isinstance(payload, dict) else len(items)
        return ListPage(items=items, total=total, page=page, page_size=page_size)

    def update_warranty(self, warranty_id: str, status: str, notes: str = "") -> None:
        self.client.put(f"/warranty/{warranty_id}", json={"status": status, "notes": notes})

    def dashboard_metrics(self) -> DashboardMetrics:
        payload = self.client.get("/dashboard/metrics") or {}
        if not isinstance(payload, dict):
            payload = {}
        b = benedict(payload.get("data") or payload)
        return DashboardMetrics(
            customers=to_int(b.get("customers")),
            sales=to_float(b.get("sales")),
            profit=to_float(b.get("profit")),
            services=to_int(b.get("services")),
            low_stock=to_int(b.get("low_stock", b.get("lowStock"))),
        )

    def _get_list(self, path: str, params: dict | None = None) -> list:
        return unwrap_list(self.client.get(path, params=params))

    def _reference_key(self, kind: str) -> str:
        return objects.hash([self.client.base_url, kind])

    def _check_kind(self, kind: str) -> None:
        if kind not in REFERENCE_KINDS:
            raise ValueError(f"Unknown reference list: {kind}")

    def _invalidate(self, kind: str) -> None:
        # sub-categories embed their parent category
        kinds = [kind, "sub-categories"] if kind == "categories" else [kind]
        for name in kinds:
            self._cache.delete(self._reference_key(name))
        LOG.info("Reference cache cleared: %s", ", ".join(kinds))

