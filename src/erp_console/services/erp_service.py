"""
Abstract base class defining the ERP data access contract.

Every page reads and mutates records through an ErpService. Implementations
return parsed record models, never raw payloads, so the pages and the
aggregators only ever see defaulted, typed values.

Implementations:
- DemoErpService: Static in-memory data for development/testing
- ErpServiceImpl: REST calls against the remote API
"""

from abc import ABC, abstractmethod
from typing import Sequence

from erp_console.models.common import CustomerLedger, DashboardMetrics, ListPage, SalesReport
from erp_console.models.records import (
    Bill,
    Customer,
    Employee,
    Product,
    RestockEntry,
    ServiceTask,
    Warranty,
)

REFERENCE_KINDS = ("brands", "categories", "sub-categories")


class ErpService(ABC):
    """
    Abstract base class for ERP data access.

    Errors from the transport propagate as ApiError; callers at the page
    boundary turn them into alerts.
    """

    # --- Customers -------------------------------------------------------

    @abstractmethod
    def list_customers(self) -> Sequence[Customer]:
        """Return every customer."""

    @abstractmethod
    def check_phone(self, phone: str) -> str | None:
        """Return the name of the customer already using ``phone``, or None."""

    @abstractmethod
    def create_customer(self, payload: dict) -> None:
        """Create a customer from a validated ``customer_payload`` body."""

    @abstractmethod
    def delete_customer(self, customer_id: str) -> None:
        """
        Delete a customer.

        The API refuses customers with billing history; the refusal arrives
        as an ApiError carrying the server's detail.
        """

    @abstractmethod
    def customer_ledger(self, customer_id: str) -> CustomerLedger:
        """Return the customer with their outstanding bills and total due."""

    # --- Inventory -------------------------------------------------------

    @abstractmethod
    def list_products(self, search: str | None = None, status: str = "all") -> Sequence[Product]:
        """
        Return products, optionally filtered by name/SKU and status.

        Args:
            search: Case-insensitive name or SKU fragment.
            status: ``all``, ``active`` or ``inactive``.
        """

    @abstractmethod
    def reference_list(self, kind: str) -> Sequence[dict]:
        """Return a reference list: brands, categories or sub-categories."""

    @abstractmethod
    def create_product(self, payload: dict) -> None:
        """Create a product from a validated ``product_payload`` body."""

    @abstractmethod
    def update_product(self, product_id: str, payload: dict) -> None:
        """Replace a product's editable fields."""

    @abstractmethod
    def delete_product(self, product_id: str) -> None:
        """Delete a product; products on a bill are refused by the API."""

    @abstractmethod
    def set_product_status(self, product_id: str, is_active: bool) -> None:
        """Mark a product active or inactive."""

    @abstractmethod
    def save_reference(self, kind: str, payload: dict, item_id: str | None = None) -> None:
        """
        Create or rename a reference item.

        Args:
            kind: ``brands``, ``categories`` or ``sub-categories``.
            payload: Body from ``reference_payload``.
            item_id: Existing item to update, or None to create one.
        """

    @abstractmethod
    def delete_reference(self, kind: str, item_id: str) -> None:
        """Delete a reference item; items still in use are refused."""

    @abstractmethod
    def restock(self, product_id: str, quantity: int) -> None:
        """Record a restock of ``quantity`` units."""

    @abstractmethod
    def restock_history(self, period: str = "monthly") -> Sequence[RestockEntry]:
        """Return restock events in the period (daily, weekly, monthly)."""

    @abstractmethod
    def product_restock_history(self, product_id: str) -> Sequence[RestockEntry]:
        """Return every restock event of one product."""

    # --- Billing ---------------------------------------------------------

    @abstractmethod
    def billing_history(self) -> Sequence[Bill]:
        """Return all bills."""

    @abstractmethod
    def debtors(self) -> Sequence[Bill]:
        """Return bills with an outstanding balance."""

    @abstractmethod
    def sales_report(
        self,
        period: str = "daily",
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> SalesReport:
        """
        Return bills and totals for a reporting period.

        Args:
            period: ``daily``, ``weekly``, ``monthly`` or ``custom``.
            start_date: ISO start date, used with ``custom``.
            end_date: ISO end date, used with ``custom``.
        """

    @abstractmethod
    def create_bill(self, payload: dict) -> dict:
        """Create a bill from a validated ``/billing/create`` payload."""

    @abstractmethod
    def pay_due(self, bill_id: str, amount: float) -> None:
        """Record a payment against an open bill."""

    @abstractmethod
    def toggle_invoice_status(self, bill_id: str) -> None:
        """Flip a bill between Accepted and Cancelled."""

    # --- Services --------------------------------------------------------

    @abstractmethod
    def upcoming_services(self) -> Sequence[ServiceTask]:
        """Return scheduled service tasks."""

    @abstractmethod
    def list_services(self) -> Sequence[ServiceTask]:
        """Return every service task."""

    @abstractmethod
    def complete_service(self, task_id: str) -> None:
        """Mark a task completed."""

    @abstractmethod
    def assign_service(self, payload: dict) -> None:
        """Schedule a task from a validated ``task_payload`` body."""

    @abstractmethod
    def update_service(self, task_id: str, payload: dict) -> None:
        """Change a task's technician, date, type or notes."""

    @abstractmethod
    def delete_service(self, task_id: str) -> None:
        """Remove a task."""

    @abstractmethod
    def list_employees(self) -> Sequence[Employee]:
        """Return technicians and other staff."""

    @abstractmethod
    def create_employee(self, payload: dict) -> None:
        """Add a staff member from a validated ``employee_payload`` body."""

    @abstractmethod
    def delete_employee(self, employee_id: str) -> None:
        """Remove a staff member."""

    # --- Warranties ------------------------------------------------------

    @abstractmethod
    def list_warranties(
        self,
        page: int = 1,
        page_size: int = 10,
        search: str | None = None,
        status: str = "all",
        filter_type: str = "all",
    ) -> ListPage[Warranty]:
        """
        Return one server-side page of warranties.

        Args:
            page: Page number (1-indexed).
            page_size: Number of items per page.
            search: Free text matched by the server.
            status: ``all`` or an explicit warranty status.
            filter_type: ``all``, ``expiring`` or ``expired``.
        """

    @abstractmethod
    def update_warranty(self, warranty_id: str, status: str, notes: str = "") -> None:
        """Process a claim: set status and technician notes."""

    # --- Dashboard -------------------------------------------------------

    @abstractmethod
    def dashboard_metrics(self) -> DashboardMetrics:
        """Return the headline dashboard numbers."""
