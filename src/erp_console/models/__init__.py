"""
Data models for the ERP console.

This package provides:
- Record models parsed defensively from API payloads (Customer, Bill, ...)
- View-state models produced by the aggregators (CustomerAccount, ...)

All models use Python dataclasses for type safety and IDE support.
"""

from erp_console.models.common import (
    CLOSED,
    OPEN,
    CustomerAccount,
    CustomerLedger,
    DashboardMetrics,
    HeatmapDay,
    InventoryOverview,
    LedgerEntry,
    ListPage,
    RevenuePoint,
    SalesReport,
    SalesSummary,
    TaskTypeShare,
    TechnicianStats,
)
from erp_console.models.records import (
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

__all__ = [
    "CLOSED",
    "OPEN",
    "Bill",
    "BillItem",
    "Customer",
    "CustomerAccount",
    "CustomerLedger",
    "DashboardMetrics",
    "Employee",
    "HeatmapDay",
    "InventoryOverview",
    "LedgerEntry",
    "ListPage",
    "Product",
    "RestockEntry",
    "RevenuePoint",
    "SalesReport",
    "SalesSummary",
    "ServiceTask",
    "TaskTypeShare",
    "TechnicianStats",
    "Warranty",
    "parse_all",
]
