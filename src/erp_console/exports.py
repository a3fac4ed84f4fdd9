"""
CSV exports generated from data already loaded in the console.

Each export has a fixed column order so spreadsheets built on top of the
files keep working. The Dash layer hands the frames to
``dcc.send_data_frame`` and the browser downloads the file directly.
"""

from typing import Iterable

import pandas as pd

from erp_console.models.common import CustomerAccount
from erp_console.models.records import Bill

SALES_REPORT_COLUMNS = [
    "Invoice #",
    "Date",
    "Customer",
    "Phone",
    "Items",
    "Status",
    "Revenue",
    "Paid",
    "Balance",
]
DEBTORS_COLUMNS = ["Customer", "Phone", "Open Bills", "Total Due"]


def sales_report_frame(bills: Iterable[Bill]) -> pd.DataFrame:
    """Return one row per bill of a sales report."""
    rows = [
        {
            "Invoice #": bill.invoice_no,
            "Date": bill.created_at.date().isoformat() if bill.created_at else "",
            "Customer": bill.customer_name,
            "Phone": bill.customer_phone,
            "Items": len(bill.items),
            "Status": bill.invoice_status,
            "Revenue": bill.amount,
            "Paid": bill.paid_amount,
            "Balance": bill.balance,
        }
        for bill in bills
    ]
    return pd.DataFrame(rows, columns=SALES_REPORT_COLUMNS)


def debtors_frame(accounts: Iterable[CustomerAccount]) -> pd.DataFrame:
    """Return one row per customer with an outstanding balance."""
    rows = [
        {
            "Customer": account.name,
            "Phone": account.phone,
            "Open Bills": account.open_count,
            "Total Due": account.due,
        }
        for account in accounts
        if account.is_open
    ]
    return pd.DataFrame(rows, columns=DEBTORS_COLUMNS)


def to_csv(frame: pd.DataFrame) -> str:
    """Render ``frame`` as CSV text without the index column."""
    return frame.to_csv(index=False)
