from datetime import datetime

from erp_console.exports import (
    DEBTORS_COLUMNS,
    SALES_REPORT_COLUMNS,
    debtors_frame,
    sales_report_frame,
    to_csv,
)
from erp_console.models.common import CustomerAccount
from erp_console.models.records import Bill, BillItem


def test_sales_report_frame_has_fixed_columns():
    bill = Bill(
        id="s1",
        customer_id="c1",
        customer_name="Ravi",
        customer_phone="98765",
        invoice_no="GP-1001",
        created_at=datetime(2024, 6, 1, 10, 15),
        final_amount=1100,
        paid_amount=600,
        balance=500,
        items=[BillItem(product_id="p1"), BillItem(product_id="p2")],
    )
    frame = sales_report_frame([bill])
    assert list(frame.columns) == SALES_REPORT_COLUMNS
    row = frame.iloc[0]
    assert row["Invoice #"] == "GP-1001"
    assert row["Date"] == "2024-06-01"
    assert row["Items"] == 2
    assert row["Status"] == "Accepted"
    assert (row["Revenue"], row["Paid"], row["Balance"]) == (1100, 600, 500)


def test_empty_report_keeps_headers():
    frame = sales_report_frame([])
    assert frame.empty
    assert to_csv(frame).strip() == ",".join(SALES_REPORT_COLUMNS)


def test_debtors_frame_lists_open_accounts_only():
    accounts = [
        CustomerAccount(customer_id="c1", name="Ravi", phone="98765", open_count=2, due=150.0),
        CustomerAccount(customer_id="c2", name="Anita", closed_count=1),
    ]
    frame = debtors_frame(accounts)
    assert list(frame.columns) == DEBTORS_COLUMNS
    assert frame["Customer"].tolist() == ["Ravi"]
    assert to_csv(frame).splitlines() == ["Customer,Phone,Open Bills,Total Due", "Ravi,98765,2,150.0"]
