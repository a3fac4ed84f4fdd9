"""
Bills page: every bill with search, paging and an invoice preview.

The preview renders the same text that is shared with the customer, and
the share link opens it in WhatsApp addressed to the bill's phone number.
"""

from datetime import datetime

from dash import Input, Output, State, ctx, dcc, html, no_update
from dash_iconify import DashIconify

from erp_console import config
from erp_console.billing import invoice_text, whatsapp_url
from erp_console.components.cards import build_empty_state
from erp_console.components.controls import build_pager, build_search_input, pager_label
from erp_console.components.tables import build_grid, column
from erp_console.lib.clients import ApiError
from erp_console.models.records import Bill
from erp_console.pages.common import api_failure, move_window, service
from erp_console.pagination import PageWindow
from erp_console.utils import format_inr, matches_query

_COLUMNS = [
    column("date", "Date"),
    column("invoice_no", "Invoice"),
    column("customer", "Customer"),
    column("items", "Items"),
    column("amount", "Amount", money=True),
    column("balance", "Balance", money=True),
    column("status", "Status"),
]


def layout() -> html.Div:
    return html.Div(
        className="page bills-page",
        children=[
            html.Div(className="page-header", children=[html.H1("Bills")]),
            dcc.Store(id="bills-page", data=PageWindow(page_size=config.BILLS_PAGE_SIZE).to_dict()),
            html.Div(
                className="card",
                children=[
                    build_search_input("bills-search", "Search by invoice, customer or phone..."),
                    html.Div(id="bills-table"),
                    build_pager("bills"),
                ],
            ),
            html.Div(
                className="card invoice-preview-card",
                children=[
                    html.H3("Invoice Preview"),
                    dcc.Dropdown(id="bill-preview-select", placeholder="Select a bill"),
                    html.Div(id="bill-preview"),
                ],
            ),
        ],
    )


def search_bills(bills: list[Bill], term: str | None) -> list[Bill]:
    """Newest first, matching invoice number, customer name or phone."""
    matched = [b for b in bills if matches_query((b.invoice_no, b.customer_name, b.customer_phone), term)]
    return sorted(matched, key=lambda b: b.created_at or datetime.min, reverse=True)


def bill_rows(bills: list[Bill]) -> list[dict]:
    return [
        {
            "date": f"{b.created_at:%d/%m/%Y}" if b.created_at else "",
            "invoice_no": b.invoice_no,
            "customer": b.customer_name,
            "items": len(b.items),
            "amount": format_inr(b.amount),
            "balance": format_inr(b.balance),
            "status": b.invoice_status,
        }
        for b in bills
    ]


def build_preview(bill: Bill) -> list:
    text = invoice_text(bill, config.COMPANY_NAME, config.COMPANY_GSTIN)
    return [
        html.Pre(text, className="invoice-text"),
        html.A(
            [DashIconify(icon="lucide:send", width=16), " Open in WhatsApp"],
            href=whatsapp_url(bill.customer_phone, text),
            className="btn btn-primary",
        ),
    ]


def register_callbacks(app) -> None:
    @app.callback(
        Output("bills-table", "children"),
        Output("bills-label", "children"),
        Output("bills-page", "data"),
        Output("bill-preview-select", "options"),
        Input("bills-search", "value"),
        Input("bills-prev", "n_clicks"),
        Input("bills-next", "n_clicks"),
        State("bills-page", "data"),
    )
    def update_bills(search, _prev, _next, window_data):
        try:
            bills = search_bills(list(service().billing_history()), search)
        except ApiError as exc:
            return api_failure(exc, "Loading bills"), "", no_update, []
        window = PageWindow.from_dict(window_data, config.BILLS_PAGE_SIZE)
        move_window(window, ctx.triggered_id, "bills", len(bills), {"bills-search"})
        page_slice = window.project(bills)
        table = (
            build_grid("bills-grid", _COLUMNS, bill_rows(page_slice.visible))
            if bills
            else build_empty_state("No bills found", "Try a different search.")
        )
        options = [{"label": f"#{b.invoice_no} - {b.customer_name}", "value": b.id} for b in bills]
        return table, pager_label(page_slice, window.page, len(bills)), window.to_dict(), options

    @app.callback(
        Output("bill-preview", "children"),
        Input("bill-preview-select", "value"),
        prevent_initial_call=True,
    )
    def preview_bill(bill_id):
        """Render the shareable invoice of the chosen bill."""
        if not bill_id:
            return None
        try:
            bill = next((b for b in service().billing_history() if b.id == bill_id), None)
        except ApiError as exc:
            return api_failure(exc, "Loading invoice")
        if bill is None:
            return build_empty_state("Bill not found", "It may have been removed.")
        return build_preview(bill)
