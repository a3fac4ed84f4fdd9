"""
Accounts page: per-customer ledger rollup, debtors export and pay-due.

Open bills come from the debtors list, closed bills from the billing
history. Payments are validated against the bill's balance before any
request is sent.
"""

from dash import Input, Output, State, ctx, dcc, html, no_update

from erp_console import aggregators, config
from erp_console.billing import ValidationError, validate_payment
from erp_console.components.cards import build_alert, build_empty_state, build_stat_card
from erp_console.components.controls import build_pager, build_search_input, pager_label
from erp_console.components.tables import build_grid, column
from erp_console.exports import debtors_frame
from erp_console.lib.clients import ApiError
from erp_console.models.common import CustomerAccount
from erp_console.pages.common import api_failure, move_window, service
from erp_console.pagination import PageWindow
from erp_console.utils import format_inr

_COLUMNS = [
    column("name", "Customer"),
    column("phone", "Phone"),
    column("open_count", "Open Bills"),
    column("closed_count", "Closed Bills"),
    column("due", "Total Due", money=True),
    column("status", "Status"),
]


def layout() -> html.Div:
    return html.Div(
        className="page accounts-page",
        children=[
            html.Div(
                className="page-header",
                children=[
                    html.H1("Accounts"),
                    html.Button("Export Debtors CSV", id="accounts-export", className="btn btn-outline", n_clicks=0),
                ],
            ),
            dcc.Store(id="accounts-page", data=PageWindow(page_size=config.CUSTOMERS_PAGE_SIZE).to_dict()),
            dcc.Store(id="accounts-refresh", data=0),
            html.Div(id="accounts-summary", className="card-grid"),
            html.Div(
                className="card",
                children=[
                    build_search_input("accounts-search", "Search by customer name or phone..."),
                    html.Div(id="accounts-table"),
                    build_pager("accounts"),
                ],
            ),
            html.Div(
                className="card pay-due-card",
                children=[
                    html.H3("Record Payment"),
                    dcc.Dropdown(id="pay-bill", placeholder="Select an open bill"),
                    dcc.Input(id="pay-amount", type="number", min=0, placeholder="Amount"),
                    html.Button("Pay", id="pay-submit", className="btn btn-primary", n_clicks=0),
                    html.Div(id="pay-feedback"),
                ],
            ),
        ],
    )


def account_rows(accounts: list[CustomerAccount]) -> list[dict]:
    return [
        {
            "name": a.name,
            "phone": a.phone,
            "open_count": a.open_count,
            "closed_count": a.closed_count,
            "due": format_inr(a.due),
            "status": "Open" if a.is_open else "Closed",
        }
        for a in accounts
    ]


def build_summary(accounts: list[CustomerAccount]) -> list:
    open_accounts, closed_accounts = aggregators.account_counts(accounts)
    total_due = sum(a.due for a in accounts)
    return [
        build_stat_card("Open Accounts", open_accounts, "lucide:book-open", "amber"),
        build_stat_card("Closed Accounts", closed_accounts, "lucide:book-check", "green"),
        build_stat_card("Total Due", format_inr(total_due), "lucide:indian-rupee", "red"),
    ]


def _load_accounts() -> tuple[list[CustomerAccount], list]:
    erp = service()
    debtors = erp.debtors()
    accounts = aggregators.customer_ledger_rollup(debtors, erp.billing_history())
    return accounts, debtors


def register_callbacks(app) -> None:
    @app.callback(
        Output("accounts-summary", "children"),
        Output("accounts-table", "children"),
        Output("accounts-label", "children"),
        Output("accounts-page", "data"),
        Output("pay-bill", "options"),
        Input("accounts-search", "value"),
        Input("accounts-prev", "n_clicks"),
        Input("accounts-next", "n_clicks"),
        Input("accounts-refresh", "data"),
        State("accounts-page", "data"),
    )
    def update_accounts(search, _prev, _next, _refresh, window_data):
        """Roll bills up per customer and show the current page."""
        try:
            accounts, debtors = _load_accounts()
        except ApiError as exc:
            return [], api_failure(exc, "Loading accounts"), "", no_update, []
        filtered = aggregators.search_accounts(accounts, search)
        window = PageWindow.from_dict(window_data, config.CUSTOMERS_PAGE_SIZE)
        move_window(window, ctx.triggered_id, "accounts", len(filtered), {"accounts-search"})
        page_slice = window.project(filtered)
        table = (
            build_grid("accounts-grid", _COLUMNS, account_rows(page_slice.visible))
            if filtered
            else build_empty_state("No accounts found", "No customer has an open or paid bill.")
        )
        options = [
            {
                "label": f"{bill.invoice_no} - {bill.customer_name} (due {format_inr(bill.balance)})",
                "value": bill.id,
            }
            for bill in debtors
        ]
        return (
            build_summary(accounts),
            table,
            pager_label(page_slice, window.page, len(filtered)),
            window.to_dict(),
            options,
        )

    @app.callback(
        Output("pay-feedback", "children"),
        Output("accounts-refresh", "data"),
        Input("pay-submit", "n_clicks"),
        State("pay-bill", "value"),
        State("pay-amount", "value"),
        State("accounts-refresh", "data"),
        prevent_initial_call=True,
    )
    def pay_due(_n_clicks, bill_id, amount, refresh):
        """Validate and record a payment against the selected bill."""
        if not bill_id:
            return build_alert("Select a bill.", "warning"), no_update
        erp = service()
        try:
            bill = next((b for b in erp.debtors() if b.id == bill_id), None)
            if bill is None:
                return build_alert("That bill no longer has a balance.", "warning"), (refresh or 0) + 1
            paid = validate_payment(bill, amount)
            erp.pay_due(bill.id, paid)
        except ValidationError as exc:
            return build_alert(str(exc), "warning"), no_update
        except ApiError as exc:
            return api_failure(exc, "Payment"), no_update
        return build_alert(f"Recorded {format_inr(paid)} for {bill.invoice_no}.", "success"), (refresh or 0) + 1

    @app.callback(
        Output("download", "data", allow_duplicate=True),
        Output("pay-feedback", "children", allow_duplicate=True),
        Input("accounts-export", "n_clicks"),
        prevent_initial_call=True,
    )
    def export_debtors(_n_clicks):
        """Download the debtors list built from the loaded rollup."""
        try:
            accounts, _ = _load_accounts()
        except ApiError as exc:
            return no_update, api_failure(exc, "Export")
        frame = debtors_frame(accounts)
        return dcc.send_data_frame(frame.to_csv, "debtors.csv", index=False), no_update
