"""
Customers page: directory, debtors view, new customer form, delete and ledger.

The phone number is checked against existing customers as soon as it has
enough digits, and again on save, so a duplicate is reported before the API
would refuse it. Deleting asks for confirmation; the API refuses customers
with billing history and its reason is shown as the alert.
"""

from collections import defaultdict

from dash import Input, Output, State, ctx, dcc, html, no_update

from erp_console import config
from erp_console.billing import ValidationError
from erp_console.components.cards import build_alert, build_empty_state
from erp_console.components.controls import build_pager, build_search_input, pager_label
from erp_console.components.tables import build_grid, column
from erp_console.forms import customer_payload, is_complete_phone
from erp_console.lib.clients import ApiError
from erp_console.models.common import CustomerLedger
from erp_console.models.records import Bill, Customer
from erp_console.pages.common import api_failure, move_window, service
from erp_console.pagination import PageWindow
from erp_console.utils import format_inr, matches_query

ALL = "all"
DEBTORS = "debtors"

_COLUMNS = [
    column("name", "Customer"),
    column("phone", "Phone"),
    column("address", "Address"),
    column("due", "Total Due", money=True),
]
_LEDGER_COLUMNS = [
    column("date", "Date"),
    column("products", "Products"),
    column("total", "Bill Total", money=True),
    column("balance", "Balance Due", money=True),
]


def layout() -> html.Div:
    return html.Div(
        className="page customers-page",
        children=[
            html.Div(className="page-header", children=[html.H1("Customers")]),
            dcc.Store(id="customers-page", data=PageWindow(page_size=config.CUSTOMERS_PAGE_SIZE).to_dict()),
            dcc.Store(id="customers-refresh", data=0),
            html.Div(
                className="card",
                children=[
                    html.Div(
                        className="filters",
                        children=[
                            build_search_input("customers-search", "Search by name or phone..."),
                            dcc.RadioItems(
                                id="customers-view",
                                options=[
                                    {"label": "All Customers", "value": ALL},
                                    {"label": "Debtors", "value": DEBTORS},
                                ],
                                value=ALL,
                                inline=True,
                            ),
                            dcc.RadioItems(
                                id="customers-sort",
                                options=[
                                    {"label": "Due: high to low", "value": "desc"},
                                    {"label": "Due: low to high", "value": "asc"},
                                ],
                                value="desc",
                                inline=True,
                            ),
                        ],
                    ),
                    html.Div(id="customers-table"),
                    build_pager("customers"),
                ],
            ),
            html.Div(
                className="two-column",
                children=[
                    html.Div(
                        className="card",
                        children=[
                            html.H3("New Customer"),
                            dcc.Input(id="customer-name", type="text", placeholder="Name"),
                            dcc.Input(id="customer-phone", type="tel", placeholder="Phone", debounce=True),
                            html.Div(id="customer-phone-status"),
                            dcc.Input(id="customer-address", type="text", placeholder="Address"),
                            html.Button("Save Customer", id="customer-save", className="btn btn-primary", n_clicks=0),
                            html.Div(id="customer-form-feedback"),
                        ],
                    ),
                    html.Div(
                        className="card",
                        children=[
                            html.H3("Customer Actions"),
                            dcc.Dropdown(id="customer-select", placeholder="Select a customer"),
                            html.Div(
                                className="button-row",
                                children=[
                                    html.Button(
                                        "View Ledger", id="customer-ledger-btn", className="btn btn-outline", n_clicks=0
                                    ),
                                    dcc.ConfirmDialogProvider(
                                        html.Button("Delete", className="btn btn-danger"),
                                        id="customer-delete",
                                        message="Delete this customer? This cannot be undone.",
                                    ),
                                ],
                            ),
                            html.Div(id="customer-action-feedback"),
                        ],
                    ),
                ],
            ),
            html.Div(id="customer-ledger", className="card ledger-card"),
        ],
    )


def customer_dues(debtors: list[Bill]) -> dict[str, float]:
    """Sum open balances per customer id."""
    dues: dict[str, float] = defaultdict(float)
    for bill in debtors:
        dues[bill.customer_id] += bill.balance
    return dict(dues)


def select_customers(
    customers: list[Customer],
    dues: dict[str, float],
    view: str = ALL,
    search: str | None = None,
    descending: bool = True,
) -> list[Customer]:
    """
    Apply the view, search and sort of the customer table.

    The debtors view keeps customers that owe something and orders them
    by amount due; the full directory keeps the API's order.
    """
    selected = [c for c in customers if matches_query((c.name, c.phone), search)]
    if view == DEBTORS:
        selected = [c for c in selected if dues.get(c.id, 0) > 0]
        selected.sort(key=lambda c: dues.get(c.id, 0), reverse=descending)
    return selected


def customer_rows(customers: list[Customer], dues: dict[str, float]) -> list[dict]:
    return [
        {"name": c.name, "phone": c.phone, "address": c.address, "due": format_inr(dues.get(c.id, 0))}
        for c in customers
    ]


def ledger_rows(ledger: CustomerLedger) -> list[dict]:
    return [
        {
            "date": f"{bill.created_at:%d/%m/%Y}" if bill.created_at else "",
            "products": ", ".join(i.product_name for i in bill.items if i.product_name) or "Unknown Product",
            "total": format_inr(bill.amount),
            "balance": format_inr(bill.balance),
        }
        for bill in ledger.bills
    ]


def build_ledger(ledger: CustomerLedger) -> list:
    tone = "text-danger" if ledger.total_due > 0 else "text-success"
    header = html.Div(
        className="ledger-summary",
        children=[
            html.Div([html.H3(ledger.customer.name), html.P(ledger.customer.phone, className="muted")]),
            html.Div(
                [html.Small("TOTAL DUE", className="muted"), html.H2(format_inr(ledger.total_due), className=tone)]
            ),
        ],
    )
    if not ledger.bills:
        return [header, build_empty_state("No pending bills", "Clean record!", "lucide:badge-check")]
    return [header, html.H4("Outstanding Bills"), build_grid("ledger-grid", _LEDGER_COLUMNS, ledger_rows(ledger))]


def register_callbacks(app) -> None:
    @app.callback(
        Output("customers-table", "children"),
        Output("customers-label", "children"),
        Output("customers-page", "data"),
        Output("customer-select", "options"),
        Input("customers-search", "value"),
        Input("customers-view", "value"),
        Input("customers-sort", "value"),
        Input("customers-prev", "n_clicks"),
        Input("customers-next", "n_clicks"),
        Input("customers-refresh", "data"),
        State("customers-page", "data"),
    )
    def update_customers(search, view, sort, _prev, _next, _refresh, window_data):
        erp = service()
        try:
            customers = list(erp.list_customers())
            dues = customer_dues(list(erp.debtors()))
        except ApiError as exc:
            return api_failure(exc, "Loading customers"), "", no_update, []
        selected = select_customers(customers, dues, view or ALL, search, descending=sort != "asc")
        window = PageWindow.from_dict(window_data, config.CUSTOMERS_PAGE_SIZE)
        reset_on = {"customers-search", "customers-view", "customers-sort"}
        move_window(window, ctx.triggered_id, "customers", len(selected), reset_on)
        page_slice = window.project(selected)
        table = (
            build_grid("customers-grid", _COLUMNS, customer_rows(page_slice.visible, dues))
            if selected
            else build_empty_state("No customers found", "Try a different search or view.")
        )
        options = [{"label": f"{c.name} ({c.phone})", "value": c.id} for c in customers]
        return table, pager_label(page_slice, window.page, len(selected)), window.to_dict(), options

    @app.callback(
        Output("customer-phone-status", "children"),
        Input("customer-phone", "value"),
        prevent_initial_call=True,
    )
    def check_phone(phone):
        """Warn while typing when the number already belongs to someone."""
        if not is_complete_phone(phone):
            return None
        try:
            owner = service().check_phone(phone)
        except ApiError as exc:
            return api_failure(exc, "Phone check")
        if owner:
            return build_alert(f"Used by: {owner}", "warning")
        return build_alert("Phone number is available.", "success")

    @app.callback(
        Output("customer-form-feedback", "children"),
        Output("customers-refresh", "data"),
        Output("customer-name", "value"),
        Output("customer-phone", "value"),
        Output("customer-address", "value"),
        Input("customer-save", "n_clicks"),
        State("customer-name", "value"),
        State("customer-phone", "value"),
        State("customer-address", "value"),
        State("customers-refresh", "data"),
        prevent_initial_call=True,
    )
    def create_customer(_n_clicks, name, phone, address, refresh):
        keep = (no_update, no_update, no_update, no_update)
        erp = service()
        try:
            payload = customer_payload(name, phone, address)
            owner = erp.check_phone(payload["phone"])
            if owner:
                return (build_alert(f"Phone number already used by {owner}.", "warning"), *keep)
            erp.create_customer(payload)
        except ValidationError as exc:
            return (build_alert(str(exc), "warning"), *keep)
        except ApiError as exc:
            return (api_failure(exc, "Saving customer"), *keep)
        return build_alert(f"Customer {payload['name']} added.", "success"), (refresh or 0) + 1, "", "", ""

    @app.callback(
        Output("customer-action-feedback", "children"),
        Output("customers-refresh", "data", allow_duplicate=True),
        Output("customer-select", "value"),
        Input("customer-delete", "submit_n_clicks"),
        State("customer-select", "value"),
        State("customers-refresh", "data"),
        prevent_initial_call=True,
    )
    def delete_customer(_submitted, customer_id, refresh):
        if not customer_id:
            return build_alert("Select a customer.", "warning"), no_update, no_update
        try:
            service().delete_customer(customer_id)
        except ApiError as exc:
            return api_failure(exc, "Delete"), no_update, no_update
        return build_alert("Customer deleted.", "success"), (refresh or 0) + 1, None

    @app.callback(
        Output("customer-ledger", "children"),
        Input("customer-ledger-btn", "n_clicks"),
        State("customer-select", "value"),
        prevent_initial_call=True,
    )
    def show_ledger(_n_clicks, customer_id):
        """Outstanding bills and total due of the selected customer."""
        if not customer_id:
            return build_alert("Select a customer.", "warning")
        try:
            ledger = service().customer_ledger(customer_id)
        except ApiError as exc:
            return api_failure(exc, "Loading ledger")
        return build_ledger(ledger)
