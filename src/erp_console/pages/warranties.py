"""
Warranties page: server-paged list with search, filters and claims.

Unlike the other lists, paging happens on the server: each page change
requests one page and the next button is enabled only while the result
reports more pages.
"""

from datetime import date

from dash import Input, Output, State, ctx, dcc, html, no_update

from erp_console import aggregators, config
from erp_console.components.cards import build_alert, build_empty_state
from erp_console.components.controls import build_pager, build_search_input
from erp_console.components.tables import build_grid, column
from erp_console.lib.clients import ApiError
from erp_console.models.common import ListPage
from erp_console.pages.common import api_failure, service
from erp_console.pagination import total_pages
from erp_console.services import ErpService

CLAIM_STATUSES = ["Claimed", "Resolved", "Rejected"]

_STATUS_OPTIONS = [{"label": "All statuses", "value": "all"}] + [
    {"label": status, "value": status} for status in ["Active", *CLAIM_STATUSES]
]
_FILTER_TYPES = [
    {"label": "All", "value": "all"},
    {"label": "Expiring in 30 days", "value": "expiring"},
    {"label": "Expired", "value": "expired"},
]
_COLUMNS = [
    column("product_name", "Product"),
    column("customer_name", "Customer"),
    column("customer_phone", "Phone"),
    column("invoice_no", "Invoice #"),
    column("start_date", "Start"),
    column("end_date", "End"),
    column("badge", "Status"),
    column("claim_notes", "Notes"),
]


def layout() -> html.Div:
    return html.Div(
        className="page warranties-page",
        children=[
            html.Div(className="page-header", children=[html.H1("Warranties")]),
            dcc.Store(id="warranty-page", data=1),
            dcc.Store(id="warranty-refresh", data=0),
            html.Div(
                className="card",
                children=[
                    html.Div(
                        className="filters",
                        children=[
                            build_search_input("warranty-search", "Search product, customer or invoice..."),
                            dcc.Dropdown(id="warranty-status", options=_STATUS_OPTIONS, value="all", clearable=False),
                            dcc.RadioItems(id="warranty-filter", options=_FILTER_TYPES, value="all", inline=True),
                        ],
                    ),
                    html.Div(id="warranty-table"),
                    build_pager("warranty"),
                ],
            ),
            html.Div(
                className="card claim-card",
                children=[
                    html.H3("Process Claim"),
                    dcc.Dropdown(id="claim-warranty", placeholder="Select a warranty"),
                    dcc.Dropdown(
                        id="claim-status",
                        options=[{"label": s, "value": s} for s in CLAIM_STATUSES],
                        value="Claimed",
                        clearable=False,
                    ),
                    dcc.Textarea(id="claim-notes", placeholder="Technician notes"),
                    html.Button("Save", id="claim-submit", className="btn btn-primary", n_clicks=0),
                    html.Div(id="claim-feedback"),
                ],
            ),
        ],
    )


def next_page(current: int, trigger: str | None, result_has_more: bool | None) -> int:
    """
    Resolve the page to request for a trigger.

    Filter changes return to page 1; previous never goes below 1; next only
    advances while the last result reported more pages.
    """
    if trigger == "warranty-prev":
        return max(current - 1, 1)
    if trigger == "warranty-next":
        return current + 1 if result_has_more else current
    if trigger in {"warranty-search", "warranty-status", "warranty-filter"}:
        return 1
    return current


def load_warranty_page(erp: ErpService, page: int, **filters) -> ListPage:
    """
    Fetch one page of warranties.

    If the server now reports fewer pages than ``page`` (a claim moved rows
    out of the filter, for example) page 1 is fetched instead.
    """
    size = config.WARRANTY_PAGE_SIZE
    result = erp.list_warranties(page=page, page_size=size, **filters)
    if result.page > total_pages(result.total, size):
        result = erp.list_warranties(page=1, page_size=size, **filters)
    return result


def warranty_rows(result: ListPage, today: date) -> list[dict]:
    return [
        {
            "product_name": w.product_name,
            "customer_name": w.customer_name,
            "customer_phone": w.customer_phone,
            "invoice_no": w.invoice_no,
            "start_date": w.start_date,
            "end_date": w.end_date,
            "badge": aggregators.warranty_status(w, today),
            "claim_notes": w.claim_notes,
        }
        for w in result.items
    ]


def register_callbacks(app) -> None:
    @app.callback(
        Output("warranty-table", "children"),
        Output("warranty-label", "children"),
        Output("warranty-page", "data"),
        Output("warranty-prev", "disabled"),
        Output("warranty-next", "disabled"),
        Output("claim-warranty", "options"),
        Input("warranty-search", "value"),
        Input("warranty-status", "value"),
        Input("warranty-filter", "value"),
        Input("warranty-prev", "n_clicks"),
        Input("warranty-next", "n_clicks"),
        Input("warranty-refresh", "data"),
        State("warranty-page", "data"),
        State("warranty-next", "disabled"),
    )
    def update_warranties(search, status, filter_type, _prev, _next, _refresh, page, next_disabled):
        """Request the page selected by the trigger."""
        page = next_page(page or 1, ctx.triggered_id, not next_disabled)
        try:
            result = load_warranty_page(
                service(),
                page,
                search=search or None,
                status=status or "all",
                filter_type=filter_type or "all",
            )
        except ApiError as exc:
            return api_failure(exc, "Loading warranties"), "", no_update, no_update, no_update, []
        if not result.items:
            table = build_empty_state("No warranties found", "No warranty matches these filters.", "lucide:shield")
        else:
            table = build_grid("warranty-grid", _COLUMNS, warranty_rows(result, date.today()))
        label = f"Page {result.page} ({result.total} total)"
        options = [
            {"label": f"{w.product_name} - {w.customer_name} ({w.invoice_no})", "value": w.id}
            for w in result.items
        ]
        return table, label, result.page, result.page <= 1, not result.has_more, options

    @app.callback(
        Output("claim-feedback", "children"),
        Output("warranty-refresh", "data"),
        Input("claim-submit", "n_clicks"),
        State("claim-warranty", "value"),
        State("claim-status", "value"),
        State("claim-notes", "value"),
        State("warranty-refresh", "data"),
        prevent_initial_call=True,
    )
    def process_claim(_n_clicks, warranty_id, status, notes, refresh):
        if not warranty_id:
            return build_alert("Select a warranty.", "warning"), no_update
        try:
            service().update_warranty(warranty_id, status, notes or "")
        except ApiError as exc:
            return api_failure(exc, "Claim update"), no_update
        return build_alert(f"Warranty marked {status}.", "success"), (refresh or 0) + 1
