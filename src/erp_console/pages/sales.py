"""
Sales report page: bills for a period split into accepted and cancelled.

The summary totals are the server's. Toggling a bill flips it between
Accepted and Cancelled and reloads the report.
"""

from datetime import date

from dash import Input, Output, State, dcc, html, no_update

from erp_console.components.cards import build_alert, build_empty_state, build_stat_card
from erp_console.components.tables import build_grid, column
from erp_console.exports import SALES_REPORT_COLUMNS, sales_report_frame
from erp_console.lib.clients import ApiError
from erp_console.models.common import SalesReport
from erp_console.models.records import ACCEPTED, CANCELLED
from erp_console.pages.common import api_failure, service
from erp_console.utils import format_inr

PERIODS = [
    {"label": "Today", "value": "daily"},
    {"label": "This Week", "value": "weekly"},
    {"label": "This Month", "value": "monthly"},
    {"label": "Custom", "value": "custom"},
]

_MONEY_COLUMNS = {"Revenue", "Paid", "Balance"}
_COLUMNS = [column(name, name, money=name in _MONEY_COLUMNS) for name in SALES_REPORT_COLUMNS]


def layout() -> html.Div:
    return html.Div(
        className="page sales-page",
        children=[
            html.Div(
                className="page-header",
                children=[
                    html.H1("Sales Report"),
                    html.Button("Export CSV", id="sales-export", className="btn btn-outline", n_clicks=0),
                ],
            ),
            dcc.Store(id="sales-refresh", data=0),
            html.Div(
                className="card filters",
                children=[
                    dcc.RadioItems(id="sales-period", options=PERIODS, value="daily", inline=True),
                    dcc.DatePickerRange(id="sales-range", end_date=date.today()),
                ],
            ),
            html.Div(id="sales-summary", className="card-grid"),
            dcc.Tabs(
                id="sales-tabs",
                value=ACCEPTED,
                children=[
                    dcc.Tab(label="Accepted", value=ACCEPTED, children=html.Div(id="sales-accepted")),
                    dcc.Tab(label="Cancelled", value=CANCELLED, children=html.Div(id="sales-cancelled")),
                ],
            ),
            html.Div(
                className="card",
                children=[
                    html.H3("Accept / Cancel Invoice"),
                    dcc.Dropdown(id="sales-toggle-bill", placeholder="Select an invoice"),
                    html.Button("Toggle Status", id="sales-toggle", className="btn btn-outline", n_clicks=0),
                    html.Div(id="sales-feedback"),
                ],
            ),
        ],
    )


def _load_report(period, start_date, end_date) -> SalesReport:
    return service().sales_report(period or "daily", start_date, end_date)


def _grid(grid_id: str, report: SalesReport, status: str):
    bills = report.by_status(status)
    if not bills:
        return build_empty_state(f"No {status.lower()} bills", "Nothing in this period.")
    rows = sales_report_frame(bills).to_dict("records")
    for row in rows:
        for name in _MONEY_COLUMNS:
            row[name] = format_inr(row[name])
    return build_grid(grid_id, _COLUMNS, rows, page_size=20)


def register_callbacks(app) -> None:
    @app.callback(
        Output("sales-summary", "children"),
        Output("sales-accepted", "children"),
        Output("sales-cancelled", "children"),
        Output("sales-toggle-bill", "options"),
        Input("sales-period", "value"),
        Input("sales-range", "start_date"),
        Input("sales-range", "end_date"),
        Input("sales-refresh", "data"),
    )
    def update_report(period, start_date, end_date, _refresh):
        """Reload the report for the selected period."""
        if period == "custom" and not (start_date and end_date):
            hint = build_alert("Pick a start and end date.", "info")
            return [], hint, None, []
        try:
            report = _load_report(period, start_date, end_date)
        except ApiError as exc:
            return [], api_failure(exc, "Loading sales report"), None, []
        summary = report.summary
        cards = [
            build_stat_card("Bills", summary.count, "lucide:receipt", "blue"),
            build_stat_card("Revenue", format_inr(summary.revenue), "lucide:indian-rupee", "green"),
            build_stat_card("Profit", format_inr(summary.profit), "lucide:trending-up", "violet"),
        ]
        options = [
            {"label": f"{b.invoice_no} - {b.customer_name} ({b.invoice_status})", "value": b.id}
            for b in report.bills
        ]
        return (
            cards,
            _grid("sales-accepted-grid", report, ACCEPTED),
            _grid("sales-cancelled-grid", report, CANCELLED),
            options,
        )

    @app.callback(
        Output("sales-feedback", "children"),
        Output("sales-refresh", "data"),
        Input("sales-toggle", "n_clicks"),
        State("sales-toggle-bill", "value"),
        State("sales-refresh", "data"),
        prevent_initial_call=True,
    )
    def toggle_status(_n_clicks, bill_id, refresh):
        if not bill_id:
            return build_alert("Select an invoice.", "warning"), no_update
        try:
            service().toggle_invoice_status(bill_id)
        except ApiError as exc:
            return api_failure(exc, "Status change"), no_update
        return build_alert("Invoice status updated.", "success"), (refresh or 0) + 1

    @app.callback(
        Output("download", "data", allow_duplicate=True),
        Output("sales-feedback", "children", allow_duplicate=True),
        Input("sales-export", "n_clicks"),
        State("sales-period", "value"),
        State("sales-range", "start_date"),
        State("sales-range", "end_date"),
        prevent_initial_call=True,
    )
    def export_report(_n_clicks, period, start_date, end_date):
        """Download every bill of the report with the fixed sales columns."""
        try:
            report = _load_report(period, start_date, end_date)
        except ApiError as exc:
            return no_update, api_failure(exc, "Export")
        frame = sales_report_frame(report.bills)
        name = f"sales_report_{period or 'daily'}_{date.today().isoformat()}.csv"
        return dcc.send_data_frame(frame.to_csv, name, index=False), no_update
