"""
Dashboard page: stat cards, revenue chart, reminders and stock alerts.

The metrics and the revenue series come from two API calls whose combined
payload is held in the process-wide TTL cache, so returning to the
dashboard within ERP_METRICS_TTL seconds renders without a request. The
refresh button drops the cached payload first.
"""

from dataclasses import asdict
from datetime import date

from dash import Input, Output, ctx, html
from dash_iconify import DashIconify

from erp_console import aggregators
from erp_console.components.cards import build_alert, build_stat_card
from erp_console.components.charts import build_graph, revenue_figure
from erp_console.lib.caches import dashboard_cache
from erp_console.lib.clients import ApiError
from erp_console.models.common import DashboardMetrics, RevenuePoint
from erp_console.pages.common import api_failure, service
from erp_console.services import ErpService
from erp_console.utils import format_inr

CACHE_KEY = "dashboard"


def load_payload(erp: ErpService) -> dict:
    """Fetch the metrics and the monthly revenue series."""
    metrics = erp.dashboard_metrics()
    series = aggregators.monthly_revenue_series(erp.billing_history())
    return {"metrics": metrics.to_dict(), "chart": [asdict(p) for p in series]}


def layout() -> html.Div:
    return html.Div(
        className="page dashboard-page",
        children=[
            html.Div(
                className="page-header",
                children=[
                    html.H1("Dashboard"),
                    html.Button(
                        [DashIconify(icon="lucide:refresh-cw", width=16), " Refresh"],
                        id="dashboard-refresh",
                        className="btn btn-outline",
                        n_clicks=0,
                    ),
                ],
            ),
            html.Div(id="dashboard-cards", className="card-grid"),
            html.Div(id="dashboard-chart", className="card"),
            html.Div(
                className="two-column",
                children=[
                    html.Div(id="dashboard-reminders", className="card"),
                    html.Div(id="dashboard-stock", className="card"),
                ],
            ),
        ],
    )


def build_cards(metrics: DashboardMetrics) -> list:
    return [
        build_stat_card("Total Customers", metrics.customers, "lucide:users", "blue", "Active"),
        build_stat_card("Total Revenue", format_inr(metrics.sales), "lucide:indian-rupee", "green", "Lifetime"),
        build_stat_card("Pending Services", metrics.services, "lucide:wrench", "amber", "Scheduled"),
        build_stat_card("Net Profit", format_inr(metrics.profit), "lucide:trending-up", "violet", "Verified"),
    ]


def build_reminders(due: list) -> list:
    header = html.H3(
        [DashIconify(icon="lucide:bell", width=18), f" Due tomorrow ({len(due)})"]
    )
    if not due:
        return [header, html.P("No services due tomorrow.", className="muted")]
    return [
        header,
        html.Ul(
            [
                html.Li(f"{task.customer_name}: {task.task_type} ({task.technician})")
                for task in due
            ],
            className="reminder-list",
        ),
    ]


def build_stock_alert(metrics: DashboardMetrics) -> list:
    if metrics.low_stock > 0:
        return [
            html.H3("Stock"),
            build_alert(
                f"{metrics.low_stock} items are below safety levels. Please check inventory.",
                "warning",
            ),
        ]
    return [html.H3("Stock"), build_alert("Inventory levels are healthy.", "success")]


def register_callbacks(app) -> None:
    @app.callback(
        Output("dashboard-cards", "children"),
        Output("dashboard-chart", "children"),
        Output("dashboard-stock", "children"),
        Input("dashboard-refresh", "n_clicks"),
    )
    def update_dashboard(_n_clicks: int):
        """Render cards and chart from the cached payload."""
        cache = dashboard_cache()
        if ctx.triggered_id == "dashboard-refresh":
            cache.invalidate(CACHE_KEY)
        erp = service()
        try:
            payload = cache.get_or_load(CACHE_KEY, lambda: load_payload(erp))
        except ApiError as exc:
            alert = api_failure(exc, "Loading dashboard")
            return alert, None, None
        metrics = DashboardMetrics.from_dict(payload["metrics"])
        points = [RevenuePoint(**p) for p in payload["chart"]]
        return (
            build_cards(metrics),
            build_graph("revenue-graph", revenue_figure(points)),
            build_stock_alert(metrics),
        )

    @app.callback(
        Output("dashboard-reminders", "children"),
        Input("dashboard-refresh", "n_clicks"),
    )
    def update_reminders(_n_clicks: int):
        """Services due tomorrow; read fresh on every visit."""
        try:
            upcoming = service().upcoming_services()
        except ApiError as exc:
            return api_failure(exc, "Loading reminders")
        return build_reminders(aggregators.services_due_tomorrow(upcoming, date.today()))
