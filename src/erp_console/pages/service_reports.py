"""
Service reports page: technician performance, task mix and the calendar.

Technician history is paged client-side seven tasks at a time and can be
searched by customer, type, status, notes or date (ISO or DDMMYYYY).
"""

from dataclasses import asdict
from datetime import date

from dash import Input, Output, State, ctx, dcc, html, no_update

from erp_console import aggregators, config
from erp_console.components.cards import build_alert, build_empty_state
from erp_console.components.charts import build_graph, task_type_figure
from erp_console.components.controls import build_pager, build_search_input, pager_label
from erp_console.components.heatmap import build_heatmap
from erp_console.components.tables import build_grid, column
from erp_console.lib.clients import ApiError
from erp_console.pages.common import api_failure, move_window, service
from erp_console.pagination import PageWindow

_TECH_COLUMNS = [
    column("name", "Technician"),
    column("total", "Tasks"),
    column("completed", "Completed"),
    column("pending", "Pending"),
    column("rate", "Completion %"),
]
_HISTORY_COLUMNS = [
    column("service_date", "Date"),
    column("customer_name", "Customer"),
    column("task_type", "Type"),
    column("status", "Status"),
    column("notes", "Notes"),
]


def layout() -> html.Div:
    today = date.today()
    return html.Div(
        className="page service-reports-page",
        children=[
            html.Div(className="page-header", children=[html.H1("Service Reports")]),
            dcc.Store(id="heatmap-month", data={"year": today.year, "month": today.month}),
            dcc.Store(id="tech-page", data=PageWindow(page_size=config.TECHNICIAN_PAGE_SIZE).to_dict()),
            dcc.Store(id="services-refresh", data=0),
            html.Div(
                className="two-column",
                children=[
                    html.Div(id="tech-performance", className="card"),
                    html.Div(id="task-types", className="card"),
                ],
            ),
            html.Div(
                className="card",
                children=[
                    html.Div(
                        className="heatmap-nav",
                        children=[
                            html.Button("<", id="heatmap-prev", className="btn btn-outline", n_clicks=0),
                            html.Button(">", id="heatmap-next", className="btn btn-outline", n_clicks=0),
                        ],
                    ),
                    html.Div(id="service-heatmap"),
                ],
            ),
            html.Div(
                className="card",
                children=[
                    html.H3("Technician History"),
                    dcc.Dropdown(id="tech-select", placeholder="Select a technician"),
                    build_search_input("tech-search", "Search customer, type, status or date (DDMMYYYY)..."),
                    html.Div(id="tech-history"),
                    build_pager("tech"),
                    dcc.Dropdown(id="task-complete-select", placeholder="Pending task"),
                    html.Button("Mark Completed", id="task-complete", className="btn btn-primary", n_clicks=0),
                    html.Div(id="task-feedback"),
                ],
            ),
        ],
    )


def shift_month(year: int, month: int, step: int) -> tuple[int, int]:
    """Move ``step`` months from ``year``/``month``."""
    index = year * 12 + (month - 1) + step
    return index // 12, index % 12 + 1


def register_callbacks(app) -> None:
    @app.callback(
        Output("tech-performance", "children"),
        Output("task-types", "children"),
        Output("tech-select", "options"),
        Input("services-refresh", "data"),
    )
    def update_overview(_refresh):
        try:
            tasks = service().list_services()
        except ApiError as exc:
            return api_failure(exc, "Loading services"), None, []
        stats = aggregators.technician_performance(tasks)
        rows = [{**asdict(s), "pending": s.pending, "rate": s.rate} for s in stats]
        shares = aggregators.task_type_distribution(tasks)
        return (
            [html.H3("Technician Performance"), build_grid("tech-grid", _TECH_COLUMNS, rows)],
            [html.H3("Task Types"), build_graph("task-type-graph", task_type_figure(shares))],
            [{"label": s.name, "value": s.name} for s in stats],
        )

    @app.callback(
        Output("service-heatmap", "children"),
        Output("heatmap-month", "data"),
        Input("heatmap-prev", "n_clicks"),
        Input("heatmap-next", "n_clicks"),
        Input("services-refresh", "data"),
        State("heatmap-month", "data"),
    )
    def update_heatmap(_prev, _next, _refresh, shown):
        year, month = shown["year"], shown["month"]
        if ctx.triggered_id == "heatmap-prev":
            year, month = shift_month(year, month, -1)
        elif ctx.triggered_id == "heatmap-next":
            year, month = shift_month(year, month, 1)
        try:
            tasks = service().list_services()
        except ApiError as exc:
            return api_failure(exc, "Loading calendar"), no_update
        days = aggregators.service_heatmap(tasks, year, month)
        return build_heatmap(days, year, month), {"year": year, "month": month}

    @app.callback(
        Output("tech-history", "children"),
        Output("tech-label", "children"),
        Output("tech-page", "data"),
        Output("task-complete-select", "options"),
        Input("tech-select", "value"),
        Input("tech-search", "value"),
        Input("tech-prev", "n_clicks"),
        Input("tech-next", "n_clicks"),
        Input("services-refresh", "data"),
        State("tech-page", "data"),
    )
    def update_history(technician, search, _prev, _next, _refresh, window_data):
        """Show one technician's tasks, newest first, seven per page."""
        if not technician:
            return html.P("Select a technician.", className="muted"), "", no_update, []
        try:
            tasks = [t for t in service().list_services() if t.technician == technician]
        except ApiError as exc:
            return api_failure(exc, "Loading history"), "", no_update, []
        tasks.sort(key=lambda t: t.service_date, reverse=True)
        filtered = aggregators.filter_tasks(tasks, search)
        window = PageWindow.from_dict(window_data, config.TECHNICIAN_PAGE_SIZE)
        move_window(window, ctx.triggered_id, "tech", len(filtered), {"tech-select", "tech-search"})
        page_slice = window.project(filtered)
        table = (
            build_grid("tech-history-grid", _HISTORY_COLUMNS, [asdict(t) for t in page_slice.visible])
            if filtered
            else build_empty_state("No tasks", "No task matches this search.")
        )
        pending = [
            {"label": f"{t.service_date} - {t.customer_name} ({t.task_type})", "value": t.id}
            for t in tasks
            if not t.is_completed
        ]
        return table, pager_label(page_slice, window.page, len(filtered)), window.to_dict(), pending

    @app.callback(
        Output("task-feedback", "children"),
        Output("services-refresh", "data"),
        Input("task-complete", "n_clicks"),
        State("task-complete-select", "value"),
        State("services-refresh", "data"),
        prevent_initial_call=True,
    )
    def complete_task(_n_clicks, task_id, refresh):
        if not task_id:
            return build_alert("Select a pending task.", "warning"), no_update
        try:
            service().complete_service(task_id)
        except ApiError as exc:
            return api_failure(exc, "Completing task"), no_update
        return build_alert("Task marked completed.", "success"), (refresh or 0) + 1
