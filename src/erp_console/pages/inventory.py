"""
Inventory page: stock overview, product list, restock form and history.

Product search is sent to the API; the category filter and paging run on
the loaded list. A restock is validated before the request and refreshes
the list, the overview and the restock chart.
"""

from dash import Input, Output, State, ctx, dcc, html, no_update

from erp_console import aggregators, config
from erp_console.billing import ValidationError, validate_restock
from erp_console.components.cards import build_alert, build_empty_state, build_stat_card
from erp_console.components.charts import build_graph, category_value_figure, restock_figure
from erp_console.components.controls import build_pager, build_search_input, pager_label
from erp_console.components.tables import build_grid, column
from erp_console.lib.clients import ApiError
from erp_console.models.records import Product
from erp_console.pages.common import api_failure, move_window, service
from erp_console.pagination import PageWindow
from erp_console.utils import format_inr, short_date, to_int

RESTOCK_PERIODS = [
    {"label": "Today", "value": "daily"},
    {"label": "This Week", "value": "weekly"},
    {"label": "This Month", "value": "monthly"},
]

_COLUMNS = [
    column("name", "Product"),
    column("sku", "SKU"),
    column("category_name", "Category"),
    column("brand_name", "Brand"),
    column("stock_quantity", "Stock"),
    column("sell_price", "Price", money=True),
    column("stock_value", "Stock Value", money=True),
    column("state", "Status"),
]
_HISTORY_COLUMNS = [column("date", "Date"), column("quantity", "Quantity")]


def layout() -> html.Div:
    return html.Div(
        className="page inventory-page",
        children=[
            html.Div(className="page-header", children=[html.H1("Inventory")]),
            dcc.Store(id="inventory-page", data=PageWindow(page_size=config.INVENTORY_PAGE_SIZE).to_dict()),
            dcc.Store(id="inventory-refresh", data=0),
            html.Div(id="inventory-summary", className="card-grid"),
            html.Div(
                className="two-column",
                children=[
                    html.Div(id="inventory-categories", className="card"),
                    html.Div(id="inventory-alerts", className="card"),
                ],
            ),
            html.Div(
                className="card",
                children=[
                    html.Div(
                        className="filters",
                        children=[
                            build_search_input("inventory-search", "Search by name or SKU..."),
                            dcc.Dropdown(id="inventory-category", placeholder="All categories"),
                            dcc.RadioItems(
                                id="inventory-status",
                                options=[
                                    {"label": "All", "value": "all"},
                                    {"label": "Active", "value": "active"},
                                    {"label": "Inactive", "value": "inactive"},
                                ],
                                value="all",
                                inline=True,
                            ),
                        ],
                    ),
                    html.Div(id="inventory-table"),
                    build_pager("inventory"),
                ],
            ),
            html.Div(
                className="card restock-card",
                children=[
                    html.H3("Restock"),
                    dcc.Dropdown(id="restock-product", placeholder="Select a product"),
                    dcc.Input(id="restock-qty", type="number", min=1, placeholder="Quantity arrived"),
                    html.Button("Add Stock", id="restock-submit", className="btn btn-primary", n_clicks=0),
                    html.Div(id="restock-feedback"),
                    html.Div(id="restock-product-history"),
                ],
            ),
            html.Div(
                className="card",
                children=[
                    dcc.RadioItems(id="restock-period", options=RESTOCK_PERIODS, value="monthly", inline=True),
                    html.Div(id="restock-chart"),
                ],
            ),
        ],
    )


def product_rows(products: list[Product]) -> list[dict]:
    return [
        {
            "name": p.name,
            "sku": p.sku,
            "category_name": p.category_name,
            "brand_name": p.brand_name,
            "stock_quantity": p.stock_quantity,
            "sell_price": format_inr(p.sell_price),
            "stock_value": format_inr(p.stock_value),
            "state": "Active" if p.is_active else "Inactive",
        }
        for p in products
    ]


def build_summary(products: list[Product]) -> list:
    overview = aggregators.inventory_overview(products)
    return [
        build_stat_card("Stock Value", format_inr(overview.total_value), "lucide:indian-rupee", "green"),
        build_stat_card("Units in Stock", overview.total_items, "lucide:package", "blue"),
        build_stat_card("Low Stock", overview.low_stock, "lucide:alert-triangle", "amber"),
        build_stat_card("Out of Stock", overview.out_of_stock, "lucide:package-x", "red"),
    ]


def build_alerts(products: list[Product]) -> list:
    out_of_stock, low_stock = aggregators.stock_alerts(products, config.LOW_STOCK_LIMIT)
    if not (out_of_stock or low_stock):
        return [html.H3("Stock Alerts"), build_alert("Inventory levels are healthy.", "success")]
    items = [html.Li(f"{p.name}: out of stock", className="text-danger") for p in out_of_stock]
    items += [html.Li(f"{p.name}: {p.stock_quantity} left", className="text-warning") for p in low_stock]
    return [html.H3("Stock Alerts"), html.Ul(items, className="alert-list")]


def register_callbacks(app) -> None:
    @app.callback(
        Output("inventory-summary", "children"),
        Output("inventory-categories", "children"),
        Output("inventory-alerts", "children"),
        Output("restock-product", "options"),
        Output("inventory-category", "options"),
        Input("inventory-refresh", "data"),
    )
    def update_overview(_refresh):
        """Stock totals, category chart and alerts over every product."""
        erp = service()
        try:
            products = list(erp.list_products())
            categories = erp.reference_list("categories")
        except ApiError as exc:
            return [], api_failure(exc, "Loading inventory"), None, [], []
        overview = aggregators.inventory_overview(products)
        options = [
            {"label": f"{p.name} ({p.stock_quantity} in stock)", "value": p.id}
            for p in products
            if p.is_active
        ]
        category_options = [{"label": c.get("name", ""), "value": c.get("name", "")} for c in categories]
        return (
            build_summary(products),
            [html.H3("Top Categories"), build_graph("category-graph", category_value_figure(overview.categories))],
            build_alerts(products),
            options,
            category_options,
        )

    @app.callback(
        Output("inventory-table", "children"),
        Output("inventory-label", "children"),
        Output("inventory-page", "data"),
        Input("inventory-search", "value"),
        Input("inventory-category", "value"),
        Input("inventory-status", "value"),
        Input("inventory-prev", "n_clicks"),
        Input("inventory-next", "n_clicks"),
        Input("inventory-refresh", "data"),
        State("inventory-page", "data"),
    )
    def update_products(search, category, status, _prev, _next, _refresh, window_data):
        try:
            products = service().list_products(search=search or None, status=status or "all")
        except ApiError as exc:
            return api_failure(exc, "Loading products"), "", no_update
        if category:
            products = [p for p in products if p.category_name == category]
        window = PageWindow.from_dict(window_data, config.INVENTORY_PAGE_SIZE)
        reset_on = {"inventory-search", "inventory-category", "inventory-status"}
        move_window(window, ctx.triggered_id, "inventory", len(products), reset_on)
        page_slice = window.project(products)
        table = (
            build_grid("inventory-grid", _COLUMNS, product_rows(page_slice.visible))
            if products
            else build_empty_state("No products found", "Try a different search or category.")
        )
        return table, pager_label(page_slice, window.page, len(products)), window.to_dict()

    @app.callback(
        Output("restock-feedback", "children"),
        Output("inventory-refresh", "data"),
        Input("restock-submit", "n_clicks"),
        State("restock-product", "value"),
        State("restock-qty", "value"),
        State("inventory-refresh", "data"),
        prevent_initial_call=True,
    )
    def restock(_n_clicks, product_id, quantity, refresh):
        """Validate and record arrived stock."""
        if not product_id:
            return build_alert("Select a product.", "warning"), no_update
        try:
            arrived = validate_restock(to_int(quantity))
            service().restock(product_id, arrived)
        except ValidationError as exc:
            return build_alert(str(exc), "warning"), no_update
        except ApiError as exc:
            return api_failure(exc, "Restock"), no_update
        return build_alert(f"Added {arrived} units.", "success"), (refresh or 0) + 1

    @app.callback(
        Output("restock-product-history", "children"),
        Input("restock-product", "value"),
        Input("inventory-refresh", "data"),
    )
    def update_product_history(product_id, _refresh):
        if not product_id:
            return None
        try:
            entries = service().product_restock_history(product_id)
        except ApiError as exc:
            return api_failure(exc, "Loading restock history")
        if not entries:
            return html.P("No restocks recorded for this product.", className="muted")
        ordered = sorted(
            (e for e in entries if e.created_at is not None),
            key=lambda e: e.created_at,
            reverse=True,
        )
        rows = [{"date": short_date(e.created_at.date()), "quantity": e.quantity} for e in ordered]
        return build_grid("restock-history-grid", _HISTORY_COLUMNS, rows, page_size=10)

    @app.callback(
        Output("restock-chart", "children"),
        Input("restock-period", "value"),
        Input("inventory-refresh", "data"),
    )
    def update_restock_chart(period, _refresh):
        """Restocked units per date within the selected period."""
        try:
            entries = service().restock_history(period or "monthly")
        except ApiError as exc:
            return api_failure(exc, "Loading restock history")
        points = aggregators.restock_by_date(entries)
        if not points:
            return build_empty_state("No restocks", "Nothing was restocked in this period.")
        return build_graph("restock-graph", restock_figure(points))
