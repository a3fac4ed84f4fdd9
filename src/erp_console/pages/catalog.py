"""
Product catalog page: product editor and brand/category master data.

Choosing a product loads it into the editor; with none chosen, saving
creates one. Products already sold cannot be deleted, so the editor also
offers an active/inactive toggle. Brand, category and sub-category writes
go through the service, which drops the cached reference list so every
dropdown sees the change on its next load.
"""

from dash import Input, Output, State, ctx, dcc, html, no_update

from erp_console.billing import ValidationError
from erp_console.components.cards import build_alert, build_empty_state
from erp_console.components.tables import build_grid, column
from erp_console.forms import product_payload, reference_payload, sub_categories_of
from erp_console.lib import logs
from erp_console.lib.clients import ApiError
from erp_console.models.records import Product
from erp_console.pages.common import api_failure, service
from erp_console.services.erp_service import REFERENCE_KINDS
from erp_console.utils import format_inr

LOG = logs.logger(__file__)

PRODUCT_FIELDS = (
    "name",
    "sku",
    "brand_id",
    "category_id",
    "sub_category_id",
    "net_price",
    "sell_price",
    "warranty_details",
)
# same order as PRODUCT_FIELDS
EDITOR_IDS = (
    "product-name",
    "product-sku",
    "product-brand",
    "product-category",
    "product-sub-category",
    "product-net-price",
    "product-sell-price",
    "product-warranty",
)
KIND_LABELS = {"brands": "Brand", "categories": "Category", "sub-categories": "Sub-category"}
ACTIVE = "active"

_COLUMNS = [
    column("name", "Product"),
    column("sku", "SKU"),
    column("brand_name", "Brand"),
    column("category_name", "Category"),
    column("net_price", "Net", money=True),
    column("sell_price", "Sell", money=True),
    column("state", "Status"),
]
_REFERENCE_COLUMNS = [column("name", "Name")]


def _field(field_id: str, placeholder: str, input_type: str = "text") -> dcc.Input:
    return dcc.Input(id=field_id, type=input_type, placeholder=placeholder)


def layout() -> html.Div:
    return html.Div(
        className="page catalog-page",
        children=[
            html.Div(className="page-header", children=[html.H1("Product Catalog")]),
            dcc.Store(id="catalog-refresh", data=0),
            dcc.Store(id="catalog-forms", data={}),
            html.Div(id="catalog-products", className="card"),
            html.Div(
                className="two-column",
                children=[
                    html.Div(
                        className="card product-editor",
                        children=[
                            html.H3("Product"),
                            dcc.Dropdown(id="product-edit-select", placeholder="New product (or pick one to edit)"),
                            _field("product-name", "Name"),
                            _field("product-sku", "SKU"),
                            dcc.Dropdown(id="product-brand", placeholder="Brand"),
                            dcc.Dropdown(id="product-category", placeholder="Category"),
                            dcc.Dropdown(id="product-sub-category", placeholder="Sub-category (optional)"),
                            _field("product-net-price", "Net price", "number"),
                            _field("product-sell-price", "Sell price", "number"),
                            _field("product-warranty", "Warranty details"),
                            dcc.Checklist(
                                id="product-active",
                                options=[{"label": "Active", "value": ACTIVE}],
                                value=[ACTIVE],
                            ),
                            html.Div(
                                className="button-row",
                                children=[
                                    html.Button(
                                        "Save Product", id="product-save", className="btn btn-primary", n_clicks=0
                                    ),
                                    html.Button(
                                        "Toggle Active", id="product-toggle", className="btn btn-outline", n_clicks=0
                                    ),
                                    dcc.ConfirmDialogProvider(
                                        html.Button("Delete", className="btn btn-danger"),
                                        id="product-delete",
                                        message="Delete this product?",
                                    ),
                                ],
                            ),
                            html.Div(id="product-feedback"),
                        ],
                    ),
                    html.Div(
                        className="card master-data",
                        children=[
                            html.H3("Master Data"),
                            dcc.RadioItems(
                                id="master-kind",
                                options=[{"label": KIND_LABELS[k] + "s", "value": k} for k in REFERENCE_KINDS],
                                value="brands",
                                inline=True,
                            ),
                            dcc.Dropdown(id="master-parent", placeholder="Parent category"),
                            html.Div(id="master-list"),
                            dcc.Dropdown(id="master-item-select", placeholder="New item (or pick one to rename)"),
                            _field("master-name", "Name"),
                            html.Div(
                                className="button-row",
                                children=[
                                    html.Button("Save", id="master-save", className="btn btn-primary", n_clicks=0),
                                    dcc.ConfirmDialogProvider(
                                        html.Button("Delete", className="btn btn-danger"),
                                        id="master-delete",
                                        message="Delete this item?",
                                    ),
                                ],
                            ),
                            html.Div(id="master-feedback"),
                        ],
                    ),
                ],
            ),
        ],
    )


def product_form(product: Product) -> dict:
    """Return the editor values of a product, keyed like PRODUCT_FIELDS plus ``is_active``."""
    return {
        "name": product.name,
        "sku": product.sku,
        "brand_id": product.brand_id or None,
        "category_id": product.category_id or None,
        "sub_category_id": product.sub_category_id or None,
        "net_price": product.net_price or None,
        "sell_price": product.sell_price or None,
        "warranty_details": product.warranty_details,
        "is_active": product.is_active,
    }


def product_rows(products: list[Product]) -> list[dict]:
    return [
        {
            "name": p.name,
            "sku": p.sku,
            "brand_name": p.brand_name,
            "category_name": p.category_name,
            "net_price": format_inr(p.net_price),
            "sell_price": format_inr(p.sell_price),
            "state": "Active" if p.is_active else "Inactive",
        }
        for p in products
    ]


def reference_items(kind: str, items: list[dict], parent_id: str | None = None) -> list[dict]:
    """Return the items listed for ``kind``; sub-categories only under the chosen parent."""
    if kind == "sub-categories":
        return sub_categories_of(items, parent_id)
    return list(items)


def _options(items) -> list[dict]:
    return [{"label": i.get("name", ""), "value": i.get("id")} for i in items]


def register_callbacks(app) -> None:
    @app.callback(
        Output("catalog-products", "children"),
        Output("product-edit-select", "options"),
        Output("product-brand", "options"),
        Output("product-category", "options"),
        Output("master-parent", "options"),
        Output("catalog-forms", "data"),
        Input("catalog-refresh", "data"),
    )
    def update_catalog(_refresh):
        erp = service()
        try:
            products = list(erp.list_products())
            brands = erp.reference_list("brands")
            categories = erp.reference_list("categories")
        except ApiError as exc:
            return api_failure(exc, "Loading catalog"), [], [], [], [], {}
        table = (
            build_grid("catalog-grid", _COLUMNS, product_rows(products), page_size=15)
            if products
            else build_empty_state("No products yet", "Create one with the editor below.")
        )
        product_options = [{"label": f"{p.name} ({p.sku or 'no SKU'})", "value": p.id} for p in products]
        forms = {p.id: product_form(p) for p in products}
        return table, product_options, _options(brands), _options(categories), _options(categories), forms

    @app.callback(
        *(Output(component_id, "value") for component_id in EDITOR_IDS),
        Output("product-active", "value"),
        Input("product-edit-select", "value"),
        State("catalog-forms", "data"),
        prevent_initial_call=True,
    )
    def load_product(product_id, forms):
        """Fill the editor from the chosen product, or clear it for a new one."""
        form = (forms or {}).get(product_id) if product_id else None
        if not form:
            return ("", "", None, None, None, None, None, "", [ACTIVE])
        return (*(form[name] for name in PRODUCT_FIELDS), [ACTIVE] if form["is_active"] else [])

    @app.callback(
        Output("product-sub-category", "options"),
        Input("product-category", "value"),
        Input("catalog-refresh", "data"),
    )
    def update_sub_categories(category_id, _refresh):
        if not category_id:
            return []
        try:
            subs = service().reference_list("sub-categories")
        except ApiError as exc:
            LOG.warning("Could not load sub-categories: %s", exc.user_message)
            return []
        return _options(sub_categories_of(subs, category_id))

    @app.callback(
        Output("product-feedback", "children"),
        Output("catalog-refresh", "data"),
        Output("product-edit-select", "value"),
        Input("product-save", "n_clicks"),
        State("product-edit-select", "value"),
        *(State(component_id, "value") for component_id in EDITOR_IDS),
        State("product-active", "value"),
        State("catalog-refresh", "data"),
        prevent_initial_call=True,
    )
    def save_product(
        _n_clicks, product_id, name, sku, brand_id, category_id, sub_category_id, net, sell, warranty, active, refresh
    ):
        """Create a product, or update the one in the editor."""
        erp = service()
        try:
            payload = product_payload(
                name,
                brand_id,
                category_id,
                net,
                sell,
                sku=sku,
                sub_category_id=sub_category_id,
                warranty_details=warranty,
                is_active=ACTIVE in (active or []),
            )
            if product_id:
                erp.update_product(product_id, payload)
            else:
                erp.create_product(payload)
        except ValidationError as exc:
            return build_alert(str(exc), "warning"), no_update, no_update
        except ApiError as exc:
            return api_failure(exc, "Saving product"), no_update, no_update
        message = "Product updated." if product_id else "Product created."
        return build_alert(message, "success"), (refresh or 0) + 1, None

    @app.callback(
        Output("product-feedback", "children", allow_duplicate=True),
        Output("catalog-refresh", "data", allow_duplicate=True),
        Output("product-edit-select", "value", allow_duplicate=True),
        Input("product-toggle", "n_clicks"),
        Input("product-delete", "submit_n_clicks"),
        State("product-edit-select", "value"),
        State("catalog-forms", "data"),
        State("catalog-refresh", "data"),
        prevent_initial_call=True,
    )
    def change_product(_toggle, _delete, product_id, forms, refresh):
        """Flip the chosen product's active flag, or delete it."""
        form = (forms or {}).get(product_id) if product_id else None
        if not form:
            return build_alert("Pick a product first.", "warning"), no_update, no_update
        erp = service()
        try:
            if ctx.triggered_id == "product-toggle":
                active = not form["is_active"]
                erp.set_product_status(product_id, active)
                message = f"{form['name']} marked {'Active' if active else 'Inactive'}."
            else:
                erp.delete_product(product_id)
                message = f"{form['name']} deleted."
        except ApiError as exc:
            return api_failure(exc, "Product update"), no_update, no_update
        return build_alert(message, "success"), (refresh or 0) + 1, None

    @app.callback(
        Output("master-list", "children"),
        Output("master-item-select", "options"),
        Output("master-item-select", "value"),
        Output("master-parent", "style"),
        Input("master-kind", "value"),
        Input("master-parent", "value"),
        Input("catalog-refresh", "data"),
    )
    def update_master_list(kind, parent_id, _refresh):
        kind = kind or "brands"
        parent_style = {} if kind == "sub-categories" else {"display": "none"}
        try:
            items = reference_items(kind, list(service().reference_list(kind)), parent_id)
        except ApiError as exc:
            return api_failure(exc, "Loading master data"), [], None, parent_style
        if not items:
            hint = "Add the first one below."
            if kind == "sub-categories" and not parent_id:
                hint = "Pick a parent category."
            table = build_empty_state(f"No {KIND_LABELS[kind].lower()} items", hint)
        else:
            table = build_grid("master-grid", _REFERENCE_COLUMNS, [{"name": i.get("name", "")} for i in items])
        return table, _options(items), None, parent_style

    @app.callback(
        Output("master-name", "value"),
        Input("master-item-select", "value"),
        State("master-item-select", "options"),
        prevent_initial_call=True,
    )
    def load_master_item(item_id, options):
        return next((o["label"] for o in options or [] if o["value"] == item_id), "")

    @app.callback(
        Output("master-feedback", "children"),
        Output("catalog-refresh", "data", allow_duplicate=True),
        Input("master-save", "n_clicks"),
        Input("master-delete", "submit_n_clicks"),
        State("master-kind", "value"),
        State("master-item-select", "value"),
        State("master-name", "value"),
        State("master-parent", "value"),
        State("catalog-refresh", "data"),
        prevent_initial_call=True,
    )
    def change_master_item(_save, _delete, kind, item_id, name, parent_id, refresh):
        """Create, rename or delete a brand, category or sub-category."""
        kind = kind or "brands"
        label = KIND_LABELS[kind]
        erp = service()
        try:
            if ctx.triggered_id == "master-delete":
                if not item_id:
                    return build_alert(f"Pick a {label.lower()} to delete.", "warning"), no_update
                erp.delete_reference(kind, item_id)
                message = f"{label} deleted."
            else:
                erp.save_reference(kind, reference_payload(kind, name, parent_id), item_id)
                message = f"{label} {'updated' if item_id else 'added'}."
        except ValidationError as exc:
            return build_alert(str(exc), "warning"), no_update
        except ApiError as exc:
            return api_failure(exc, f"{label} change"), no_update
        return build_alert(message, "success"), (refresh or 0) + 1
