"""
Billing page: build a cart, validate it and create the bill.

The cart lives in a dcc.Store as a list of CartItem dictionaries. Every
add, clear and submit goes through the Cart and validate_bill rules, so a
rejected cart never reaches the API.
"""

from datetime import date

from dash import Input, Output, State, ctx, dcc, html, no_update

from erp_console.billing import Cart, ValidationError, bill_payload, validate_bill
from erp_console.components.cards import build_alert
from erp_console.components.tables import build_grid, column
from erp_console.lib.clients import ApiError
from erp_console.pages.common import api_failure, service
from erp_console.utils import format_inr, to_float, to_int

_CART_COLUMNS = [
    column("product_name", "Product"),
    column("quantity", "Qty"),
    column("unit_price", "MRP", money=True),
    column("discount", "Discount", money=True),
    column("final_price", "Price", money=True),
    column("total", "Total", money=True),
]


def layout() -> html.Div:
    return html.Div(
        className="page billing-page",
        children=[
            html.Div(className="page-header", children=[html.H1("Billing")]),
            dcc.Store(id="cart-store", data=[]),
            html.Div(
                className="card billing-form",
                children=[
                    dcc.Dropdown(id="bill-customer", placeholder="Select a customer"),
                    dcc.Dropdown(id="bill-product", placeholder="Select a product"),
                    dcc.Input(id="bill-qty", type="number", min=1, value=1, placeholder="Qty"),
                    dcc.Input(id="bill-discount", type="number", min=0, value=0, placeholder="Discount"),
                    html.Button("Add to Cart", id="bill-add", className="btn btn-outline", n_clicks=0),
                    html.Button("Clear", id="bill-clear", className="btn btn-link", n_clicks=0),
                ],
            ),
            html.Div(id="cart-table", className="card"),
            html.Div(
                className="card billing-totals",
                children=[
                    html.H3(id="bill-total"),
                    dcc.Input(id="bill-paid", type="number", min=0, value=0, placeholder="Paid amount"),
                    dcc.DatePickerSingle(id="bill-next-service", placeholder="Next service date"),
                    html.Button("Generate Bill", id="bill-submit", className="btn btn-primary", n_clicks=0),
                    html.Div(id="bill-feedback"),
                ],
            ),
        ],
    )


def cart_rows(cart: Cart) -> list[dict]:
    return [
        {
            "product_name": item.product_name,
            "quantity": item.quantity,
            "unit_price": format_inr(item.unit_price),
            "discount": format_inr(item.discount),
            "final_price": format_inr(item.final_price),
            "total": format_inr(item.total),
        }
        for item in cart.items
    ]


def register_callbacks(app) -> None:
    @app.callback(
        Output("bill-customer", "options"),
        Output("bill-product", "options"),
        Output("bill-feedback", "children", allow_duplicate=True),
        Input("cart-store", "id"),
        prevent_initial_call="initial_duplicate",
    )
    def load_options(_store_id):
        """Fill the customer and active product pickers."""
        erp = service()
        try:
            customers = erp.list_customers()
            products = erp.list_products(status="active")
        except ApiError as exc:
            return [], [], api_failure(exc, "Loading customers and products")
        customer_options = [{"label": f"{c.name} ({c.phone})", "value": c.id} for c in customers]
        product_options = [
            {
                "label": f"{p.name} - {format_inr(p.sell_price)} ({p.stock_quantity} in stock)",
                "value": p.id,
                "disabled": p.stock_quantity <= 0,
            }
            for p in products
        ]
        return customer_options, product_options, no_update

    @app.callback(
        Output("cart-store", "data"),
        Output("bill-feedback", "children"),
        Input("bill-add", "n_clicks"),
        Input("bill-clear", "n_clicks"),
        Input("bill-submit", "n_clicks"),
        State("cart-store", "data"),
        State("bill-product", "value"),
        State("bill-qty", "value"),
        State("bill-discount", "value"),
        State("bill-customer", "value"),
        State("bill-paid", "value"),
        State("bill-next-service", "date"),
        prevent_initial_call=True,
    )
    def update_cart(_add, _clear, _submit, cart_data, product_id, qty, discount, customer_id, paid, next_service):
        """Add to, clear or submit the cart."""
        cart = Cart.from_list(cart_data)
        trigger = ctx.triggered_id
        if trigger == "bill-clear":
            return [], None
        erp = service()
        try:
            if trigger == "bill-add":
                if not product_id:
                    raise ValidationError("Select a product.")
                product = next((p for p in erp.list_products(status="active") if p.id == product_id), None)
                if product is None:
                    raise ValidationError("Product is no longer available.")
                cart.add(product, to_int(qty, 1), to_float(discount))
                return cart.to_list(), None

            paid_amount = to_float(paid)
            validate_bill(cart, customer_id, paid_amount)
            result = erp.create_bill(bill_payload(cart, customer_id, paid_amount, next_service))
        except ValidationError as exc:
            return no_update, build_alert(str(exc), "warning")
        except ApiError as exc:
            return no_update, api_failure(exc, "Creating bill")
        invoice = result.get("invoice_no") or result.get("id") or ""
        return [], build_alert(f"Bill {invoice} created on {date.today():%d %b %Y}.", "success")

    @app.callback(
        Output("cart-table", "children"),
        Output("bill-total", "children"),
        Input("cart-store", "data"),
    )
    def render_cart(cart_data):
        cart = Cart.from_list(cart_data)
        if not cart.items:
            return html.P("Cart is empty.", className="muted"), f"Total: {format_inr(0)}"
        return (
            build_grid("cart-grid", _CART_COLUMNS, cart_rows(cart)),
            f"Total: {format_inr(cart.grand_total)}",
        )
