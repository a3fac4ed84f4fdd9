"""
Search inputs and pagination controls.

Search inputs debounce in the browser: the value reaches the server only
after the user stops typing for ERP_SEARCH_DEBOUNCE_MS. Pager buttons are
static so their callbacks are always wired.
"""

from dash import dcc, html
from dash_iconify import DashIconify

from erp_console import config
from erp_console.pagination import PageSlice


def build_search_input(input_id: str, placeholder: str) -> html.Div:
    """Return an icon-prefixed, debounced text input."""
    return html.Div(
        className="input-with-icon",
        children=[
            DashIconify(icon="lucide:search", className="input-icon"),
            dcc.Input(
                id=input_id,
                type="text",
                value="",
                placeholder=placeholder,
                className="search-input",
                debounce=config.SEARCH_DEBOUNCE_MS / 1000,
            ),
        ],
    )


def build_pager(prefix: str) -> html.Div:
    """Return previous/next buttons and a range label with ids under ``prefix``."""
    return html.Div(
        className="pager",
        children=[
            html.Button(
                DashIconify(icon="lucide:chevron-left", width=16),
                id=f"{prefix}-prev",
                className="btn btn-outline",
                n_clicks=0,
            ),
            html.Span(id=f"{prefix}-label", className="pager-label muted"),
            html.Button(
                DashIconify(icon="lucide:chevron-right", width=16),
                id=f"{prefix}-next",
                className="btn btn-outline",
                n_clicks=0,
            ),
        ],
    )


def pager_label(page_slice: PageSlice, page: int, count: int) -> str:
    """Return text like ``"Showing 11-20 of 34 (page 2 of 4)"``."""
    if count == 0:
        return "No records"
    last = min(page_slice.last_index, count)
    return (
        f"Showing {page_slice.first_index + 1}-{last} of {count} "
        f"(page {page} of {page_slice.total_pages})"
    )
