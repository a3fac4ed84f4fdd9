"""
Layout helpers for the ERP console Dash application.

This module defines the root layout structure including:
- URL tracking for path-based page routing
- dcc.Store components for state shared across pages
- WebSocket connection for update notifications
- Sidebar navigation, update banner and page container

The theme flag lives in browser local storage so it survives restarts.
"""

from dash import dcc, html
from dash_extensions import WebSocket
from dash_iconify import DashIconify

from erp_console import __version__, config
from erp_console.components.cards import build_loading_state
from erp_console.components.update_banner import build_update_banner
from erp_console.updates.state import UpdateSession
from erp_console.ws_server import UPDATES_ROUTE

DARK = "dark"
LIGHT = "light"

NAV_ITEMS = [
    ("/", "Dashboard", "lucide:layout-dashboard"),
    ("/customers", "Customers", "lucide:users"),
    ("/accounts", "Accounts", "lucide:wallet"),
    ("/billing", "Billing", "lucide:receipt"),
    ("/bills", "Bills", "lucide:files"),
    ("/sales", "Sales Report", "lucide:file-bar-chart"),
    ("/tasks", "Service Tasks", "lucide:calendar-check"),
    ("/services", "Service Reports", "lucide:wrench"),
    ("/employees", "Employees", "lucide:id-card"),
    ("/inventory", "Inventory", "lucide:package"),
    ("/catalog", "Product Catalog", "lucide:tags"),
    ("/warranties", "Warranties", "lucide:shield-check"),
    ("/settings", "Settings", "lucide:settings"),
]


def shell_class(theme: str | None) -> str:
    """Return the root class name for a theme flag."""
    return f"app-shell theme-{DARK if theme == DARK else LIGHT}"


def build_layout() -> html.Div:
    """
    Build the root layout for the ERP console.

    The page container renders a loading indicator until the routing
    callback fills it with the page for the current path.

    Returns:
        Root html.Div containing the complete application layout.
    """
    return html.Div(
        id="app-shell",
        className=shell_class(LIGHT),
        children=[
            dcc.Location(id="url", refresh=False),
            # CSV downloads from any page
            dcc.Download(id="download"),
            # Theme flag persisted in browser local storage ("dark" | "light")
            dcc.Store(id="theme-store", storage_type="local", data=LIGHT),
            # Browser side UpdateSession, driven only by pushed notifications
            dcc.Store(id="update-session", data=UpdateSession().to_dict()),
            # WebSocket URL configuration (path resolved relative to host)
            dcc.Store(id="ws-url-store", data={"path": UPDATES_ROUTE}),
            WebSocket(id="update-ws", url=""),
            _build_sidebar(),
            html.Main(
                className="app-container",
                children=[
                    build_update_banner(),
                    # Services due tomorrow, shown once when the console opens
                    html.Div(id="startup-reminder"),
                    html.Div(id="page-content", children=build_loading_state()),
                ],
            ),
        ],
    )


def _build_sidebar() -> html.Nav:
    links = [
        dcc.Link(
            className="nav-item",
            href=href,
            children=[DashIconify(icon=icon, width=18), html.Span(label)],
        )
        for href, label, icon in NAV_ITEMS
    ]
    return html.Nav(
        className="sidebar",
        children=[
            html.Div(
                className="sidebar-brand",
                children=[
                    DashIconify(icon="lucide:zap", width=24),
                    html.Span(config.APP_TITLE),
                ],
            ),
            html.Div(className="sidebar-links", children=links),
            html.Button(
                id="theme-toggle",
                className="btn btn-outline theme-toggle",
                n_clicks=0,
                children=[DashIconify(icon="lucide:moon-star", width=16), " Theme"],
            ),
            html.Small(f"v{__version__}", className="muted sidebar-version"),
        ],
    )
