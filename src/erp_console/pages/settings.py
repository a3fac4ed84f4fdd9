"""
Settings page: theme, API heartbeat, app version and update check.

The heartbeat polls the API every ERP_HEARTBEAT_INTERVAL seconds while the
page is open. The update check is sent over the update WebSocket; its
result arrives as notifications and shows in the update banner.
"""

from dash import Input, Output, State, dcc, html, no_update
from dash_iconify import DashIconify

from erp_console import config, health
from erp_console.layout import DARK, LIGHT
from erp_console.lib.clients import api_client
from erp_console.updates.channel import UiCommand, UiRequest
from erp_console.updates.state import UpdateSession


def layout() -> html.Div:
    return html.Div(
        className="page settings-page",
        children=[
            html.Div(className="page-header", children=[html.H1("Settings")]),
            dcc.Interval(id="heartbeat", interval=config.HEARTBEAT_INTERVAL * 1000, n_intervals=0),
            html.Div(
                className="card",
                children=[
                    html.H3("Appearance"),
                    html.Button(
                        [DashIconify(icon="lucide:sun-moon", width=16), " Toggle dark mode"],
                        id="settings-theme-toggle",
                        className="btn btn-outline",
                        n_clicks=0,
                    ),
                ],
            ),
            html.Div(
                className="card",
                children=[
                    html.H3("API Connection"),
                    html.Div(id="api-status", children=status_badge(health.HealthStatus())),
                    html.Small(config.API_BASE_URL, className="muted"),
                ],
            ),
            html.Div(
                className="card",
                children=[
                    html.H3("Software Update"),
                    html.P(id="app-version", className="muted"),
                    html.Button(
                        [DashIconify(icon="lucide:refresh-cw", width=16), " Check for updates"],
                        id="check-update-btn",
                        className="btn btn-primary",
                        n_clicks=0,
                    ),
                ],
            ),
        ],
    )


def status_badge(status: health.HealthStatus) -> html.Span:
    if status.online:
        return html.Span(f"Online ({status.latency_ms} ms)", className="badge badge-success")
    if status.status == health.ERROR:
        return html.Span("Unreachable", className="badge badge-danger")
    return html.Span("Checking...", className="badge badge-muted")


def register_callbacks(app) -> None:
    @app.callback(
        Output("api-status", "children"),
        Input("heartbeat", "n_intervals"),
    )
    def heartbeat(_n_intervals):
        return status_badge(health.check_api(api_client()))

    @app.callback(
        Output("app-version", "children"),
        Input("update-session", "data"),
    )
    def show_version(session_data):
        session = UpdateSession.from_dict(session_data)
        return f"Installed version: {session.app_version or 'unknown'}"

    @app.callback(
        Output("update-ws", "send", allow_duplicate=True),
        Input("check-update-btn", "n_clicks"),
        prevent_initial_call=True,
    )
    def check_for_updates(n_clicks):
        """Ask the host for a manual update check."""
        if not n_clicks:
            return no_update
        return UiRequest(UiCommand.MANUAL_CHECK_UPDATE).to_json()

    @app.callback(
        Output("theme-store", "data", allow_duplicate=True),
        Input("settings-theme-toggle", "n_clicks"),
        State("theme-store", "data"),
        prevent_initial_call=True,
    )
    def toggle_theme(_n_clicks, theme):
        return LIGHT if theme == DARK else DARK
