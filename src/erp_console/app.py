"""
Dash application entry point.

Builds the Dash app, wires page routing, the theme flag and the update
banner, and attaches the update host to the WebSocket route on the same
Flask server.
"""

import json
from datetime import date
from urllib.parse import urlsplit

from dash import Dash, Input, Output, State, ctx, html, no_update

from erp_console import aggregators, config, pages, ws_server
from erp_console.components.cards import build_alert
from erp_console.components.update_banner import banner_view, visibility
from erp_console.layout import DARK, LIGHT, build_layout, shell_class
from erp_console.lib import logs
from erp_console.lib.clients import ApiError
from erp_console.services import get_erp_service
from erp_console.updates import HostNotification, UiCommand, UiRequest, UpdateHost, UpdateSession, default_backend

LOG = logs.logger(__file__)

app = Dash(__name__, title=config.APP_TITLE, suppress_callback_exceptions=True)
app.layout = build_layout()

_host = UpdateHost(default_backend(), publish=lambda n: ws_server.broadcast(n.to_dict()))
ws_server.init_websocket(app.server, _host.handle)


def websocket_url(href: str | None, path: str) -> str:
    """Return the ws:// or wss:// URL of ``path`` on the page's own host."""
    parts = urlsplit(href or "")
    if not parts.netloc:
        return ""
    scheme = "wss" if parts.scheme == "https" else "ws"
    return f"{scheme}://{parts.netloc}{path}"


def read_notification(message: dict | None) -> HostNotification | None:
    """Decode a WebSocket message event, or None if it is not a notification."""
    if not message or not message.get("data"):
        return None
    try:
        return HostNotification.from_dict(json.loads(message["data"]))
    except ValueError as exc:
        LOG.warning("Ignoring malformed update notification: %s", exc)
        return None


@app.callback(Output("page-content", "children"), Input("url", "pathname"))
def route(pathname: str | None) -> object:
    """Render the page for the current path."""
    return pages.render(pathname)


@app.callback(
    Output("theme-store", "data"),
    Input("theme-toggle", "n_clicks"),
    State("theme-store", "data"),
    prevent_initial_call=True,
)
def toggle_theme(_n_clicks: int, theme: str | None) -> str:
    return LIGHT if theme == DARK else DARK


@app.callback(Output("app-shell", "className"), Input("theme-store", "data"))
def apply_theme(theme: str | None) -> str:
    return shell_class(theme)


@app.callback(
    Output("update-ws", "url"),
    Input("url", "href"),
    State("ws-url-store", "data"),
)
def connect_updates(href: str | None, ws_config: dict | None) -> str:
    """Point the update WebSocket at the server that served the page."""
    url = websocket_url(href, (ws_config or {}).get("path", ws_server.UPDATES_ROUTE))
    return url or no_update


@app.callback(
    Output("update-session", "data"),
    Input("update-ws", "message"),
    Input("update-skip-btn", "n_clicks"),
    State("update-session", "data"),
    prevent_initial_call=True,
)
def update_session(message: dict | None, _skip: int, session_data: dict | None) -> object:
    """Apply a pushed notification, or hide the banner on skip."""
    session = UpdateSession.from_dict(session_data)
    if ctx.triggered_id == "update-skip-btn":
        session.skip()
        return session.to_dict()
    notification = read_notification(message)
    if notification is None or not session.apply(notification):
        return no_update
    return session.to_dict()


@app.callback(
    Output("update-banner", "style"),
    Output("update-banner", "className"),
    Output("update-banner-text", "children"),
    Output("update-progress-track", "style"),
    Output("update-progress-bar", "style"),
    Output("update-download-btn", "style"),
    Output("update-restart-btn", "style"),
    Output("update-skip-btn", "style"),
    Input("update-session", "data"),
)
def render_banner(session_data: dict | None) -> tuple:
    view = banner_view(UpdateSession.from_dict(session_data))
    return (
        visibility(view.visible),
        f"update-banner tone-{view.tone}",
        view.text,
        visibility(view.percent is not None),
        {"width": f"{view.percent or 0:.0f}%"},
        visibility(view.show_download),
        visibility(view.show_restart),
        visibility(view.show_skip),
    )


@app.callback(
    Output("update-ws", "send"),
    Input("update-ws", "state"),
    Input("update-download-btn", "n_clicks"),
    Input("update-restart-btn", "n_clicks"),
    prevent_initial_call=True,
)
def send_command(ws_state: dict | None, _download: int, _restart: int) -> object:
    """Send the command for the clicked button, or ask for the version on connect."""
    trigger = ctx.triggered_id
    if trigger == "update-download-btn":
        return UiRequest(UiCommand.START_DOWNLOAD).to_json()
    if trigger == "update-restart-btn":
        return UiRequest(UiCommand.RESTART_APP).to_json()
    # readyState 1 is OPEN
    if ws_state and ws_state.get("readyState") == 1:
        return UiRequest(UiCommand.GET_APP_VERSION).to_json()
    return no_update


@app.callback(Output("startup-reminder", "children"), Input("startup-reminder", "id"))
def startup_reminder(_id: str) -> object:
    """Remind about services due tomorrow when the console opens."""
    try:
        due = aggregators.services_due_tomorrow(get_erp_service().upcoming_services(), date.today())
    except ApiError:
        LOG.warning("Could not load upcoming services for the reminder", exc_info=True)
        return None
    if not due:
        return None
    names = ", ".join(task.customer_name for task in due)
    return html.Div(
        build_alert(f"{len(due)} service(s) due tomorrow: {names}", "info"),
        className="startup-reminder",
    )


pages.register_callbacks(app)


def main() -> None:
    """Entrypoint used by `erp_console` console script."""
    LOG.info("Starting %s on port %d (service=%s)", config.APP_TITLE, config.APP_PORT, config.SERVICE_KIND)
    # heartbeat and websocket polling would flood the access log
    if not config.DEBUG:
        logs.quiet("werkzeug")
    _host.start()
    app.run(debug=config.DEBUG, host="0.0.0.0", port=config.APP_PORT)


if __name__ == "__main__":
    main()
