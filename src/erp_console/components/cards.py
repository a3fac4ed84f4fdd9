"""Stat cards, alerts and empty/loading states shared by every page."""

from dash import html
from dash_iconify import DashIconify


def build_stat_card(title: str, value: str | int, icon: str, tone: str = "blue", hint: str = "") -> html.Div:
    """
    Build a headline number card.

    Args:
        title: Caption above the number.
        value: Already formatted value.
        icon: Iconify icon name, e.g. ``lucide:users``.
        tone: Color modifier class suffix (blue, green, amber, violet, red).
        hint: Optional small text under the value.
    """
    return html.Div(
        className=f"card stat-card tone-{tone}",
        children=[
            html.Div(
                className="stat-card-header",
                children=[
                    html.Span(title, className="stat-card-title"),
                    DashIconify(icon=icon, width=22, className="stat-card-icon"),
                ],
            ),
            html.Div(str(value), className="stat-card-value"),
            html.Small(hint, className="muted") if hint else None,
        ],
    )


def build_alert(message: str, kind: str = "danger") -> html.Div:
    """Return an inline alert; ``kind`` is danger, warning, success or info."""
    icons = {
        "danger": "lucide:circle-alert",
        "warning": "lucide:triangle-alert",
        "success": "lucide:circle-check",
        "info": "lucide:info",
    }
    return html.Div(
        className=f"alert alert-{kind}",
        role="alert",
        children=[
            DashIconify(icon=icons.get(kind, icons["info"]), width=18),
            html.Span(message),
        ],
    )


def build_loading_state(label: str = "Loading...") -> html.Div:
    """Return a loading indicator for initial page load."""
    return html.Div(
        className="card loading-state",
        children=[
            html.Div(className="spinner"),
            html.P(label, className="muted"),
        ],
    )


def build_empty_state(title: str, message: str, icon: str = "lucide:inbox") -> html.Div:
    return html.Div(
        className="card empty-state",
        children=[
            DashIconify(icon=icon, className="empty-icon"),
            html.H3(title),
            html.P(message, className="muted"),
        ],
    )
