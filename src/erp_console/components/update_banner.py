"""
Update banner shown above every page.

The banner structure is static so its buttons always exist for callbacks;
banner_view() decides, from the browser's UpdateSession, which text,
progress and buttons are visible.
"""

from dataclasses import dataclass

from dash import html
from dash_iconify import DashIconify

from erp_console.updates.state import UpdateSession, UpdateState

_HIDDEN = {"display": "none"}
_SHOWN: dict = {}


@dataclass(frozen=True, slots=True)
class BannerView:
    """What the banner displays for one session state."""

    visible: bool
    tone: str = "info"
    text: str = ""
    percent: float | None = None
    show_download: bool = False
    show_skip: bool = False
    show_restart: bool = False


def visibility(flag: bool) -> dict:
    """Return the inline style that shows or hides a banner element."""
    return _SHOWN if flag else _HIDDEN


def banner_view(session: UpdateSession) -> BannerView:
    """Map an UpdateSession to the banner contents."""
    if not session.banner_visible:
        return BannerView(visible=False)
    state = session.state
    if state is UpdateState.AVAILABLE:
        return BannerView(
            visible=True,
            text=f"Version {session.version} is available.",
            show_download=True,
            show_skip=True,
        )
    if state is UpdateState.DOWNLOADING:
        return BannerView(
            visible=True,
            text=f"Downloading update... {session.percent:.0f}%",
            percent=session.percent,
            show_skip=True,
        )
    if state is UpdateState.DOWNLOADED:
        return BannerView(
            visible=True,
            tone="success",
            text="Update downloaded. Restart to install.",
            show_restart=True,
            show_skip=True,
        )
    if state is UpdateState.INSTALLING:
        return BannerView(visible=True, tone="success", text="Installing update. The console will restart.")
    return BannerView(
        visible=True,
        tone="warning",
        text=f"{session.message}. Continuing without update.",
    )


def build_update_banner() -> html.Div:
    """Return the static banner structure, hidden until a notification arrives."""
    return html.Div(
        id="update-banner",
        className="update-banner tone-info",
        style=_HIDDEN,
        children=[
            DashIconify(icon="lucide:download-cloud", width=20),
            html.Span(id="update-banner-text", className="update-banner-text"),
            html.Div(
                id="update-progress-track",
                className="update-progress-track",
                style=_HIDDEN,
                children=html.Div(id="update-progress-bar", className="update-progress-bar"),
            ),
            html.Button("Download Now", id="update-download-btn", className="btn btn-primary", n_clicks=0),
            html.Button("Restart & Install", id="update-restart-btn", className="btn btn-success", n_clicks=0),
            html.Button("Skip", id="update-skip-btn", className="btn btn-link", n_clicks=0),
        ],
    )
