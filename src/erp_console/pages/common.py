"""
Helpers shared by the page callbacks.

API failures are caught at the callback boundary, logged with the stack
trace, and returned as an inline alert so one failing request never breaks
the rest of the page.
"""

from dash import html

from erp_console.components.cards import build_alert
from erp_console.lib import logs
from erp_console.lib.clients import ApiError
from erp_console.pagination import PageWindow
from erp_console.services import ErpService, get_erp_service

LOG = logs.logger(__file__)


def service() -> ErpService:
    """Return the configured service for the current request."""
    return get_erp_service()


def api_failure(exc: ApiError, action: str) -> html.Div:
    """Log an API failure and return the alert shown in its place."""
    LOG.error("%s failed: %s", action, exc, exc_info=True)
    return build_alert(f"{action} failed: {exc.user_message}")


def move_window(window: PageWindow, trigger: str | None, prefix: str, count: int, reset_on: set[str]) -> None:
    """
    Apply the pagination policy for one table.

    Args:
        window: Page window to update in place.
        trigger: Id of the component that fired the callback.
        prefix: Pager id prefix; ``{prefix}-prev`` and ``{prefix}-next``.
        count: Rows after filtering.
        reset_on: Trigger ids that change the filter and reset to page 1.
    """
    if trigger in reset_on:
        window.reset()
    elif trigger == f"{prefix}-prev":
        window.previous(count)
    elif trigger == f"{prefix}-next":
        window.next(count)
    else:
        window.on_refresh(count)
