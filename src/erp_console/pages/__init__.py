"""
Console pages and path routing.

Each page module provides ``layout()`` and ``register_callbacks(app)``.
Pages are rendered into the root layout's page container by path; every
page's callbacks are registered once at startup.
"""

from types import ModuleType

from dash import html

from erp_console.components.cards import build_empty_state
from erp_console.pages import (
    accounts,
    billing,
    bills,
    catalog,
    customers,
    dashboard,
    employees,
    inventory,
    sales,
    service_reports,
    service_tasks,
    settings,
    warranties,
)

PAGES: dict[str, ModuleType] = {
    "/": dashboard,
    "/customers": customers,
    "/accounts": accounts,
    "/billing": billing,
    "/bills": bills,
    "/sales": sales,
    "/tasks": service_tasks,
    "/services": service_reports,
    "/employees": employees,
    "/inventory": inventory,
    "/catalog": catalog,
    "/warranties": warranties,
    "/settings": settings,
}


def render(pathname: str | None) -> html.Div:
    """Return the layout of the page at ``pathname``."""
    path = (pathname or "/").rstrip("/") or "/"
    page = PAGES.get(path)
    if page is None:
        return build_empty_state("Page not found", f"Nothing lives at {path}.", "lucide:map-pin-off")
    return page.layout()


def register_callbacks(app) -> None:
    for page in PAGES.values():
        page.register_callbacks(app)


__all__ = ["PAGES", "register_callbacks", "render"]
