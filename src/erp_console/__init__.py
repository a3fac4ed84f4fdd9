"""
ERP Console: a Dash application for a small enterprise's back office.

This package provides a web console for point-of-sale billing, customer
ledgers, inventory restocks, warranties and service reporting on top of a
remote REST API, plus an update host that pushes update progress to the
browser over a WebSocket.

Subpackages:
- lib: Logging, HTTP client, caches and debounce helpers
- models: Record models and view-state models
- services: Data access layer (demo and REST implementations)
- updates: Update state machine, channel messages and update host
- components: Reusable Dash UI components
- pages: One module per screen, plus path routing
- data: Static demo fixtures

Main entry points:
- app.main(): Start the server
- app.app: The Dash application instance (for WSGI deployment)
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
