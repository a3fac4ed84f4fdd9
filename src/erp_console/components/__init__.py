"""
Reusable Dash UI components for the ERP console.

This package provides modular, composable components:
- cards: Stat cards, alerts, loading and empty states
- charts: Plotly figure dictionaries and the graph wrapper
- controls: Debounced search inputs and pagers
- heatmap: Monthly service calendar
- tables: AG Grid tables
- update_banner: Update banner and its view mapping

All components are pure functions that return Dash html/dcc elements,
making them easy to test and compose.
"""

from erp_console.components.cards import (
    build_alert,
    build_empty_state,
    build_loading_state,
    build_stat_card,
)
from erp_console.components.controls import build_pager, build_search_input, pager_label
from erp_console.components.tables import build_grid, column
from erp_console.components.update_banner import banner_view, build_update_banner

__all__ = [
    "banner_view",
    "build_alert",
    "build_empty_state",
    "build_grid",
    "build_loading_state",
    "build_pager",
    "build_search_input",
    "build_stat_card",
    "build_update_banner",
    "column",
    "pager_label",
]
