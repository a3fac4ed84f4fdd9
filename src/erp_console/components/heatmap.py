"""
Calendar heatmap of service tasks for one month.

Each day cell is shaded by its density tier (0, 1, 2-3, 4+ tasks) and
carries a tooltip with the completed/pending split.
"""

import calendar

from dash import html

from erp_console.aggregators import density_tier
from erp_console.models.common import HeatmapDay

_WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def build_heatmap(days: dict[int, HeatmapDay], year: int, month: int) -> html.Div:
    """
    Build the month grid.

    Args:
        days: Per-day counts from service_heatmap().
        year: Displayed year.
        month: Displayed month, 1-12.
    """
    rows = []
    for week in calendar.monthcalendar(year, month):
        cells = []
        for day in week:
            if day == 0:
                cells.append(html.Div(className="heat-cell heat-blank"))
                continue
            counts = days.get(day, HeatmapDay(day=day))
            cells.append(
                html.Div(
                    str(day),
                    className=f"heat-cell heat-{density_tier(counts.total)}",
                    title=(
                        f"{counts.total} task(s): {counts.completed} completed, "
                        f"{counts.pending} pending"
                    ),
                )
            )
        rows.append(html.Div(cells, className="heat-row"))

    return html.Div(
        className="card heatmap-card",
        children=[
            html.H4(f"{calendar.month_name[month]} {year}"),
            html.Div([html.Div(d, className="heat-cell heat-label") for d in _WEEKDAYS], className="heat-row"),
            *rows,
            html.Div(
                className="heat-legend muted",
                children=[
                    html.Span("Less"),
                    *[html.Span(className=f"heat-cell heat-{tier}") for tier in range(4)],
                    html.Span("More"),
                ],
            ),
        ],
    )
