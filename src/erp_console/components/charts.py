"""
Chart figures rendered with dcc.Graph.

Figures are plain dictionaries in the Plotly figure format, so the chart
data is easy to assert on in tests.
"""

from typing import Sequence

from dash import dcc

from erp_console.models.common import RevenuePoint, TaskTypeShare

_LAYOUT = {
    "margin": {"l": 40, "r": 10, "t": 30, "b": 40},
    "paper_bgcolor": "rgba(0,0,0,0)",
    "plot_bgcolor": "rgba(0,0,0,0)",
    "legend": {"orientation": "h"},
}


def revenue_figure(points: Sequence[RevenuePoint]) -> dict:
    """Monthly revenue and profit as two area traces."""
    months = [p.name for p in points]
    return {
        "data": [
            {"type": "scatter", "x": months, "y": [p.revenue for p in points], "name": "Revenue", "fill": "tozeroy"},
            {"type": "scatter", "x": months, "y": [p.profit for p in points], "name": "Profit", "fill": "tozeroy"},
        ],
        "layout": {**_LAYOUT, "title": {"text": "Revenue & Profit"}},
    }


def restock_figure(points: Sequence[dict]) -> dict:
    """Restocked quantity per date from restock_by_date()."""
    return {
        "data": [
            {
                "type": "bar",
                "x": [p["date"] for p in points],
                "y": [p["Quantity"] for p in points],
                "name": "Quantity",
            }
        ],
        "layout": {**_LAYOUT, "title": {"text": "Restocked Units"}},
    }


def category_value_figure(categories: Sequence[dict]) -> dict:
    """Stock value of the top categories from inventory_overview()."""
    return {
        "data": [
            {
                "type": "bar",
                "x": [c["Value"] for c in categories],
                "y": [c["name"] for c in categories],
                "orientation": "h",
                "name": "Value",
            }
        ],
        "layout": {**_LAYOUT, "title": {"text": "Stock Value by Category"}},
    }


def task_type_figure(shares: Sequence[TaskTypeShare]) -> dict:
    return {
        "data": [
            {
                "type": "pie",
                "labels": [s.task_type for s in shares],
                "values": [s.count for s in shares],
                "hole": 0.5,
            }
        ],
        "layout": {**_LAYOUT, "title": {"text": "Task Types"}},
    }


def build_graph(graph_id: str, figure: dict) -> dcc.Graph:
    return dcc.Graph(id=graph_id, figure=figure, config={"displayModeBar": False}, className="chart")
