"""
AG Grid tables for record lists.

Tables are read-only views over rows that were already filtered and, for
client-paged lists, already sliced by PageWindow. Grids that back a CSV
export keep the same column order as the export frames.
"""

from typing import Any, Sequence

import dash_ag_grid as dag
from dash import html


def column(field: str, header: str | None = None, money: bool = False, **extra: Any) -> dict:
    """
    Build one AG Grid column definition.

    Args:
        field: Row key shown in the column.
        header: Header text, or None to derive it from ``field``.
        money: Right-align the column; values are pre-formatted rupees.
        **extra: Additional AG Grid column options.
    """
    definition = {
        "field": field,
        "headerName": header or _format_column_name(field),
        "sortable": True,
        "resizable": True,
    }
    if money:
        definition["type"] = "rightAligned"
    definition.update(extra)
    return definition


def build_grid(
    grid_id: str,
    columns: Sequence[dict],
    rows: Sequence[dict],
    page_size: int | None = None,
    file_name: str | None = None,
) -> html.Div:
    """
    Build an AG Grid over ``rows``.

    Args:
        grid_id: Component id.
        columns: Column definitions from column().
        rows: Row dictionaries.
        page_size: Enables the grid's own pagination when set.
        file_name: CSV file name for the grid's export.
    """
    grid_options: dict[str, Any] = {
        "domLayout": "autoHeight",
        "enableCellTextSelection": True,
        "ensureDomOrder": True,
    }
    if page_size:
        grid_options["pagination"] = True
        grid_options["paginationPageSize"] = page_size
    return html.Div(
        className="grid-wrapper",
        children=[
            dag.AgGrid(
                id=grid_id,
                columnDefs=list(columns),
                rowData=list(rows),
                defaultColDef={"flex": 1, "minWidth": 100, "filter": True},
                dashGridOptions=grid_options,
                csvExportParams={"fileName": file_name or f"{grid_id}.csv"},
                className="ag-theme-alpine erp-grid",
                style={"width": "100%"},
            )
        ],
    )


def _format_column_name(field: str) -> str:
    """Convert snake_case to Title Case for headers."""
    return field.replace("_", " ").title()
