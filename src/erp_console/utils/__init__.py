"""Utility functions shared across the ERP console package."""

from erp_console.utils.formatting import (
    format_inr,
    matches_query,
    parse_date,
    short_date,
    to_float,
    to_int,
)

__all__ = [
    "format_inr",
    "matches_query",
    "parse_date",
    "short_date",
    "to_float",
    "to_int",
]
