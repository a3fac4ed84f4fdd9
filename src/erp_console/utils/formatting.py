"""
Helpers for parsing API values and formatting them for display.

Provides helpers for:
- Date parsing (ISO dates, ISO timestamps with or without ``Z``, d/m/Y)
- Lenient numeric coercion of JSON values
- Indian-grouped rupee formatting, matching the en-IN locale
- Case-insensitive search matching
"""

import math
from datetime import date, datetime
from typing import Any, Iterable


def parse_date(value: Any) -> datetime | None:
    """
    Parse an API date or timestamp into a naive datetime.

    Args:
        value: ``"2024-06-01"``, ``"2024-06-01T10:30:00Z"``,
            ``"2024-06-01T10:30:00+05:30"``, ``"01/06/2024"``, a date or a
            datetime.

    Returns:
        datetime if parsing succeeds, None otherwise. Timezone information
        is dropped after conversion so values compare as local wall time.
    """
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None

    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).replace(tzinfo=None)
    except ValueError:
        pass

    try:
        return datetime.strptime(text, "%d/%m/%Y")
    except ValueError:
        return None


def short_date(value: date) -> str:
    """Return ``"Jun 1"`` style labels used on chart axes."""
    return f"{value:%b} {value.day}"


def to_float(value: Any, default: float = 0.0) -> float:
    """Coerce a JSON number or numeric string to float; NaN and infinities give ``default``."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if math.isfinite(number) else default


def to_int(value: Any, default: int = 0) -> int:
    """Coerce a JSON number or numeric string to int."""
    return int(to_float(value, default))


def format_inr(value: float, decimals: int = 2) -> str:
    """
    Format an amount in rupees with Indian digit grouping.

    Args:
        value: Amount to format.
        decimals: Number of fractional digits.

    Returns:
        String like ``"₹1,10,000.00"`` or ``"-₹250"``.
    """
    sign = "-" if value < 0 else ""
    rounded = f"{abs(value):.{decimals}f}"
    whole, _, fraction = rounded.partition(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    return f"{sign}₹{whole}" + (f".{fraction}" if fraction else "")


def matches_query(terms: Iterable[str | None], query: str | None) -> bool:
    """
    Check whether any of ``terms`` contains the query.

    Matching is a case-insensitive substring test. An empty query matches
    everything.
    """
    normalized = (query or "").strip().lower()
    if not normalized:
        return True
    return any(normalized in term.lower() for term in terms if term)
