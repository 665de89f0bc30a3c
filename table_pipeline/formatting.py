"""Text renderings of cells.

``render_text`` is the plain form used for searching and CSV export;
``format_display`` is the human form shown by the CLI page view.
"""

from __future__ import annotations

import datetime as dt
import math

from .table import Cell
from .type_inference import ColumnType


def format_number(value: float) -> str:
    """Shortest plain text for a number: 20.0 -> "20", 10.5 -> "10.5"."""
    if not math.isfinite(value):
        return ""
    if value == int(value) and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def render_text(cell: Cell) -> str:
    if cell.type == ColumnType.STRING:
        return cell.value if cell.value is not None else ""
    if cell.type == ColumnType.DATE:
        # Dates keep their source spelling so "1/5/2024" stays searchable.
        return cell.text
    if cell.value is None:
        return ""
    return format_number(float(cell.value))


def format_currency(value: float) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def format_date(value: dt.date) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def format_display(cell: Cell) -> str:
    if cell.value is None:
        return ""
    if cell.type == ColumnType.CURRENCY:
        return format_currency(float(cell.value))
    if cell.type == ColumnType.DATE:
        return format_date(cell.value)
    return render_text(cell)


__all__ = [
    "format_number",
    "render_text",
    "format_currency",
    "format_date",
    "format_display",
]
