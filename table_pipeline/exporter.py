"""Serialise the filtered/sorted view of a Table back to comma-delimited text."""

from __future__ import annotations

from typing import List

from .formatting import render_text
from .query import QueryState, filter_and_sort, visible_columns
from .table import Cell, Table
from .type_inference import ColumnType

LINE_TERMINATOR = "\n"
_NEEDS_QUOTING = (",", '"')


def quote_field(text: str) -> str:
    """Wrap in double quotes (doubling inner ones) when a comma or quote is
    present, or when surrounding whitespace would be trimmed on re-read."""
    if any(ch in text for ch in _NEEDS_QUOTING) or text != text.strip():
        return '"' + text.replace('"', '""') + '"'
    return text


def _export_text(cell: Cell) -> str:
    if cell.type == ColumnType.CURRENCY and cell.value is None:
        return "0"
    return render_text(cell)


def export_csv(table: Table, state: QueryState) -> str:
    """Every matching row (no pagination) restricted to the visible columns.

    Columns keep the Table's declared order. The header row is the plain
    comma-joined labels; rows are not newline-terminated at the end.
    """
    columns = visible_columns(table, state)
    lines: List[str] = [",".join(c.label for c in columns)]
    for record in filter_and_sort(table, state):
        lines.append(
            ",".join(quote_field(_export_text(record.cell(c.key))) for c in columns)
        )
    return LINE_TERMINATOR.join(lines)


__all__ = ["quote_field", "export_csv", "LINE_TERMINATOR"]
