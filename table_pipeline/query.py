"""Filter -> sort -> paginate over a Table.

``query`` is a pure function of (Table, QueryState). QueryState is an
immutable value; its transition methods return new states, the way the
table view's search box, header clicks, column toggles and pager drive it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from .formatting import format_display, render_text
from .table import Cell, Column, Record, Table

DEFAULT_PAGE_SIZE = 10


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortSpec:
    key: str
    direction: SortDirection = SortDirection.ASC

    def __post_init__(self) -> None:
        object.__setattr__(self, "direction", SortDirection(self.direction))


@dataclass(frozen=True)
class QueryState:
    """Search text, sort, page and visible columns for one table view.

    ``visible_columns`` of None means every column is visible.
    """

    global_filter_text: str = ""
    sort: Optional[SortSpec] = None
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    visible_columns: Optional[FrozenSet[str]] = None

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if self.page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {self.page_size}")
        if self.visible_columns is not None:
            object.__setattr__(self, "visible_columns", frozenset(self.visible_columns))

    @classmethod
    def initial(cls, table: Table, page_size: int = DEFAULT_PAGE_SIZE) -> "QueryState":
        return cls(page_size=page_size, visible_columns=frozenset(table.keys))

    def is_visible(self, key: str) -> bool:
        return self.visible_columns is None or key in self.visible_columns

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def with_search(self, text: str) -> "QueryState":
        return replace(self, global_filter_text=text, page=1)

    def clear_search(self) -> "QueryState":
        return self.with_search("")

    def toggle_sort(self, key: str) -> "QueryState":
        """Ascending on a new key; flip to descending on a repeat click."""
        if self.sort is not None and self.sort.key == key and self.sort.direction == SortDirection.ASC:
            return replace(self, sort=SortSpec(key, SortDirection.DESC))
        return replace(self, sort=SortSpec(key, SortDirection.ASC))

    def clear_sort(self) -> "QueryState":
        return replace(self, sort=None)

    def toggle_column(self, key: str, all_keys: Iterable[str]) -> "QueryState":
        visible = set(all_keys) if self.visible_columns is None else set(self.visible_columns)
        visible.symmetric_difference_update({key})
        return replace(self, visible_columns=frozenset(visible))

    def with_page_size(self, page_size: int) -> "QueryState":
        return replace(self, page_size=page_size, page=1)

    def go_to(self, page: int, total_pages: int) -> "QueryState":
        return replace(self, page=min(max(page, 1), max(total_pages, 1)))

    def first(self) -> "QueryState":
        return replace(self, page=1)

    def previous(self) -> "QueryState":
        return replace(self, page=max(self.page - 1, 1))

    def next(self, total_pages: int) -> "QueryState":
        return self.go_to(self.page + 1, total_pages)

    def last(self, total_pages: int) -> "QueryState":
        return self.go_to(total_pages, total_pages)


@dataclass(frozen=True)
class View:
    rows: Tuple[Record, ...]
    total_matched: int
    total_pages: int
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    columns: Tuple[Column, ...] = field(default=())

    @property
    def first_index(self) -> int:
        """1-based position of the first row on this page (0 when empty)."""
        return min((self.page - 1) * self.page_size + 1, self.total_matched) if self.rows else 0

    @property
    def last_index(self) -> int:
        return min(self.page * self.page_size, self.total_matched) if self.rows else 0

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    def to_records(self) -> List[Dict[str, Any]]:
        return [
            {"id": r.id, **{c.key: r[c.key] for c in self.columns}} for r in self.rows
        ]

    def to_frame(self, display: bool = True) -> pd.DataFrame:
        """Page rows as a DataFrame, one column per visible column label."""
        render = format_display if display else render_text
        data = [[render(r.cell(c.key)) for c in self.columns] for r in self.rows]
        return pd.DataFrame(
            data,
            columns=[c.label for c in self.columns],
            index=pd.Index([r.id for r in self.rows], name="id"),
        )


# ---------------------------------------------------------------------------
# Pipeline stages
# ---------------------------------------------------------------------------


def filter_records(table: Table, text: str) -> List[Record]:
    """Records where any column's plain text contains ``text``, ignoring case."""
    if not text:
        return list(table.records)
    needle = text.lower()
    keys = table.keys
    return [
        r
        for r in table.records
        if any(needle in render_text(r.cell(k)).lower() for k in keys)
    ]


def _sort_key(cell: Cell) -> Tuple[int, Any]:
    # Empty cells order before every value of the column's type.
    if cell.value is None:
        return (0, 0)
    return (1, cell.value)


def sort_records(records: Sequence[Record], sort: Optional[SortSpec]) -> List[Record]:
    """Stable sort; descending keeps equal records in their ascending order."""
    if sort is None:
        return list(records)
    if not records or sort.key not in records[0].cells:
        return list(records)
    return sorted(
        records,
        key=lambda r: _sort_key(r.cell(sort.key)),
        reverse=sort.direction == SortDirection.DESC,
    )


def filter_and_sort(table: Table, state: QueryState) -> List[Record]:
    return sort_records(filter_records(table, state.global_filter_text), state.sort)


def visible_columns(table: Table, state: QueryState) -> Tuple[Column, ...]:
    return tuple(c for c in table.columns if state.is_visible(c.key))


def paginate(records: Sequence[Record], page: int, page_size: int) -> Tuple[Record, ...]:
    start = (page - 1) * page_size
    return tuple(records[start:start + page_size])


def query(table: Table, state: QueryState) -> View:
    """Filter, sort and slice ``table`` for ``state``. Never raises.

    Pages past the end yield an empty ``rows``; clamping the page number
    is left to the caller (see ``QueryState.go_to``).
    """
    matched = filter_and_sort(table, state)
    total = len(matched)
    return View(
        rows=paginate(matched, state.page, state.page_size),
        total_matched=total,
        total_pages=math.ceil(total / state.page_size),
        page=state.page,
        page_size=state.page_size,
        columns=visible_columns(table, state),
    )


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "SortDirection",
    "SortSpec",
    "QueryState",
    "View",
    "filter_records",
    "sort_records",
    "filter_and_sort",
    "visible_columns",
    "paginate",
    "query",
]
