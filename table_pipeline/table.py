"""Canonical in-memory table: column schema plus typed, immutable records."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from .cleaning_utils import column_key
from .parser import ParsedTable
from .type_inference import CellValue, ColumnType, coerce


@dataclass(frozen=True)
class Column:
    key: str
    label: str
    type: ColumnType = ColumnType.STRING
    sortable: bool = True
    filterable: bool = True


@dataclass(frozen=True)
class Cell:
    """A value tagged with the type of the column it belongs to.

    ``text`` keeps the raw source text; ``value`` is the coerced form
    (None when the text does not fit a non-string column).
    """

    type: ColumnType
    value: CellValue
    text: str = ""

    @property
    def is_empty(self) -> bool:
        return self.value is None or self.value == ""


@dataclass(frozen=True)
class Record:
    id: int
    cells: Mapping[str, Cell] = field(default_factory=dict)

    def __getitem__(self, key: str) -> CellValue:
        return self.cells[key].value

    def cell(self, key: str) -> Cell:
        return self.cells[key]

    def get(self, key: str, default: Any = None) -> Any:
        c = self.cells.get(key)
        return default if c is None else c.value

    def as_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"id": self.id}
        out.update({k: c.value for k, c in self.cells.items()})
        return out


@dataclass(frozen=True)
class Table:
    columns: Tuple[Column, ...] = ()
    records: Tuple[Record, ...] = ()

    @property
    def keys(self) -> List[str]:
        return [c.key for c in self.columns]

    def column(self, key: str) -> Optional[Column]:
        for c in self.columns:
            if c.key == key:
                return c
        return None

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)


def build_table(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    column_types: Sequence[ColumnType],
) -> Table:
    """Assemble a Table from parsed headers, raw rows and settled types.

    Each record's id is its 1-based row position. Cells are coerced with
    the column's settled type, not the type their own row reported.

    Two headers normalising to the same key share one column: the later
    header's label, type and data win, at the earlier header's position.
    """
    columns: Dict[str, Column] = {}
    positions: List[Tuple[int, str]] = []
    for i, (header, ctype) in enumerate(zip(headers, column_types)):
        key = column_key(header)
        columns[key] = Column(key=key, label=header, type=ColumnType(ctype))
        positions.append((i, key))

    records: List[Record] = []
    for row_index, row in enumerate(rows, start=1):
        cells: Dict[str, Cell] = {}
        for i, key in positions:
            raw = row[i] if i < len(row) else ""
            ctype = columns[key].type
            cells[key] = Cell(type=ctype, value=coerce(raw, ctype), text=raw)
        records.append(Record(id=row_index, cells=MappingProxyType(cells)))

    return Table(columns=tuple(columns.values()), records=tuple(records))


def table_from_parsed(parsed: ParsedTable) -> Table:
    return build_table(parsed.headers, parsed.rows, parsed.column_types)


__all__ = ["Column", "Cell", "Record", "Table", "build_table", "table_from_parsed"]
