"""Per-cell type detection and coercion.

Every raw cell is classified into one of four column types:

    number    -> plain decimal, optionally signed ("42", "-3.5")
    date      -> "YYYY-MM-DD" or "M/D/YYYY"
    currency  -> leading "$" or a two-decimal amount ("$10.50", "20.00")
    string    -> anything else, kept verbatim

A column's settled type is whatever the most recently scanned row reported
for it (last write wins, see ``TypeInferencer.infer_types``).
"""

from __future__ import annotations

import datetime as dt
import math
import re
from enum import Enum
from typing import List, Optional, Sequence, Union


class ColumnType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    CURRENCY = "currency"


CellValue = Union[str, float, dt.date, None]

NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)$")
ISO_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
US_DATE_PATTERN = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
MONEY_PATTERN = re.compile(r"^\d+\.\d{2}$")
CURRENCY_SYMBOL = "$"
_THOUSANDS_SEPARATOR = ","


def infer(raw: str) -> ColumnType:
    """Classify a single raw cell. Total: unknown input is a string."""
    s = raw.strip()
    # Unsigned two-decimal amounts are money even though they are also plain
    # decimals; signed ones ("-20.00") fall through to number.
    if MONEY_PATTERN.match(s):
        return ColumnType.CURRENCY
    if NUMBER_PATTERN.match(s):
        return ColumnType.NUMBER
    if ISO_DATE_PATTERN.match(s) or US_DATE_PATTERN.match(s):
        return ColumnType.DATE
    if s.startswith(CURRENCY_SYMBOL):
        return ColumnType.CURRENCY
    return ColumnType.STRING


def parse_decimal(raw: str) -> Optional[float]:
    """Return the numeric amount of ``raw`` or None when it is not one.

    A leading currency symbol and thousands separators are ignored.
    """
    s = raw.strip()
    if s.startswith(CURRENCY_SYMBOL):
        s = s[len(CURRENCY_SYMBOL):].strip()
    s = s.replace(_THOUSANDS_SEPARATOR, "")
    if not NUMBER_PATTERN.match(s):
        return None
    value = float(s)
    # Digit runs too long for a float overflow to inf.
    return value if math.isfinite(value) else None


def parse_date(raw: str) -> Optional[dt.date]:
    s = raw.strip()
    m = ISO_DATE_PATTERN.match(s)
    if m:
        year, month, day = int(m.group(1)), int(m.group(2)), int(m.group(3))
    else:
        m = US_DATE_PATTERN.match(s)
        if not m:
            return None
        month, day, year = int(m.group(1)), int(m.group(2)), int(m.group(3))
    try:
        return dt.date(year, month, day)
    except ValueError:
        # Matches the shape but not the calendar, e.g. 2024-02-30.
        return None


def coerce(raw: str, column_type: ColumnType) -> CellValue:
    """Convert ``raw`` to the representation used by ``column_type``.

    Never raises. Cells that do not fit the column's type fall back to the
    empty value (None); string columns keep the raw text.
    """
    if column_type == ColumnType.STRING:
        return raw
    if column_type in (ColumnType.NUMBER, ColumnType.CURRENCY):
        return parse_decimal(raw)
    if column_type == ColumnType.DATE:
        return parse_date(raw)
    raise ValueError(f"Unknown column type: {column_type!r}")


class TypeInferencer:
    """Settles one ColumnType per column from a scan of raw rows."""

    def infer_value(self, raw: str) -> ColumnType:
        return infer(raw)

    def infer_types(
        self, rows: Sequence[Sequence[str]], width: int, verbose: bool = False
    ) -> List[ColumnType]:
        """Scan ``rows`` top to bottom; each row overwrites the running type.

        No majority vote is taken: a single trailing row can flip an
        otherwise numeric column to ``string``. Columns of a header-only
        table stay ``string``.
        """
        types = [ColumnType.STRING] * width
        for row in rows:
            for i in range(width):
                raw = row[i] if i < len(row) else ""
                types[i] = infer(raw)
        if verbose:
            summary = ", ".join(t.value for t in types)
            print(f"[info] type inference: settled column types [{summary}]")
        return types


__all__ = [
    "ColumnType",
    "CellValue",
    "infer",
    "parse_decimal",
    "parse_date",
    "coerce",
    "TypeInferencer",
]
