"""Small text and grid helpers shared by the delimited-text and spreadsheet readers.

  - Line splitting and blank filtering (split_lines, split_fields)
  - Column key normalisation (column_key)
  - Spreadsheet cell stringification (cell_to_text)
  - Blank row filtering and header building for sheets
    (_drop_fully_blank_rows, build_headers)
"""

from __future__ import annotations

import datetime as dt
import re
from typing import List

import numpy as np
import pandas as pd

FIELD_DELIMITER = ","
QUOTE_CHAR = '"'
WHITESPACE_RUN_PATTERN = re.compile(r"\s+")
PLACEHOLDER_HEADER = "Column_{index}"


def split_lines(text: str) -> List[str]:
    """Split on newlines, dropping lines that are blank once trimmed."""
    return [line for line in text.split("\n") if line.strip() != ""]


def split_fields(line: str) -> List[str]:
    """Split one line on commas; trim each field, then drop every double quote.

    Quoting only protects padding: ``" a "`` reads as `` a ``. Quoted fields
    containing commas are not supported: the comma still splits.
    """
    return [
        field.strip().replace(QUOTE_CHAR, "") for field in line.split(FIELD_DELIMITER)
    ]


def column_key(header: str) -> str:
    """Lowercase the header and collapse each whitespace run to ``_``."""
    return WHITESPACE_RUN_PATTERN.sub("_", header.lower())


def fit_row(values: List[str], width: int) -> List[str]:
    """Pad a short row with empty strings or drop trailing extras."""
    if len(values) >= width:
        return values[:width]
    return values + [""] * (width - len(values))


def cell_to_text(cell: object) -> str:
    """String form of a spreadsheet cell as handed to type inference."""
    if cell is None:
        return ""
    if isinstance(cell, (bool, np.bool_)):
        return "true" if cell else "false"
    if isinstance(cell, (dt.datetime, pd.Timestamp)):
        if pd.isna(cell):
            return ""
        if (cell.hour, cell.minute, cell.second, cell.microsecond) == (0, 0, 0, 0):
            return cell.date().isoformat()
        return cell.isoformat(sep=" ")
    if isinstance(cell, dt.date):
        return cell.isoformat()
    if isinstance(cell, (float, np.floating)):
        if np.isnan(cell):
            return ""
        if float(cell).is_integer():
            return str(int(cell))
        return repr(float(cell))
    if isinstance(cell, (int, np.integer)):
        return str(int(cell))
    try:
        if pd.isna(cell):
            return ""
    except (TypeError, ValueError):
        pass
    return str(cell).strip()


def _drop_fully_blank_rows(df: pd.DataFrame) -> pd.DataFrame:
    if df.empty:
        return df
    is_na = df.isna()
    is_token_blank = df.astype(str).apply(lambda s: s.str.strip() == "", axis=0)
    keep_mask = ~(is_na | is_token_blank).all(axis=1)
    return df.loc[keep_mask].reset_index(drop=True)


def build_headers(row: List[str]) -> List[str]:
    """Header labels for a sheet's first row.

    Blank cells get a ``Column_<n>`` placeholder (n is the 1-based column
    position), suffixed until it collides with no other header.
    """
    taken = {h for h in row if h}
    headers: List[str] = []
    for i, val in enumerate(row):
        if val:
            headers.append(val)
            continue
        name = PLACEHOLDER_HEADER.format(index=i + 1)
        suffix = 0
        candidate = name
        while candidate in taken:
            suffix += 1
            candidate = f"{name}_{suffix}"
        taken.add(candidate)
        headers.append(candidate)
    return headers


__all__ = [
    "split_lines",
    "split_fields",
    "column_key",
    "fit_row",
    "cell_to_text",
    "_drop_fully_blank_rows",
    "build_headers",
]
