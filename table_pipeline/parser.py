"""Raw payload -> (headers, raw rows, column types).

Two source kinds are understood: comma-delimited text and spreadsheet
workbooks (first sheet only). The parser never touches the filesystem;
callers hand it bytes already read.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Tuple

import pandas as pd

from .cleaning_utils import (
    _drop_fully_blank_rows,
    build_headers,
    cell_to_text,
    column_key,
    fit_row,
    split_fields,
    split_lines,
)
from .errors import EmptyInput, UnsupportedFormat
from .type_inference import ColumnType, TypeInferencer

TEXT_ENCODING = "utf-8-sig"


class SourceKind(str, Enum):
    DELIMITED_TEXT = "delimited-text"
    SPREADSHEET_BINARY = "spreadsheet-binary"


EXTENSION_KINDS = {
    ".csv": SourceKind.DELIMITED_TEXT,
    ".xlsx": SourceKind.SPREADSHEET_BINARY,
    ".xls": SourceKind.SPREADSHEET_BINARY,
}


@dataclass(frozen=True)
class ParsedTable:
    """Headers, width-normalised raw rows and the settled type per column."""

    headers: Tuple[str, ...]
    rows: Tuple[Tuple[str, ...], ...]
    column_types: Tuple[ColumnType, ...]

    @property
    def keys(self) -> List[str]:
        return [column_key(h) for h in self.headers]


def source_kind_for(filename: str) -> SourceKind:
    ext = Path(filename).suffix.lower()
    try:
        return EXTENSION_KINDS[ext]
    except KeyError:
        raise UnsupportedFormat(f"Unsupported file type: {ext or filename}") from None


def _read_delimited(payload: bytes, verbose: bool) -> Tuple[List[str], List[List[str]]]:
    text = payload.decode(TEXT_ENCODING, errors="replace")
    lines = split_lines(text)
    if not lines:
        raise EmptyInput("Uploaded file is empty")
    headers = split_fields(lines[0])
    width = len(headers)
    rows: List[List[str]] = []
    padded = truncated = 0
    for line in lines[1:]:
        values = split_fields(line)
        if len(values) < width:
            padded += 1
        elif len(values) > width:
            truncated += 1
        rows.append(fit_row(values, width))
    if verbose:
        print(
            f"[info] delimited text: {len(rows)} data rows, {width} columns "
            f"({padded} padded, {truncated} truncated)"
        )
    return headers, rows


def _read_spreadsheet(payload: bytes, verbose: bool) -> Tuple[List[str], List[List[str]]]:
    try:
        # Only the first sheet is read.
        df_raw = pd.read_excel(
            io.BytesIO(payload), sheet_name=0, header=None, dtype=object
        )
    except ImportError:
        raise
    except Exception as exc:
        raise UnsupportedFormat(
            "Could not read spreadsheet; make sure it is a valid Excel file"
        ) from exc

    df = _drop_fully_blank_rows(df_raw)
    if df.empty:
        raise EmptyInput("Uploaded file is empty")

    grid = [[cell_to_text(v) for v in row] for row in df.itertuples(index=False)]
    headers = build_headers(grid[0])
    rows = [fit_row(r, len(headers)) for r in grid[1:]]
    if verbose:
        dropped = int(df_raw.shape[0] - df.shape[0])
        print(
            f"[info] spreadsheet: {len(rows)} data rows, {len(headers)} columns "
            f"({dropped} blank rows dropped)"
        )
    return headers, rows


def parse(
    payload: bytes, source_kind: SourceKind, *, verbose: bool = False
) -> ParsedTable:
    """Decode ``payload`` and settle a type for every column.

    Raises
    ------
    EmptyInput
        No non-blank line / row is present.
    UnsupportedFormat
        Unknown ``source_kind`` or a spreadsheet that cannot be decoded.
    """
    try:
        kind = SourceKind(source_kind)
    except ValueError:
        raise UnsupportedFormat(f"Unsupported source kind: {source_kind!r}") from None

    if kind == SourceKind.DELIMITED_TEXT:
        headers, rows = _read_delimited(payload, verbose)
    else:
        headers, rows = _read_spreadsheet(payload, verbose)

    column_types = TypeInferencer().infer_types(rows, len(headers), verbose=verbose)
    return ParsedTable(
        headers=tuple(headers),
        rows=tuple(tuple(r) for r in rows),
        column_types=tuple(column_types),
    )


__all__ = ["SourceKind", "ParsedTable", "source_kind_for", "parse", "EXTENSION_KINDS"]
