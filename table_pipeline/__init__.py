"""Tabular ingestion package: parse CSV/Excel payloads, infer column types, query and export.

Public entry points:
    parse(payload: bytes, source_kind) -> ParsedTable
    build_table(headers, rows, column_types) -> Table
    query(table, state: QueryState) -> View
    export_csv(table, state: QueryState) -> str
    TableSession                       -> holds the current Table + QueryState
    run_table_pipeline(file_path: str, *, mode: str = "full", config: Optional[dict] = None)

Modes:
    full         -> dataset + column schema + current page of rows
    schema_only  -> only dataset + column type schema
"""

from .errors import ParseError, EmptyInput, UnsupportedFormat  # noqa: F401
from .type_inference import ColumnType, infer  # noqa: F401
from .parser import SourceKind, ParsedTable, parse, source_kind_for  # noqa: F401
from .table import Cell, Column, Record, Table, build_table  # noqa: F401
from .query import QueryState, SortDirection, SortSpec, View, query  # noqa: F401
from .exporter import export_csv  # noqa: F401
from .pipeline import TableSession, run_table_pipeline, EXPORT_FILENAME  # noqa: F401

__all__ = [
    "ParseError",
    "EmptyInput",
    "UnsupportedFormat",
    "ColumnType",
    "infer",
    "SourceKind",
    "ParsedTable",
    "parse",
    "source_kind_for",
    "Cell",
    "Column",
    "Record",
    "Table",
    "build_table",
    "QueryState",
    "SortDirection",
    "SortSpec",
    "View",
    "query",
    "export_csv",
    "TableSession",
    "run_table_pipeline",
    "EXPORT_FILENAME",
]
