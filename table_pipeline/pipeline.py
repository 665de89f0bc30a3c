from dataclasses import replace
from pathlib import Path
from typing import Dict, Any, Optional, Union

from .exporter import export_csv
from .parser import SourceKind, parse, source_kind_for
from .query import DEFAULT_PAGE_SIZE, QueryState, SortDirection, SortSpec, View, query
from .table import Table, table_from_parsed

EXPORT_FILENAME = "table_data.csv"

DEFAULT_CONFIG: Dict[str, Any] = {
    "page_size": DEFAULT_PAGE_SIZE,
    "page": 1,
    "search": "",
    "sort": None,
    "descending": False,
    "columns": None,
    "verbose": False,
}


# ---------------------------------------------------------------------------
# Session: the single current Table and its query state
# ---------------------------------------------------------------------------


class TableSession:
    """Holds the one current Table and the QueryState driving its view.

    A load either replaces both together or, when it raises, leaves them
    exactly as they were.
    """

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE, verbose: bool = False) -> None:
        self.page_size = page_size
        self.verbose = verbose
        self.table: Table = Table()
        self.state: QueryState = QueryState(page_size=page_size)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_bytes(self, payload: bytes, source_kind: SourceKind) -> Table:
        parsed = parse(payload, source_kind, verbose=self.verbose)
        table = table_from_parsed(parsed)
        self.table, self.state = table, QueryState.initial(table, self.page_size)
        if self.verbose:
            print(f"[info] loaded {len(table)} records, {len(table.columns)} columns")
        return table

    def load_file(self, file_path: Union[str, Path]) -> Table:
        """Route by extension (.csv / .xlsx / .xls), then load the bytes."""
        path = Path(file_path)
        kind = source_kind_for(path.name)
        return self.load_bytes(path.read_bytes(), kind)

    @property
    def is_loaded(self) -> bool:
        return bool(self.table.columns)

    # ------------------------------------------------------------------
    # Querying
    # ------------------------------------------------------------------

    def query(self) -> View:
        return query(self.table, self.state)

    def search(self, text: str) -> View:
        self.state = self.state.with_search(text)
        return self.query()

    def clear_search(self) -> View:
        self.state = self.state.clear_search()
        return self.query()

    def sort_by(self, key: str) -> View:
        self.state = self.state.toggle_sort(key)
        return self.query()

    def toggle_column(self, key: str) -> View:
        self.state = self.state.toggle_column(key, self.table.keys)
        return self.query()

    def go_to_page(self, page: int) -> View:
        self.state = self.state.go_to(page, self.query().total_pages)
        return self.query()

    def next_page(self) -> View:
        return self.go_to_page(self.state.page + 1)

    def previous_page(self) -> View:
        return self.go_to_page(self.state.page - 1)

    def first_page(self) -> View:
        return self.go_to_page(1)

    def last_page(self) -> View:
        return self.go_to_page(self.query().total_pages)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export(self) -> str:
        return export_csv(self.table, self.state)

    def export_to(self, target: Union[str, Path]) -> Path:
        """Write the export; a directory target gets ``table_data.csv`` inside it."""
        out_path = Path(target)
        if out_path.is_dir():
            out_path = out_path / EXPORT_FILENAME
        out_path.write_text(self.export(), encoding="utf-8")
        return out_path


# ---------------------------------------------------------------------------
# One-shot orchestration (used by the CLI)
# ---------------------------------------------------------------------------


def _state_from_config(table: Table, config: Dict[str, Any]) -> QueryState:
    state = QueryState.initial(table, int(config["page_size"]))
    if config.get("columns"):
        state = replace(state, visible_columns=frozenset(config["columns"]))
    if config.get("search"):
        state = state.with_search(str(config["search"]))
    if config.get("sort"):
        direction = SortDirection.DESC if config.get("descending") else SortDirection.ASC
        state = replace(state, sort=SortSpec(str(config["sort"]), direction))
    page = int(config.get("page", 1))
    if page != 1:
        state = state.go_to(page, query(table, state).total_pages)
    return state


def _build_payload(table: Table, state: QueryState, view: View, mode: str) -> Dict[str, Any]:
    dataset = {
        "rows": len(table),
        "columns": len(table.columns),
        "column_names": [c.label for c in table.columns],
    }
    columns = {
        c.key: {"label": c.label, "type": c.type.value} for c in table.columns
    }
    if mode == "schema_only":
        return {"dataset": dataset, "columns": columns, "mode": mode, "version": "v1"}

    return {
        "dataset": dataset,
        "columns": columns,
        "query": {
            "search": state.global_filter_text,
            "sort": (
                {"key": state.sort.key, "direction": state.sort.direction.value}
                if state.sort
                else None
            ),
            "page": view.page,
            "page_size": view.page_size,
            "visible_columns": [c.key for c in view.columns],
        },
        "view": {
            "total_matched": view.total_matched,
            "total_pages": view.total_pages,
            "first_index": view.first_index,
            "last_index": view.last_index,
            "rows": view.to_records(),
        },
        "mode": mode,
        "version": "v1",
    }


def run_table_pipeline(
    file_path: str, *, mode: str = "full", config: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Primary orchestrator: load -> parse -> build -> query -> payload.

    Parameters
    ----------
    file_path : str
        Path to a CSV or Excel file (first sheet only for Excel).
    mode : str
        'full' or 'schema_only'.
    config : dict, optional
        Overrides for DEFAULT_CONFIG (page_size, page, search, sort, ...).

    Returns
    -------
    dict with keys: session, table, state, view, payload
    """
    if mode not in ("full", "schema_only"):
        raise ValueError("mode must be 'full' or 'schema_only'")
    cfg = {**DEFAULT_CONFIG, **(config or {})}

    session = TableSession(page_size=int(cfg["page_size"]), verbose=bool(cfg["verbose"]))
    table = session.load_file(file_path)
    session.state = _state_from_config(table, cfg)
    view = session.query()

    payload = _build_payload(table, session.state, view, mode)

    return {
        "session": session,
        "table": table,
        "state": session.state,
        "view": view,
        "payload": payload,
    }
