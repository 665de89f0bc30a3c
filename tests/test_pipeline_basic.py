import json
import sys
from pathlib import Path

import pandas as pd
import pytest

from table_pipeline import (
    EXPORT_FILENAME,
    EmptyInput,
    SourceKind,
    TableSession,
    UnsupportedFormat,
    run_table_pipeline,
)
from table_pipeline import cli


def _write_people(tmp_path: Path) -> Path:
    csv_path = tmp_path / "people.csv"
    csv_path.write_text(
        "Name,Amount,Joined\n"
        "Alice,$10.50,2024-01-01\n"
        "Bob,20.00,2024-02-15\n"
        "Charlie,$5.25,2024-03-10\n"
        "Dana,$40.00,2024-04-05\n",
        encoding="utf-8",
    )
    return csv_path


def test_pipeline_full_mode(tmp_path: Path):
    result = run_table_pipeline(str(_write_people(tmp_path)), mode="full")
    payload = result["payload"]

    assert payload["dataset"]["rows"] == 4
    assert payload["dataset"]["column_names"] == ["Name", "Amount", "Joined"]
    assert payload["columns"]["amount"] == {"label": "Amount", "type": "currency"}
    assert payload["columns"]["joined"]["type"] == "date"
    assert payload["view"]["total_matched"] == 4
    assert payload["view"]["total_pages"] == 1
    assert payload["view"]["rows"][0]["name"] == "Alice"
    assert payload["query"]["visible_columns"] == ["name", "amount", "joined"]
    # Payload must be JSON-serialisable the way the CLI writes it
    json.dumps(payload, default=str)


def test_pipeline_schema_only(tmp_path: Path):
    result = run_table_pipeline(str(_write_people(tmp_path)), mode="schema_only")
    payload = result["payload"]
    assert payload["mode"] == "schema_only"
    assert "columns" in payload
    # schema_only mode intentionally excludes page rows
    assert "view" not in payload


def test_pipeline_config_drives_query(tmp_path: Path):
    config = {
        "search": "a",
        "sort": "amount",
        "descending": True,
        "page_size": 2,
        "page": 2,
        "columns": ["name"],
    }
    result = run_table_pipeline(str(_write_people(tmp_path)), config=config)
    view = result["payload"]["view"]
    # Alice, Charlie, Dana match "a"; sorted by amount desc: Dana, Alice, Charlie
    assert view["total_matched"] == 3
    assert view["rows"] == [{"id": 3, "name": "Charlie"}]
    assert result["payload"]["query"]["sort"] == {"key": "amount", "direction": "desc"}


def test_pipeline_page_clamped_by_collaborator(tmp_path: Path):
    result = run_table_pipeline(
        str(_write_people(tmp_path)), config={"page": 99, "page_size": 3}
    )
    assert result["state"].page == 2
    assert [r["id"] for r in result["payload"]["view"]["rows"]] == [4]


def test_pipeline_bad_mode(tmp_path: Path):
    with pytest.raises(ValueError):
        run_table_pipeline(str(_write_people(tmp_path)), mode="everything")


def test_pipeline_unsupported_extension(tmp_path: Path):
    path = tmp_path / "notes.txt"
    path.write_text("a,b\n1,2\n", encoding="utf-8")
    with pytest.raises(UnsupportedFormat):
        run_table_pipeline(str(path))


def test_pipeline_excel(tmp_path: Path):
    df = pd.DataFrame({"City": ["Oslo", "Lima"], "Population": [709000, 10000000]})
    xlsx_path = tmp_path / "cities.xlsx"
    df.to_excel(xlsx_path, index=False)

    result = run_table_pipeline(str(xlsx_path), mode="full")
    payload = result["payload"]
    assert payload["dataset"]["column_names"] == ["City", "Population"]
    assert payload["columns"]["population"]["type"] == "number"
    assert payload["view"]["rows"][1]["population"] == 10000000.0


def test_session_load_resets_state():
    session = TableSession(page_size=1)
    session.load_bytes(b"a,b\n1,x\n2,y\n", SourceKind.DELIMITED_TEXT)
    session.search("y")
    session.sort_by("a")
    session.toggle_column("b")
    assert session.state.global_filter_text == "y"

    session.load_bytes(b"c\n3\n", SourceKind.DELIMITED_TEXT)
    assert session.table.keys == ["c"]
    assert session.state.global_filter_text == ""
    assert session.state.sort is None
    assert session.state.page == 1
    assert session.state.visible_columns == frozenset({"c"})


def test_failed_load_keeps_previous_table():
    session = TableSession()
    table = session.load_bytes(b"a\n1\n", SourceKind.DELIMITED_TEXT)
    state = session.state.with_search("1")
    session.state = state

    with pytest.raises(EmptyInput):
        session.load_bytes(b"\n\n", SourceKind.DELIMITED_TEXT)
    with pytest.raises(UnsupportedFormat):
        session.load_bytes(b"garbage", SourceKind.SPREADSHEET_BINARY)

    assert session.table is table
    assert session.state is state


def test_session_navigation_and_sort_toggle():
    session = TableSession(page_size=2)
    session.load_bytes(b"n\n5\n3\n4\n1\n2\n", SourceKind.DELIMITED_TEXT)
    assert session.is_loaded

    view = session.sort_by("n")
    assert [r["n"] for r in view.rows] == [1.0, 2.0]
    view = session.sort_by("n")
    assert [r["n"] for r in view.rows] == [5.0, 4.0]

    assert session.last_page().page == 3
    assert session.next_page().page == 3
    assert session.previous_page().page == 2
    assert session.first_page().page == 1
    assert session.go_to_page(10).page == 3

    view = session.search("4")
    assert view.page == 1 and view.total_matched == 1
    assert session.clear_search().total_matched == 5


def test_session_export_to_directory(tmp_path: Path):
    session = TableSession()
    session.load_file(_write_people(tmp_path))
    session.search("bob")
    written = session.export_to(tmp_path)
    assert written.name == EXPORT_FILENAME
    assert written.read_text(encoding="utf-8") == "Name,Amount,Joined\nBob,20,2024-02-15"


def test_cli_prints_summary_and_exports(tmp_path: Path, monkeypatch, capsys):
    csv_path = _write_people(tmp_path)
    out_json = tmp_path / "payload.json"
    monkeypatch.setattr(
        sys,
        "argv",
        [
            "table-pipeline",
            str(csv_path),
            "--sort",
            "amount",
            "--output",
            str(out_json),
            "--export",
            str(tmp_path),
        ],
    )
    cli.main()
    out = capsys.readouterr().out
    assert "Rows: 4  Columns: 3" in out
    assert "Showing 1 - 4 of 4 entries" in out
    assert "$40.00" in out
    assert json.loads(out_json.read_text(encoding="utf-8"))["mode"] == "full"
    exported = (tmp_path / EXPORT_FILENAME).read_text(encoding="utf-8")
    assert exported.splitlines()[1] == "Charlie,5.25,2024-03-10"


def test_cli_missing_file(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["table-pipeline", str(tmp_path / "nope.csv")])
    with pytest.raises(SystemExit):
        cli.main()


def test_cli_reports_parse_errors(tmp_path: Path, monkeypatch):
    empty = tmp_path / "empty.csv"
    empty.write_bytes(b"\n\n")
    monkeypatch.setattr(sys, "argv", ["table-pipeline", str(empty)])
    with pytest.raises(SystemExit, match="empty"):
        cli.main()
