"""Command-line interface for loading, querying and exporting a table.

Usage (examples):
    python -m table_pipeline.cli path/to/file.csv
    python -m table_pipeline.cli path/to/file.xlsx --mode schema_only
    python -m table_pipeline.cli people.csv --search bob --sort amount --desc
    python -m table_pipeline.cli people.csv --export out/   # writes out/table_data.csv

The CLI prints a concise summary and the requested page by default; use
--json for the full payload.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict
import warnings

from . import run_table_pipeline
from .errors import ParseError


def _summarize(payload: Dict[str, Any]) -> str:
    dataset = payload.get("dataset", {})
    cols = dataset.get("column_names", [])
    preview_cols = cols[:8]
    more = "" if len(cols) <= 8 else f" (+{len(cols)-8} more)"
    lines = [
        f"Rows: {dataset.get('rows')}  Columns: {dataset.get('columns')}",
        f"Columns: {', '.join(preview_cols)}{more}",
        f"Mode: {payload.get('mode')}  Version: {payload.get('version')}",
    ]
    col_types = payload.get("columns", {})
    for k in list(col_types.keys())[:3]:
        lines.append(f"  - {k}: type={col_types[k].get('type')}")
    if payload.get("mode") == "full":
        view = payload.get("view", {})
        q = payload.get("query", {})
        lines.append(
            f"Showing {view.get('first_index')} - {view.get('last_index')} "
            f"of {view.get('total_matched')} entries  "
            f"(page {q.get('page')} of {view.get('total_pages')})"
        )
    return "\n".join(lines)


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Load a CSV or Excel file, then search, sort, page and export it."
    )
    parser.add_argument("file", help="Path to input CSV or Excel file")
    parser.add_argument(
        "--mode",
        choices=["full", "schema_only"],
        default="full",
        help="Payload detail level (default: full)",
    )
    parser.add_argument("--search", default="", help="Case-insensitive text filter")
    parser.add_argument("--sort", help="Column key to sort by")
    parser.add_argument(
        "--desc", action="store_true", help="Sort descending (with --sort)"
    )
    parser.add_argument("--page", type=int, default=1, help="Page number (default: 1)")
    parser.add_argument(
        "--page-size",
        type=int,
        default=10,
        help="Rows per page (default: 10)",
    )
    parser.add_argument(
        "--columns",
        nargs="+",
        help="Visible column keys (default: all columns)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print full JSON payload to stdout (in addition to summary)",
    )
    parser.add_argument(
        "--output",
        help="Optional path to write full JSON payload (pretty-printed)",
    )
    parser.add_argument(
        "--export",
        help="Write the filtered/sorted rows as CSV (a directory gets table_data.csv)",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Print parsing diagnostics"
    )
    parser.add_argument(
        "--suppress-warnings",
        action="store_true",
        help="Suppress runtime warnings from the spreadsheet reader.",
    )
    args = parser.parse_args()

    path = Path(args.file)
    if not path.exists():
        raise SystemExit(f"File not found: {path}")
    if args.page < 1 or args.page_size < 1:
        raise SystemExit("--page and --page-size must be positive")

    if args.suppress_warnings:
        # openpyxl complains about workbook styles / data validation it ignores
        warnings.filterwarnings("ignore", category=UserWarning, module="openpyxl")

    config = {
        "page_size": args.page_size,
        "page": args.page,
        "search": args.search,
        "sort": args.sort,
        "descending": args.desc,
        "columns": args.columns,
        "verbose": args.verbose,
    }
    try:
        result = run_table_pipeline(str(path), mode=args.mode, config=config)
    except ParseError as exc:
        raise SystemExit(str(exc))
    payload = result["payload"]

    print(_summarize(payload))

    if args.mode == "full":
        frame = result["view"].to_frame()
        if not frame.empty:
            print()
            print(frame.to_string())

    if args.json:
        print("\n=== JSON Payload ===")
        print(json.dumps(payload, indent=2, default=str))

    if args.output:
        out_path = Path(args.output)
        out_path.write_text(
            json.dumps(payload, indent=2, default=str), encoding="utf-8"
        )
        print(f"\nSaved JSON payload to {out_path}")

    if args.export:
        written = result["session"].export_to(args.export)
        print(f"\nExported CSV to {written}")


if __name__ == "__main__":  # pragma: no cover
    main()
