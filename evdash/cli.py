"""
EVDash Command Line Interface (CLI)
===================================

This file provides the interactive terminal program you run like:

    python -m evdash.cli --data "path/to/Electric_Vehicle_Population_Data.csv"
    python -m evdash.cli --url "http://localhost:8000/api/data"

It demonstrates:
- Argument parsing (argparse)
- A REPL loop (Read-Eval-Print Loop) for commands
- Mapping user commands to dashboard events (filters, sort, paging)

The CLI DOES NOT modify your dataset file. It loads it once and works on an
in-memory dashboard state.
"""

from __future__ import annotations
import argparse, logging, os, shlex
from typing import List, Optional

from .config import DashboardConfig
from .engine import (
    ClearFilter, Dashboard, GoToPage, NextPage, PreviousPage, ResetFilters, SetFilter, SortBy,
)
from .errors import EVDashError
from .loader import fetch_records, load_records
from .models import (
    FACETS, SORTABLE_COLUMNS, AggregateSummary, Dataset,
    CITY, EV_TYPE, MAKE, MODEL, MODEL_YEAR, STATE,
)

logger = logging.getLogger(__name__)

# column aliases accepted by `sort`
_COLUMN_ALIASES = {
    "make": MAKE, "model": MODEL, "year": MODEL_YEAR, "model_year": MODEL_YEAR,
    "type": EV_TYPE, "city": CITY, "state": STATE,
}

HELP = """
EVDash commands (grouped)
-------------------------

1) View / Inspect
   help
   summary                            (stat cards + top makes / years / types)
   stats                              (record counts, active filters)
   values <facet> [prefix]            (example: values make TE)
   show                               (current table page)

2) Filtering (facets: make, year, county, type)
   filter <facet> "<value>"           (example: filter make "TESLA")
   clear <facet>                      (example: clear year)
   reset

3) Sorting / Paging
   sort <column>                      (make, model, year, type, city, state; again = flip)
   page <n> | page next | page prev

4) Export (current filtered + sorted table)
   export csv "<out.csv>"
   export json "<out.json>"

5) Report (DOCX)
   report "<out.docx>" [current|full]

6) Serve the JSON API over this dataset
   serve [port]

7) Exit
   quit
"""


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {text!r}") from None
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return value


def _load(args) -> Dataset:
    if args.url:
        return fetch_records(args.url)
    return load_records(args.data)


def load_with_retry(args, prompt=None) -> Optional[Dataset]:
    """Load the dataset; on failure show the error and offer a manual retry."""
    prompt = prompt or input
    while True:
        try:
            return _load(args)
        except EVDashError as e:
            print(f"Error loading dataset: {e}")
            try:
                answer = prompt("Retry? [y/N] ")
            except EOFError:
                return None
            if answer.strip().lower() not in ("y", "yes"):
                return None


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the EVDash CLI.

    1) Load dataset
    2) Build the dashboard (indices + initial state)
    3) Start an interactive REPL
    """
    cfg = DashboardConfig.from_env()
    ap = argparse.ArgumentParser(prog="evdash", description="Electric vehicle registration dashboard")
    src = ap.add_mutually_exclusive_group()
    src.add_argument("--data", default=cfg.data_path, help="Path to the dataset (.csv or .xlsx)")
    src.add_argument("--url", help="URL of a running /api/data endpoint")
    ap.add_argument("--page-size", type=_positive_int, default=cfg.page_size, help="Rows per table page")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log debug output")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s %(message)s")

    print("Loading dataset...")
    records = load_with_retry(args)
    if records is None:
        return 1
    engine = Dashboard(records, page_size=args.page_size, dataset_path=args.url or args.data)
    logger.debug("dashboard ready: %d records, page size %d", len(records), args.page_size)

    print(f"Loaded {len(records)} records. Type 'help' for commands.")
    while True:
        try:
            line = input("evdash> ")
        except EOFError:
            break
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.lower() in ("quit", "exit"):
            break
        # Keep a lightweight log of state-changing commands for the report
        if stripped.split()[0].lower() in ("filter", "clear", "reset", "sort", "page"):
            engine.command_log.append(stripped)
        try:
            handle(engine, stripped)
        except (ValueError, IndexError, OSError, ImportError, EVDashError) as e:
            print(f"Error: {e}")
    return 0


def handle(engine: Dashboard, line: str) -> None:
    """Handle one CLI command line.

    This parses the command and dispatches the matching dashboard event.
    """
    parts = shlex.split(line)
    cmd = parts[0].lower()

    if cmd == "help":
        print(HELP)
        return

    if cmd == "summary":
        _print_summary(engine.get_summary())
        return

    if cmd == "stats":
        print(f"Filtered data: {engine.filtered_count} of {engine.total_count} total records")
        print(f"Active filters: {engine.active_filter_count}")
        for facet, value in engine.selection.items():
            print(f"  {facet} = {value}")
        view = engine.view
        if view.sort_column:
            print(f"Sorted by {view.sort_column} ({view.sort_direction})")
        return

    if cmd == "values":
        facet = _facet(parts[1])
        prefix = parts[2].lower() if len(parts) >= 3 else ""
        vals = [v for v in engine.get_facet_domains()[facet] if v.lower().startswith(prefix)]
        for v in vals[:50]:
            print(v)
        if len(vals) > 50:
            print(f"... ({len(vals)} total, showing 50)")
        return

    if cmd == "filter":
        if len(parts) < 3:
            raise ValueError('Usage: filter <facet> "<value>"')
        facet = _facet(parts[1])
        engine.dispatch(SetFilter(facet, parts[2]))
        print(f"Filtered {facet}={parts[2]}. Size={engine.filtered_count}")
        return

    if cmd == "clear":
        facet = _facet(parts[1])
        engine.dispatch(ClearFilter(facet))
        print(f"Cleared {facet}. Size={engine.filtered_count}")
        return

    if cmd == "reset":
        engine.dispatch(ResetFilters())
        print(f"Filters reset. Size={engine.filtered_count}")
        return

    if cmd == "sort":
        column = _column(" ".join(parts[1:]))
        engine.dispatch(SortBy(column))
        print(f"Sorted by {column} ({engine.view.sort_direction}).")
        _print_page(engine)
        return

    if cmd == "page":
        arg = parts[1].lower() if len(parts) >= 2 else ""
        if arg == "next":
            engine.dispatch(NextPage())
        elif arg in ("prev", "previous"):
            engine.dispatch(PreviousPage())
        else:
            engine.dispatch(GoToPage(int(arg)))
        _print_page(engine)
        return

    if cmd == "show":
        _print_page(engine)
        return

    if cmd == "export":
        if len(parts) < 3:
            print('Usage: export csv "out.csv"  OR  export json "out.json"')
            return
        fmt, out_path = parts[1].lower(), parts[2]
        if engine.filtered_count == 0:
            print("Nothing to export: current selection is empty.")
            return
        if fmt == "csv":
            engine.export_csv(out_path)
        elif fmt == "json":
            engine.export_json(out_path)
        else:
            print("Unknown export format. Use: csv or json")
            return
        print(f"Exported {fmt.upper()} to {out_path}")
        return

    if cmd == "report":
        from .report import ReportConfig, generate_docx_report
        path = parts[1]
        scope = parts[2].lower() if len(parts) >= 3 else "current"
        if scope not in ("current", "full"):
            raise ValueError("report scope must be: current | full")
        if scope == "full":
            records, label, selection = engine.records, "Full Dataset", None
        else:
            records, label, selection = engine.sorted_records(), "Current Result Set", engine.selection
        cfg = ReportConfig(
            dataset_file=os.path.basename(engine.dataset_path) if engine.dataset_path else None,
            selection=selection,
            command_log=engine.command_log,
        )
        generate_docx_report(records, path, config=cfg, scope_label=label)
        print(f"Report written to {path}")
        return

    if cmd == "serve":
        import uvicorn
        from .api import create_app
        port = int(parts[1]) if len(parts) >= 2 else 8000
        print(f"Serving {engine.total_count} records on http://127.0.0.1:{port} (Ctrl+C to stop)")
        uvicorn.run(create_app(records=engine.records), host="127.0.0.1", port=port)
        return

    print("Unknown command. Type 'help'.")


def _facet(name: str) -> str:
    facet = name.lower()
    if facet not in FACETS:
        raise ValueError(f"facet must be one of: {', '.join(FACETS)}")
    return facet


def _column(name: str) -> str:
    if name in SORTABLE_COLUMNS:
        return name
    column = _COLUMN_ALIASES.get(name.lower().replace(" ", "_"))
    if column is None:
        raise ValueError(f"column must be one of: {', '.join(_COLUMN_ALIASES)}")
    return column


def _print_summary(s: AggregateSummary) -> None:
    print(f"Total EVs: {s.total_evs:,} | Unique cities: {s.unique_cities:,}")
    if s.latest_year:
        print(f"Latest model year: {s.latest_year.year} ({s.latest_year.count:,} vehicles, "
              f"{s.year_over_year_growth:+d}% vs previous year)")
    print("Top makes:")
    for m in s.top_makes:
        print(f"  {m.make:<20} {m.count:>8,}")
    print("By model year:")
    for y in s.year_data:
        print(f"  {y.year:<20} {y.count:>8,}")
    print("By vehicle type:")
    for t in s.type_data:
        print(f"  {t.name:<45} {t.value:>8,}")


def _print_page(engine: Dashboard) -> None:
    view = engine.sort_and_paginate()
    if not view.records:
        print("No records match the current filters.")
        return
    for r in view.records:
        print(f"{r.get(MAKE, '')} {r.get(MODEL, '')} | {r.get(MODEL_YEAR, '')} | "
              f"{r.get(EV_TYPE, '')} | {r.get(CITY, '')}, {r.get(STATE, '')}")
    strip = " ".join(f"[{n}]" if n == view.page else str(n) for n in view.visible_pages)
    print(f"Showing {view.first_index} to {view.last_index} of {view.total_records} | pages: {strip}")


if __name__ == "__main__":
    raise SystemExit(main())
