from __future__ import annotations

"""
EVDash report generator
-----------------------
This module writes a DOCX summary of a list of records: the dashboard's stat
cards, its ranking tables and a preview of the record table.

Design goals:
- Keep EVDash usable even if python-docx is missing (lazy import).
- Report the same numbers the dashboard shows: everything comes from
  `process_ev_data`, nothing is recomputed here.
- Tables only. Charts belong to the front end.
"""

from dataclasses import dataclass, field
from datetime import datetime
import os
from typing import List, Optional, Sequence, Tuple

from .aggregate import process_ev_data
from .models import (
    FilterSelection, Record,
    CITY, EV_TYPE, MAKE, MODEL, MODEL_YEAR, STATE,
)


@dataclass
class ReportConfig:
    """High-level knobs to control how the report is written."""
    title: str = "EV Registration Report"
    subtitle: str = "Electric Vehicle Population Data"
    dataset_file: Optional[str] = None

    # Filters that produced the records (None for the full dataset)
    selection: Optional[FilterSelection] = None

    # How many rows to show in the state/city ranking tables
    top_n: int = 10

    # How many rows to show in the record preview
    max_rows_preview: int = 10

    command_log: List[str] = field(default_factory=list)


def generate_docx_report(
    records: Sequence[Record],
    out_path: str,
    *,
    config: Optional[ReportConfig] = None,
    scope_label: str = "Current Result Set",
) -> str:
    """Generate a DOCX report for `records` and return `out_path`."""
    config = config or ReportConfig()

    try:
        from docx import Document
        from docx.enum.text import WD_ALIGN_PARAGRAPH
        from docx.shared import Pt
    except ImportError as e:
        raise ImportError(
            "Missing dependency: python-docx.\n"
            "Install it with: python -m pip install python-docx"
        ) from e

    if not records:
        raise ValueError("No records to report on (result set is empty).")

    summary = process_ev_data(list(records))

    doc = Document()
    style = doc.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(11)

    def _center_title(text: str, size: int, bold: bool = False, italic: bool = False) -> None:
        p = doc.add_paragraph()
        r = p.add_run(text)
        r.bold = bold
        r.italic = italic
        r.font.size = Pt(size)
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER

    def _kv(key: str, value: str) -> None:
        p = doc.add_paragraph()
        r = p.add_run(f"{key}: ")
        r.bold = True
        p.add_run(value)

    def _table(headers: Tuple[str, ...], rows: List[Tuple[str, ...]]) -> None:
        t = doc.add_table(rows=1, cols=len(headers))
        for cell, text in zip(t.rows[0].cells, headers):
            cell.text = text
        for row in rows:
            for cell, text in zip(t.add_row().cells, row):
                cell.text = text

    _center_title(config.title, 22, bold=True)
    _center_title(config.subtitle, 12, italic=True)

    doc.add_paragraph("")
    if config.dataset_file:
        _kv("Dataset file", config.dataset_file)
    _kv("Scope", scope_label)
    if config.selection is not None:
        active = config.selection.items()
        _kv("Active filters", ", ".join(f"{k} = {v}" for k, v in active) if active else "none")

    # Stat cards
    doc.add_heading("Overview", level=1)
    _kv("Total EVs", f"{summary.total_evs:,}")
    _kv("Unique cities", f"{summary.unique_cities:,}")
    if summary.latest_year:
        _kv("Latest model year", f"{summary.latest_year.year} ({summary.latest_year.count:,} vehicles)")
        _kv("Year-over-year growth", f"{summary.year_over_year_growth}%")
    if summary.top_makes:
        _kv("Most common make", summary.top_makes[0].make)

    doc.add_heading("Top makes", level=1)
    _table(("Make", "Vehicles"), [(m.make, f"{m.count:,}") for m in summary.top_makes])

    doc.add_heading("Registrations by model year", level=1)
    if summary.year_data:
        _table(("Model Year", "Vehicles"), [(y.year, f"{y.count:,}") for y in summary.year_data])
    else:
        doc.add_paragraph("No valid model years in scope.")

    doc.add_heading("Vehicle types", level=1)
    _table(("Electric Vehicle Type", "Vehicles"), [(t.name, f"{t.value:,}") for t in summary.type_data])

    doc.add_heading(f"Top {config.top_n} states", level=1)
    _table(("State", "Vehicles"), [(s.state, f"{s.count:,}") for s in summary.state_data[:config.top_n]])

    doc.add_heading(f"Top {config.top_n} cities", level=1)
    _table(("City", "Vehicles"), [(c.city, f"{c.count:,}") for c in summary.city_data[:config.top_n]])

    # A small preview table (first N records, in table order)
    doc.add_heading("Preview of first records", level=1)
    _table(
        ("Make", "Model", "Year", "Type", "City", "State"),
        [tuple(r.get(c, "") for c in (MAKE, MODEL, MODEL_YEAR, EV_TYPE, CITY, STATE))
         for r in list(records)[:config.max_rows_preview]],
    )

    # Reproducibility footer
    doc.add_heading("Reproducibility", level=1)
    from . import __version__
    doc.add_paragraph(f"EVDash version: {__version__}")
    doc.add_paragraph(f"Report generated at: {datetime.now().isoformat(timespec='seconds')}")
    doc.add_paragraph(f"Records in scope: {len(records)}")
    if config.command_log:
        doc.add_paragraph("Commands used (log):")
        for line in config.command_log:
            doc.add_paragraph(line, style="List Bullet")

    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    doc.save(out_path)
    return out_path
