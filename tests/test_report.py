"""DOCX report tests (evdash/report.py). Skipped when python-docx is absent."""

import pytest

docx = pytest.importorskip("docx")

from evdash.models import FilterSelection
from evdash.report import ReportConfig, generate_docx_report


def _text(path):
    doc = docx.Document(path)
    parts = [p.text for p in doc.paragraphs]
    for table in doc.tables:
        for row in table.rows:
            parts.extend(cell.text for cell in row.cells)
    return "\n".join(parts)


def test_writes_tables(sample_records, tmp_path):
    out = str(tmp_path / "reports" / "ev.docx")
    cfg = ReportConfig(dataset_file="ev.csv", selection=FilterSelection(county="King"),
                       command_log=['filter county "King"'])
    assert generate_docx_report(sample_records, out, config=cfg) == out
    text = _text(out)
    assert "Total EVs: 6" in text
    assert "TESLA" in text
    assert "Active filters: county = King" in text
    assert 'filter county "King"' in text


def test_full_scope_without_selection(sample_records, tmp_path):
    out = str(tmp_path / "full.docx")
    generate_docx_report(sample_records, out, scope_label="Full Dataset")
    text = _text(out)
    assert "Scope: Full Dataset" in text
    assert "Active filters" not in text


def test_empty_records(tmp_path):
    with pytest.raises(ValueError):
        generate_docx_report([], str(tmp_path / "empty.docx"))
