"""
Dataset loader (CSV / Excel / HTTP -> records)
==============================================

This module reads the Electric Vehicle Population export and converts each
row into a record (`Dict[str, str]`).

Key ideas:
- Every cell is read as text: "Model Year" stays "2021", postal codes keep
  their leading zeros.
- Cells are trimmed; blank or missing cells become "".
- Column names may vary slightly between exports, so required columns are
  matched on a normalized name. The file's own header names are kept.
- Any failure to read or decode the file is a `DatasetLoadError`; nothing
  downstream runs on a partial dataset.
"""

from __future__ import annotations
import io
import logging
import os
import re
from typing import Iterable, List

import pandas as pd
import requests

from .errors import DataFetchError, DatasetLoadError
from .models import REQUIRED_COLUMNS, Dataset

logger = logging.getLogger(__name__)

FETCH_TIMEOUT = 30


def _to_str(x) -> str:
    if x is None or (pd.api.types.is_scalar(x) and pd.isna(x)): return ""
    return str(x).strip()


def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(s).lower())


def _missing_columns(columns: Iterable[str]) -> List[str]:
    have = {_norm(c) for c in columns}
    return [names[0] for names in REQUIRED_COLUMNS if not any(_norm(n) in have for n in names)]


def frame_to_records(df: pd.DataFrame, source: str = "") -> Dataset:
    """Convert a DataFrame of text cells into records, checking required columns."""
    df = df.rename(columns={c: str(c).strip() for c in df.columns})
    missing = _missing_columns(df.columns)
    if missing:
        raise DatasetLoadError(
            f"Missing required column(s): {', '.join(missing)}. Available={list(df.columns)}",
            path=source or None,
        )
    columns = list(df.columns)
    records: Dataset = []
    for row in df.itertuples(index=False, name=None):
        records.append({c: _to_str(v) for c, v in zip(columns, row)})
    return records


def _read_csv(source, path: str) -> pd.DataFrame:
    try:
        return pd.read_csv(source, dtype=str, keep_default_na=False,
                           skip_blank_lines=True, encoding="utf-8")
    except pd.errors.EmptyDataError as e:
        raise DatasetLoadError("File is empty (no header row)", path=path or None) from e
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise DatasetLoadError(f"Error parsing CSV: {e}", path=path or None) from e


def parse_csv_text(text: str) -> Dataset:
    """Decode CSV text (header row first) into records."""
    return frame_to_records(_read_csv(io.StringIO(text), ""))


def load_records(path: str) -> Dataset:
    """Load the dataset file at `path` (.csv/.txt or .xlsx)."""
    if not os.path.isfile(path):
        raise DatasetLoadError("File not found", path=path)
    ext = os.path.splitext(path)[1].lower()
    if ext in (".xlsx", ".xlsm"):
        try:
            df = pd.read_excel(path, engine="openpyxl", dtype=str, keep_default_na=False)
        except (ValueError, OSError, KeyError) as e:
            raise DatasetLoadError(f"Error reading workbook: {e}", path=path) from e
    elif ext in (".csv", ".txt", ""):
        df = _read_csv(path, path)
    else:
        raise DatasetLoadError(f"Unsupported file type {ext!r} (expected .csv or .xlsx)", path=path)

    records = frame_to_records(df, source=path)
    logger.info("Loaded %d records from %s", len(records), path)
    return records


def fetch_records(url: str, timeout: float = FETCH_TIMEOUT) -> Dataset:
    """Fetch the record list from a running `/api/data` endpoint.

    One attempt only; callers offer the user a manual retry.
    """
    try:
        resp = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise DataFetchError(f"Could not reach {url}: {e}") from e
    if not 200 <= resp.status_code < 300:
        raise DataFetchError(f"{url} answered HTTP {resp.status_code}", status=resp.status_code)
    try:
        payload = resp.json()
    except ValueError as e:
        raise DataFetchError(f"{url} did not return JSON: {e}", status=resp.status_code) from e
    if not isinstance(payload, list):
        raise DataFetchError(f"{url} did not return a JSON array", status=resp.status_code)
    records = [{str(k): _to_str(v) for k, v in row.items()} for row in payload if isinstance(row, dict)]
    logger.info("Fetched %d records from %s", len(records), url)
    return records
