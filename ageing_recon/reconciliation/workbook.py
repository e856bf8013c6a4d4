"""Read the first (or a named) sheet of an xlsx/csv export as rows or keyed records."""

from __future__ import annotations

import csv
import io
import logging
import warnings
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import openpyxl
import pandas as pd

# Suppress openpyxl "no default style" warning (cosmetic)
warnings.filterwarnings("ignore", message=".*default style.*", module="openpyxl")

logger = logging.getLogger(__name__)

XLSX_SUFFIXES = (".xlsx", ".xlsm")
CSV_SUFFIXES = (".csv", ".txt")
ZIP_MAGIC = b"PK\x03\x04"

Source = Union[str, Path, bytes, bytearray]


def _detect_format(source: Source) -> str:
    if isinstance(source, (bytes, bytearray)):
        return "xlsx" if bytes(source[:4]) == ZIP_MAGIC else "csv"
    suffix = Path(source).suffix.lower()
    if suffix in XLSX_SUFFIXES:
        return "xlsx"
    if suffix in CSV_SUFFIXES:
        return "csv"
    raise ValueError(f"Unsupported spreadsheet format: {source} (expected .xlsx or .csv)")


def _check_exists(source: Source) -> None:
    if isinstance(source, (bytes, bytearray)):
        return
    if not Path(source).exists():
        raise FileNotFoundError(f"Spreadsheet not found: {source}")


def _clean_cell(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, float) and pd.isna(value):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _trim_row(row: List[Any]) -> List[Any]:
    end = len(row)
    while end > 0 and row[end - 1] is None:
        end -= 1
    return row[:end]


def _read_xlsx_rows(source: Source, sheet_name: Optional[str]) -> List[List[Any]]:
    handle = io.BytesIO(bytes(source)) if isinstance(source, (bytes, bytearray)) else source
    wb = openpyxl.load_workbook(handle, read_only=False, data_only=True)
    try:
        if sheet_name is not None and sheet_name not in wb.sheetnames:
            raise ValueError(f"Sheet {sheet_name!r} not found (available: {wb.sheetnames})")
        ws = wb[sheet_name] if sheet_name is not None else wb[wb.sheetnames[0]]
        return [_trim_row([_clean_cell(v) for v in row]) for row in ws.iter_rows(values_only=True)]
    finally:
        wb.close()


def _read_csv_rows(source: Source) -> List[List[Any]]:
    if isinstance(source, (bytes, bytearray)):
        text = bytes(source).decode("utf-8-sig")
    else:
        text = Path(source).read_text(encoding="utf-8-sig")
    # Ageing exports are ragged (party rows have one cell); size the frame to the widest row.
    width = max((len(r) for r in csv.reader(io.StringIO(text))), default=0)
    if width == 0:
        return []
    df = pd.read_csv(
        io.StringIO(text),
        header=None,
        names=list(range(width)),
        dtype=object,
        keep_default_na=False,
        skip_blank_lines=False,
    )
    return [_trim_row([_clean_cell(v) for v in row]) for row in df.itertuples(index=False, name=None)]


def read_sheet_rows(source: Source, sheet_name: Optional[str] = None) -> List[List[Any]]:
    """
    Matrix of raw cell values, header row included. Empty cells are None and
    trailing empties are trimmed; blank rows are kept as [] so indices line up
    with the sheet.
    """
    _check_exists(source)
    fmt = _detect_format(source)
    rows = _read_xlsx_rows(source, sheet_name) if fmt == "xlsx" else _read_csv_rows(source)
    logger.debug("Read %d row(s) from %s", len(rows), source if not isinstance(source, (bytes, bytearray)) else "buffer")
    return rows


def rows_to_records(rows: List[List[Any]]) -> List[Dict[str, Any]]:
    """First row becomes the keys; blank rows are dropped; blank headers become __EMPTY_<i>."""
    if not rows:
        return []
    headers: List[str] = []
    for i, h in enumerate(rows[0]):
        text = str(h).strip() if h is not None else ""
        headers.append(text or f"__EMPTY_{i}")
    width = max((len(r) for r in rows[1:]), default=0)
    for i in range(len(headers), width):
        headers.append(f"__EMPTY_{i}")

    records: List[Dict[str, Any]] = []
    for row in rows[1:]:
        if not any(v is not None for v in row):
            continue
        padded = list(row) + [None] * (len(headers) - len(row))
        records.append(dict(zip(headers, padded)))
    return records


def read_sheet_records(source: Source, sheet_name: Optional[str] = None) -> List[Dict[str, Any]]:
    """Keyed rows (header -> value) of the sheet."""
    return rows_to_records(read_sheet_rows(source, sheet_name=sheet_name))
