"""Write reconciliation CSV outputs, summary JSON and the formatted ageing workbook."""

from __future__ import annotations

import csv
import json
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from ageing_recon.reconciliation.ageing import AGEING_BUCKETS, AgeingBucket
from ageing_recon.reconciliation.models import (
    AgeingGroup,
    CounterpartComparison,
    DailyComparison,
    MatchResult,
    Transaction,
)

MATCH_LIST_FIELDS = [
    "id",
    "party_name",
    "date",
    "amount",
    "type",
    "status",
    "match_method",
    "ledger_ref",
    "voucher_no",
    "corrected_voucher_no",
]
TRANSACTION_FIELDS = ["id", "date", "type", "amount", "party_name", "description", "voucher_no", "source"]
DAILY_FIELDS = [
    "date",
    "ledger_in",
    "bank_in",
    "diff_in",
    "ledger_out",
    "bank_out",
    "diff_out",
    "ledger_net",
    "bank_net",
    "daily_balance_diff",
    "status",
]

AGEING_SHEET_TITLE = "Ageing Report"
AGEING_DEFAULT_TITLE = "AGEING REPORT"
AGEING_COLUMN_WIDTHS = [35, 15, 12, 8, 15, 15, 15, 15, 15]

_THIN = Side(style="thin")
_BORDER = Border(top=_THIN, bottom=_THIN, left=_THIN, right=_THIN)
_FONT = Font(name="Calibri")
_BOLD = Font(name="Calibri", bold=True)
_TITLE_FONT = Font(name="Calibri", bold=True, size=14)
_HEADER_FILL = PatternFill(fill_type="solid", fgColor="D9D9D9")
_CENTER = Alignment(horizontal="center", vertical="center")
_RIGHT = Alignment(horizontal="right")


def _write_rows(path: Path, fieldnames: List[str], rows: List[Dict[str, Any]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fieldnames, extrasaction="ignore")
        w.writeheader()
        w.writerows(rows)


def _txn_row(t: Transaction) -> Dict[str, Any]:
    return {
        "id": t.id,
        "date": t.date,
        "type": t.type.value,
        "amount": round(t.amount, 2),
        "party_name": t.party_name,
        "description": t.description,
        "voucher_no": t.voucher_no or "",
        "source": t.source,
    }


def write_match_list(results: Sequence[MatchResult], path: Path) -> None:
    """match_list.csv: one row per ageing item with its status and corrected voucher."""
    rows = [
        {
            "id": r.id,
            "party_name": r.party_name,
            "date": r.date,
            "amount": round(r.amount, 2),
            "type": r.type.value,
            "status": r.status.value,
            "match_method": r.match_method.value if r.match_method else "",
            "ledger_ref": r.ledger_ref or "",
            "voucher_no": r.voucher_no or "",
            "corrected_voucher_no": r.corrected_voucher_no or "-",
        }
        for r in results
    ]
    _write_rows(path, MATCH_LIST_FIELDS, rows)


def write_unmatched_ledger(entries: Sequence[Transaction], path: Path) -> None:
    """unmatched_ledger.csv: ledger entries no ageing item claimed."""
    _write_rows(path, TRANSACTION_FIELDS, [_txn_row(t) for t in entries])


def write_counterpart_lists(comparison: CounterpartComparison, out_dir: Path) -> Dict[str, Path]:
    """matched_pairs.csv, missing_in_bank.csv, missing_in_ledger.csv."""
    out_dir = Path(out_dir)
    paths = {
        "matched": out_dir / "matched_pairs.csv",
        "missing_in_bank": out_dir / "missing_in_bank.csv",
        "missing_in_ledger": out_dir / "missing_in_ledger.csv",
    }
    pair_rows = []
    for m in comparison.matched:
        pair_rows.append({
            "ledger_id": m.ledger.id,
            "bank_id": m.bank.id,
            "date": m.ledger.date,
            "amount": round(m.ledger.amount, 2),
            "ledger_type": m.ledger.type.value,
            "bank_type": m.bank.type.value,
            "ledger_party": m.ledger.party_name,
            "bank_description": m.bank.description,
        })
    _write_rows(
        paths["matched"],
        ["ledger_id", "bank_id", "date", "amount", "ledger_type", "bank_type", "ledger_party", "bank_description"],
        pair_rows,
    )
    _write_rows(paths["missing_in_bank"], TRANSACTION_FIELDS, [_txn_row(t) for t in comparison.ledger_only])
    _write_rows(paths["missing_in_ledger"], TRANSACTION_FIELDS, [_txn_row(t) for t in comparison.bank_only])
    return paths


def write_daily_comparison(days: Sequence[DailyComparison], path: Path) -> None:
    """daily_comparison.csv: in / out / net per date, ledger vs bank."""
    rows: List[Dict[str, Any]] = []
    for d in days:
        row: Dict[str, Any] = {"date": d.date, "status": d.status}
        for name in DAILY_FIELDS:
            if name in row:
                continue
            row[name] = round(getattr(d, name), 2)
        rows.append(row)
    _write_rows(path, DAILY_FIELDS, rows)


def write_summary_json(summary: Dict[str, Any], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2)


def _safe_party_name(party_name: str) -> str:
    cleaned = re.sub(r"[^a-zA-Z0-9 ]", "", party_name).strip()
    return re.sub(r"\s+", "_", cleaned)


def ageing_report_filename(groups: Sequence[AgeingGroup]) -> str:
    """<Party>_Ageing.xlsx for a single-party report, Ageing_Report.xlsx otherwise."""
    if len(groups) == 1:
        safe = _safe_party_name(groups[0].party_name)
        if safe:
            return f"{safe}_Ageing.xlsx"
    return "Ageing_Report.xlsx"


def _display_date(iso: str) -> str:
    try:
        return datetime.strptime(iso[:10], "%Y-%m-%d").strftime("%d/%m/%Y")
    except (TypeError, ValueError):
        return iso or ""


def _style_row(ws, row: int, width: int, font: Font, alignment: Alignment | None = None) -> None:
    for col in range(1, width + 1):
        cell = ws.cell(row=row, column=col)
        cell.font = font
        cell.border = _BORDER
        if alignment is not None:
            cell.alignment = alignment


def write_ageing_workbook(
    groups: Sequence[AgeingGroup],
    path: Path,
    buckets: Sequence[AgeingBucket] = AGEING_BUCKETS,
) -> Path:
    """
    Formatted ageing workbook. Layout per party:

      "<Party>#"      | party total |      |      |          |             ...
      <reference>     |             | date | days | bill amt | amt in its bucket column
      "<Party> Total" |             |      |      | total    | bucket totals ...
      (blank spacer row)

    The title row is the party name for a single-party report, "AGEING REPORT" otherwise.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    headers = ["References", "Tot. Amt", "Date", "Days", "Bill. Amt"] + [b.label for b in buckets]
    width = len(headers)

    wb = Workbook()
    ws = wb.active
    ws.title = AGEING_SHEET_TITLE

    ws.cell(row=1, column=1, value=groups[0].party_name if len(groups) == 1 else AGEING_DEFAULT_TITLE)
    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=width)
    ws.cell(row=1, column=1).font = _TITLE_FONT
    ws.cell(row=1, column=1).alignment = _CENTER

    for col, label in enumerate(headers, start=1):
        cell = ws.cell(row=2, column=col, value=label)
        cell.font = _BOLD
        cell.alignment = _CENTER
        cell.fill = _HEADER_FILL
        cell.border = _BORDER

    row = 3
    for g in groups:
        ws.cell(row=row, column=1, value=f"{g.party_name}#")
        ws.cell(row=row, column=2, value=round(g.total_amount, 2))
        _style_row(ws, row, width, _FONT)
        ws.cell(row=row, column=1).font = _BOLD
        ws.cell(row=row, column=2).font = _BOLD
        ws.cell(row=row, column=2).alignment = _RIGHT
        row += 1

        for bill in g.bills:
            ws.cell(row=row, column=1, value=bill.reference)
            ws.cell(row=row, column=3, value=_display_date(bill.date))
            ws.cell(row=row, column=4, value=bill.days)
            ws.cell(row=row, column=5, value=round(bill.amount, 2))
            if bill.bucket_index is not None and bill.bucket_index < len(buckets):
                ws.cell(row=row, column=6 + bill.bucket_index, value=round(bill.amount, 2))
            _style_row(ws, row, width, _FONT)
            ws.cell(row=row, column=3).alignment = _CENTER
            ws.cell(row=row, column=4).alignment = _CENTER
            row += 1

        ws.cell(row=row, column=1, value=f"{g.party_name} Total")
        ws.cell(row=row, column=5, value=round(g.total_amount, 2))
        for i, total in enumerate(g.bucket_totals[: len(buckets)]):
            ws.cell(row=row, column=6 + i, value=round(total, 2))
        _style_row(ws, row, width, _BOLD, _RIGHT)
        row += 2  # spacer

    for i, w in enumerate(AGEING_COLUMN_WIDTHS[:width], start=1):
        ws.column_dimensions[get_column_letter(i)].width = w

    wb.save(path)
    return path
