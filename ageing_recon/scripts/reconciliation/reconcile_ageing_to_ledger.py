"""
Ageing list vs ledger reconciliation.

Process:
1) Read the ageing export (party blocks) and the ledger export (xlsx or csv).
2) Match each ageing item to one ledger entry: exact date first, then +/- 1 day.
3) Write the match list, unmatched ledger entries and a summary JSON.
4) Build the ageing report (buckets measured from --report-date) as a formatted workbook.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

# Ensure repo root on path when run as script.
_REPO_ROOT = Path(__file__).resolve().parents[3]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from ageing_recon.reconciliation.ageing import (
    ageing_inputs_from_results,
    ageing_totals,
    build_aging_report,
)
from ageing_recon.reconciliation.config import (
    DATE_CONVENTION_MDY,
    configure_logging,
    load_reconciliation_config,
)
from ageing_recon.reconciliation.matcher import reconcile, unmatched_secondary
from ageing_recon.reconciliation.report_writer import (
    ageing_report_filename,
    write_ageing_workbook,
    write_match_list,
    write_summary_json,
    write_unmatched_ledger,
)
from ageing_recon.reconciliation.sources import parse_aging_source, parse_ledger_source
from ageing_recon.reconciliation.workbook import read_sheet_records, read_sheet_rows


RUN_LABEL = "ageing_to_ledger"


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Reconcile an ageing (age-due) export against a ledger export and build an ageing report.",
    )
    p.add_argument("--ageing-file", type=Path, required=True, help="Ageing export (.xlsx or .csv).")
    p.add_argument("--ledger-file", type=Path, required=True, help="Ledger export (.xlsx or .csv).")
    p.add_argument(
        "--report-date",
        default=None,
        help="Date ages are measured from, YYYY-MM-DD (default: RECON_REPORT_DATE).",
    )
    p.add_argument(
        "--out-dir",
        type=Path,
        default=None,
        help="Base output directory (default: RECON_OUT_DIR or ageing_recon/reports/).",
    )
    p.add_argument(
        "--month-first",
        action="store_true",
        help="Read slash dates as MM/DD/YYYY instead of DD/MM/YYYY.",
    )
    p.add_argument(
        "--strict-dates",
        action="store_true",
        default=None,
        help="Leave dates whose day and month are both <= 12 unparsed instead of guessing.",
    )
    p.add_argument("--sheet", default=None, help="Sheet name to read in both workbooks (default: first sheet).")
    p.add_argument(
        "--matched-only",
        action="store_true",
        help="Build the ageing report from matched items only (default: all ageing items).",
    )
    p.add_argument("--log-level", default=None, help="Logging level (default: RECON_LOG_LEVEL or INFO).")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    configure_logging(args.log_level)

    try:
        cfg = load_reconciliation_config(
            report_date=args.report_date,
            date_convention=DATE_CONVENTION_MDY if args.month_first else None,
            strict_dates=args.strict_dates,
            out_dir=args.out_dir,
            sheet_name=args.sheet,
        )
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    try:
        ageing_rows = read_sheet_rows(args.ageing_file, sheet_name=cfg.sheet_name)
        ledger_records = read_sheet_records(args.ledger_file, sheet_name=cfg.sheet_name)
    except (FileNotFoundError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    ageing = parse_aging_source(ageing_rows, day_first=cfg.day_first, strict_dates=cfg.strict_dates)
    ledger = parse_ledger_source(ledger_records, day_first=cfg.day_first, strict_dates=cfg.strict_dates)
    if not ageing or not ledger:
        if not ageing:
            print(f"ERROR: No ageing items found in {args.ageing_file}.", file=sys.stderr)
        if not ledger:
            print(f"ERROR: No ledger entries found in {args.ledger_file}.", file=sys.stderr)
        return 1

    summary = reconcile(
        ageing,
        ledger,
        amount_tolerance=cfg.amount_tolerance,
        date_tolerance_days=cfg.date_tolerance_days,
    )
    unmatched = unmatched_secondary(summary, ledger)

    groups = build_aging_report(
        ageing_inputs_from_results(summary.results, matched_only=args.matched_only),
        cfg.report_date,
    )

    output_dir = cfg.output_dir_for(RUN_LABEL)
    write_match_list(summary.results, output_dir / "match_list.csv")
    write_unmatched_ledger(unmatched, output_dir / "unmatched_ledger.csv")
    workbook_path = write_ageing_workbook(groups, output_dir / ageing_report_filename(groups))

    payload = summary.as_dict()
    payload.update({
        "report_date": cfg.report_date.isoformat(),
        "date_convention": cfg.date_convention,
        "ageing_item_count": len(ageing),
        "ledger_entry_count": len(ledger),
        "unmatched_ledger_count": len(unmatched),
        "ageing": ageing_totals(groups),
    })
    write_summary_json(payload, output_dir / "reconciliation_summary.json")

    print(f"Wrote reconciliation reports to {output_dir}")
    print(
        f"Matched: {summary.matched_count} | Pending: {summary.pending_count} | "
        f"Cleared: {summary.total_amount_cleared:,.2f}"
    )
    print(f"Ageing report: {workbook_path.name} ({len(groups)} part{'y' if len(groups) == 1 else 'ies'})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
