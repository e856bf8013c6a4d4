"""
Ledger vs bank statement comparison.

Pairs each ledger entry with its mirror-image bank entry (same date and amount,
opposite side), then totals money in / out per day. With --date, also prints
the unpaired entries of that day and the net amount they leave open.
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

from ageing_recon.paths import RECON_REPORTS_DIR
from ageing_recon.reconciliation.config import configure_logging, parse_date_convention
from ageing_recon.reconciliation.counterpart import (
    STATUS_MISMATCH,
    compare_counterparts,
    daily_comparison,
    drill_down,
)
from ageing_recon.reconciliation.report_writer import (
    write_counterpart_lists,
    write_daily_comparison,
    write_summary_json,
)
from ageing_recon.reconciliation.sources import LEDGER_SOURCE, parse_statement_source
from ageing_recon.reconciliation.workbook import read_sheet_rows


RUN_LABEL = "ledger_to_bank"


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Compare a ledger export against a bank statement: pairs, daily totals, drill-down.",
    )
    p.add_argument("--ledger-file", type=Path, required=True, help="Ledger export with Debit/Credit columns.")
    p.add_argument("--bank-file", type=Path, required=True, help="Bank statement export with Debit/Credit columns.")
    p.add_argument(
        "--out-dir",
        type=Path,
        default=None,
        help="Base output directory (default: ageing_recon/reports/ledger_to_bank/).",
    )
    p.add_argument("--date", default=None, help="Drill into one date (YYYY-MM-DD).")
    p.add_argument("--date-convention", default="DMY", help="DMY (default) or MDY for slash dates.")
    p.add_argument("--sheet", default=None, help="Sheet name to read in both workbooks (default: first sheet).")
    p.add_argument("--log-level", default=None, help="Logging level (default: RECON_LOG_LEVEL or INFO).")
    return p.parse_args(argv)


def _print_drill_down(comparison, day: str) -> None:
    detail = drill_down(comparison, day)
    print(f"Drill-down {day}: net difference {detail.net_difference:,.2f}")
    for t in detail.missing_in_bank:
        flag = " (possible duplicate)" if t.id in detail.duplicates else ""
        print(f"  missing in bank:   {t.id} {t.type.value} {t.amount:,.2f} {t.party_name}{flag}")
    for t in detail.missing_in_ledger:
        print(f"  missing in ledger: {t.id} {t.type.value} {t.amount:,.2f} {t.description}")


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    configure_logging(args.log_level)

    try:
        day_first = parse_date_convention(args.date_convention)
        ledger_rows = read_sheet_rows(args.ledger_file, sheet_name=args.sheet)
        bank_rows = read_sheet_rows(args.bank_file, sheet_name=args.sheet)
    except (FileNotFoundError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    ledger = parse_statement_source(ledger_rows, source=LEDGER_SOURCE, day_first=day_first)
    bank = parse_statement_source(bank_rows, day_first=day_first)
    if not ledger or not bank:
        print("ERROR: Both the ledger and the bank statement need at least one transaction.", file=sys.stderr)
        return 1

    comparison = compare_counterparts(ledger, bank)
    days = daily_comparison(ledger, bank)

    output_dir = Path(args.out_dir).resolve() if args.out_dir is not None else RECON_REPORTS_DIR / RUN_LABEL
    write_counterpart_lists(comparison, output_dir)
    write_daily_comparison(days, output_dir / "daily_comparison.csv")
    mismatched = [d.date for d in days if d.status == STATUS_MISMATCH]
    write_summary_json(
        {
            "ledger_count": len(ledger),
            "bank_count": len(bank),
            "matched_count": len(comparison.matched),
            "missing_in_bank_count": len(comparison.ledger_only),
            "missing_in_ledger_count": len(comparison.bank_only),
            "mismatched_dates": mismatched,
        },
        output_dir / "comparison_summary.json",
    )

    print(f"Wrote ledger/bank comparison to {output_dir}")
    print(
        f"Matched: {len(comparison.matched)} | Missing in bank: {len(comparison.ledger_only)} | "
        f"Missing in ledger: {len(comparison.bank_only)} | Mismatched days: {len(mismatched)}"
    )
    if args.date:
        _print_drill_down(comparison, args.date)
    return 0


if __name__ == "__main__":
    sys.exit(main())
