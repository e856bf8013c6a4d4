"""Ledger vs bank statement comparison: pairing, day-by-day totals, drill-down."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, List, Sequence, Set

from ageing_recon.reconciliation.models import (
    CounterpartComparison,
    CounterpartMatch,
    DailyComparison,
    DateDrillDown,
    Transaction,
    TxnType,
)

logger = logging.getLogger(__name__)

BALANCE_TOLERANCE = 0.01
STATUS_MATCH = "MATCH"
STATUS_MISMATCH = "MISMATCH"


def _is_counterpart(ledger: Transaction, bank: Transaction, amount_tolerance: float) -> bool:
    """Same date, same amount, opposite sides (ledger debit = bank credit)."""
    return (
        ledger.date == bank.date
        and abs(bank.amount - ledger.amount) < amount_tolerance
        and bank.type == ledger.type.opposite
    )


def compare_counterparts(
    ledger: Sequence[Transaction],
    bank: Sequence[Transaction],
    amount_tolerance: float = BALANCE_TOLERANCE,
) -> CounterpartComparison:
    """
    One-to-one pairing of ledger entries with their bank mirror image.

    Ledger entries are taken from last to first, each claiming the first unused
    bank entry that mirrors it. Output lists keep input order.
    """
    used_bank: Set[int] = set()
    pairs: Dict[int, int] = {}
    for li in range(len(ledger) - 1, -1, -1):
        l_txn = ledger[li]
        for bi, b_txn in enumerate(bank):
            if bi in used_bank:
                continue
            if _is_counterpart(l_txn, b_txn, amount_tolerance):
                used_bank.add(bi)
                pairs[li] = bi
                break

    comparison = CounterpartComparison(
        matched=[CounterpartMatch(ledger=ledger[li], bank=bank[pairs[li]]) for li in sorted(pairs)],
        ledger_only=[t for li, t in enumerate(ledger) if li not in pairs],
        bank_only=[t for bi, t in enumerate(bank) if bi not in used_bank],
    )
    logger.info(
        "Ledger vs bank: matched=%d ledger_only=%d bank_only=%d",
        len(comparison.matched),
        len(comparison.ledger_only),
        len(comparison.bank_only),
    )
    return comparison


def _side_totals(txns: Sequence[Transaction]) -> Dict[str, Dict[TxnType, float]]:
    out: Dict[str, Dict[TxnType, float]] = defaultdict(lambda: {TxnType.DEBIT: 0.0, TxnType.CREDIT: 0.0})
    for t in txns:
        if not t.date:
            continue
        out[t.date][t.type] += t.amount
    return out


def daily_comparison(
    ledger: Sequence[Transaction],
    bank: Sequence[Transaction],
) -> List[DailyComparison]:
    """
    Per-date money in / out. Ledger debits are money in, bank credits are money in.
    A day is MATCH when ledger and bank net movements agree within 0.01.
    """
    ledger_by_day = _side_totals(ledger)
    bank_by_day = _side_totals(bank)
    rows: List[DailyComparison] = []
    for day in sorted(set(ledger_by_day) | set(bank_by_day)):
        l_tot = ledger_by_day[day]
        b_tot = bank_by_day[day]
        ledger_in, ledger_out = l_tot[TxnType.DEBIT], l_tot[TxnType.CREDIT]
        bank_in, bank_out = b_tot[TxnType.CREDIT], b_tot[TxnType.DEBIT]
        ledger_net = ledger_in - ledger_out
        bank_net = bank_in - bank_out
        balance_diff = ledger_net - bank_net
        rows.append(
            DailyComparison(
                date=day,
                ledger_in=ledger_in,
                bank_in=bank_in,
                diff_in=ledger_in - bank_in,
                ledger_out=ledger_out,
                bank_out=bank_out,
                diff_out=ledger_out - bank_out,
                ledger_net=ledger_net,
                bank_net=bank_net,
                daily_balance_diff=balance_diff,
                status=STATUS_MATCH if abs(balance_diff) < BALANCE_TOLERANCE else STATUS_MISMATCH,
            )
        )
    return rows


def drill_down(comparison: CounterpartComparison, day: str) -> DateDrillDown:
    """Unpaired entries of one date and the net amount they leave open."""
    missing_in_bank = [t for t in comparison.ledger_only if t.date == day]
    missing_in_ledger = [t for t in comparison.bank_only if t.date == day]

    duplicates: List[str] = []
    for t in missing_in_bank:
        for m in comparison.matched:
            if (
                m.ledger.date == t.date
                and abs(m.ledger.amount - t.amount) < BALANCE_TOLERANCE
                and m.ledger.type == t.type
            ):
                duplicates.append(t.id)
                break

    open_in_bank = sum(t.amount if t.type == TxnType.DEBIT else -t.amount for t in missing_in_bank)
    open_in_ledger = sum(t.amount if t.type == TxnType.CREDIT else -t.amount for t in missing_in_ledger)
    return DateDrillDown(
        date=day,
        missing_in_bank=missing_in_bank,
        missing_in_ledger=missing_in_ledger,
        duplicates=duplicates,
        net_difference=open_in_bank - open_in_ledger,
    )
