"""Match ageing items to ledger entries (exact pass, then +/- 1 day tolerance pass)."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence, Set

from ageing_recon.reconciliation.models import (
    MatchMethod,
    MatchResult,
    MatchStatus,
    ReconciliationSummary,
    Transaction,
)
from ageing_recon.reconciliation.normalize import days_between

logger = logging.getLogger(__name__)

AMOUNT_TOLERANCE = 0.01
DATE_TOLERANCE_DAYS = 1

PoolPredicate = Callable[[Transaction, Transaction], bool]


def _first_unused(
    item: Transaction,
    pool: Sequence[Transaction],
    used_ids: Set[str],
    accept: PoolPredicate,
) -> Optional[Transaction]:
    """First pool entry (pool order) not yet consumed that `accept`s the item."""
    for entry in pool:
        if entry.id in used_ids:
            continue
        if accept(item, entry):
            return entry
    return None


def _mark_matched(
    result: MatchResult,
    entry: Transaction,
    method: MatchMethod,
    used_ids: Set[str],
    summary: ReconciliationSummary,
) -> None:
    used_ids.add(entry.id)
    result.status = MatchStatus.MATCHED
    result.match_method = method
    result.ledger_ref = entry.id
    result.corrected_voucher_no = entry.voucher_no
    summary.matched_count += 1
    summary.total_amount_cleared += result.amount


def _run_pass(
    summary: ReconciliationSummary,
    pool: Sequence[Transaction],
    used_ids: Set[str],
    accept: PoolPredicate,
    method: MatchMethod,
) -> int:
    hits = 0
    for result in summary.results:
        if result.is_matched:
            continue
        entry = _first_unused(result.transaction, pool, used_ids, accept)
        if entry is None:
            continue
        _mark_matched(result, entry, method, used_ids, summary)
        hits += 1
    return hits


def reconcile(
    primary: Optional[Sequence[Transaction]],
    secondary: Optional[Sequence[Transaction]],
    amount_tolerance: float = AMOUNT_TOLERANCE,
    date_tolerance_days: int = DATE_TOLERANCE_DAYS,
) -> ReconciliationSummary:
    """
    Two-pass, first-fit, one-to-one matching of `primary` items against the `secondary` pool.

    1) exact: amount within tolerance and identical, non-empty ISO date
    2) tolerance: amount within tolerance and dates at most `date_tolerance_days` apart

    Every pass-1 match is settled before pass 2 starts, and each pool entry is
    consumed at most once. The choice is greedy (first unused candidate in pool
    order), not a globally optimal assignment. Inputs are not modified; the
    consumed set lives only for this call.
    """
    if primary is None or secondary is None:
        raise ValueError("Both datasets are required for reconciliation (primary and secondary).")

    pool = list(secondary)
    used_ids: Set[str] = set()
    summary = ReconciliationSummary(results=[MatchResult(transaction=t) for t in primary])

    def amount_ok(item: Transaction, entry: Transaction) -> bool:
        return abs(entry.amount - item.amount) < amount_tolerance

    def exact(item: Transaction, entry: Transaction) -> bool:
        return amount_ok(item, entry) and bool(entry.date) and entry.date == item.date

    def tolerant(item: Transaction, entry: Transaction) -> bool:
        return amount_ok(item, entry) and days_between(entry.date, item.date) <= date_tolerance_days

    exact_hits = _run_pass(summary, pool, used_ids, exact, MatchMethod.PRIMARY_EXACT)
    tolerance_hits = _run_pass(summary, pool, used_ids, tolerant, MatchMethod.SECONDARY_TOLERANCE)
    summary.pending_count = sum(1 for r in summary.results if not r.is_matched)

    logger.info(
        "Reconciled %d item(s) against %d pool entr(ies): exact=%d tolerance=%d pending=%d cleared=%.2f",
        len(summary.results),
        len(pool),
        exact_hits,
        tolerance_hits,
        summary.pending_count,
        summary.total_amount_cleared,
    )
    return summary


def pending_results(summary: ReconciliationSummary) -> List[MatchResult]:
    return [r for r in summary.results if not r.is_matched]


def unmatched_secondary(
    summary: ReconciliationSummary,
    secondary: Sequence[Transaction],
) -> List[Transaction]:
    """Pool entries no result consumed, in pool order."""
    used = {r.ledger_ref for r in summary.results if r.ledger_ref is not None}
    return [t for t in secondary if t.id not in used]
