"""Unit tests for two-pass ageing-to-ledger matching."""

from __future__ import annotations

import unittest
from typing import Optional

from ageing_recon.reconciliation.matcher import pending_results, reconcile, unmatched_secondary
from ageing_recon.reconciliation.models import MatchMethod, MatchStatus, Transaction, TxnType
from ageing_recon.reconciliation.normalize import normalize_date


def _txn(
    txn_id: str,
    date: str,
    amount: float,
    txn_type: TxnType = TxnType.DEBIT,
    voucher_no: Optional[str] = None,
) -> Transaction:
    return Transaction(id=txn_id, date=date, amount=amount, type=txn_type, voucher_no=voucher_no)


class TestReconcile(unittest.TestCase):
    def test_exact_match_copies_voucher(self) -> None:
        primary = [_txn("AD-1", "2025-01-10", 500)]
        secondary = [_txn("L-0", "2025-01-10", 500, TxnType.CREDIT, voucher_no="V1")]

        summary = reconcile(primary, secondary)
        result = summary.results[0]
        self.assertEqual(result.status, MatchStatus.MATCHED)
        self.assertEqual(result.match_method, MatchMethod.PRIMARY_EXACT)
        self.assertEqual(result.match_method.value, "Primary (Exact)")
        self.assertEqual(result.corrected_voucher_no, "V1")
        self.assertEqual(result.ledger_ref, "L-0")
        self.assertEqual(summary.total_amount_cleared, 500)

    def test_one_day_off_matches_in_tolerance_pass(self) -> None:
        summary = reconcile(
            [_txn("AD-1", "2025-01-10", 500)],
            [_txn("L-0", "2025-01-11", 500)],
        )
        self.assertEqual(summary.results[0].status, MatchStatus.MATCHED)
        self.assertEqual(summary.results[0].match_method, MatchMethod.SECONDARY_TOLERANCE)

    def test_two_days_off_stays_pending(self) -> None:
        summary = reconcile(
            [_txn("AD-1", "2025-01-10", 500)],
            [_txn("L-0", "2025-01-12", 500)],
        )
        self.assertEqual(summary.results[0].status, MatchStatus.PENDING)

    def test_amount_outside_tolerance_stays_pending(self) -> None:
        summary = reconcile(
            [_txn("AD-1", "2025-01-10", 500)],
            [_txn("L-0", "2025-01-10", 499)],
        )
        self.assertEqual(summary.results[0].status, MatchStatus.PENDING)
        self.assertIsNone(summary.results[0].match_method)
        self.assertEqual(summary.total_amount_cleared, 0)

    def test_amount_within_tolerance_matches(self) -> None:
        summary = reconcile(
            [_txn("AD-1", "2025-01-10", 500)],
            [_txn("L-0", "2025-01-10", 500.005)],
        )
        self.assertEqual(summary.matched_count, 1)

    def test_exact_pass_completes_before_tolerance_pass(self) -> None:
        # AD-1 could take L-0 by tolerance, but AD-2 claims it exactly first.
        primary = [_txn("AD-1", "2025-01-10", 500), _txn("AD-2", "2025-01-11", 500)]
        secondary = [_txn("L-0", "2025-01-11", 500)]

        summary = reconcile(primary, secondary)
        first, second = summary.results
        self.assertEqual(first.status, MatchStatus.PENDING)
        self.assertEqual(second.status, MatchStatus.MATCHED)
        self.assertEqual(second.match_method, MatchMethod.PRIMARY_EXACT)

    def test_exact_candidate_preferred_over_earlier_tolerance_candidate(self) -> None:
        primary = [_txn("AD-1", "2025-01-10", 500), _txn("AD-2", "2025-01-11", 500)]
        secondary = [_txn("L-0", "2025-01-11", 500), _txn("L-1", "2025-01-10", 500)]

        summary = reconcile(primary, secondary)
        self.assertEqual(summary.results[0].ledger_ref, "L-1")
        self.assertEqual(summary.results[1].ledger_ref, "L-0")
        self.assertEqual(
            [r.match_method for r in summary.results],
            [MatchMethod.PRIMARY_EXACT, MatchMethod.PRIMARY_EXACT],
        )

    def test_pool_entries_consumed_once(self) -> None:
        primary = [_txn(f"AD-{i}", "2025-01-10", 100) for i in range(3)]
        secondary = [_txn("L-0", "2025-01-10", 100), _txn("L-1", "2025-01-10", 100)]

        summary = reconcile(primary, secondary)
        refs = [r.ledger_ref for r in summary.results if r.ledger_ref is not None]
        self.assertEqual(len(refs), len(set(refs)))
        self.assertEqual(summary.matched_count, 2)
        self.assertEqual(summary.pending_count, 1)
        # Greedy first fit: earlier items take earlier pool entries.
        self.assertEqual(refs, ["L-0", "L-1"])

    def test_counts_add_up(self) -> None:
        primary = [
            _txn("AD-1", "2025-01-10", 500),
            _txn("AD-2", "2025-01-10", 250),
            _txn("AD-3", "2025-02-01", 75),
            _txn("AD-4", "", 10),
        ]
        secondary = [_txn("L-0", "2025-01-09", 250), _txn("L-1", "2025-01-10", 500)]

        summary = reconcile(primary, secondary)
        self.assertEqual(summary.matched_count + summary.pending_count, len(primary))
        self.assertEqual(summary.matched_count, 2)
        self.assertAlmostEqual(summary.total_amount_cleared, 750)
        self.assertEqual([r.id for r in pending_results(summary)], ["AD-3", "AD-4"])

    def test_inputs_reusable_across_runs(self) -> None:
        primary = [_txn("AD-1", "2025-01-10", 500)]
        secondary = [_txn("L-0", "2025-01-10", 500)]

        first = reconcile(primary, secondary)
        second = reconcile(primary, secondary)
        self.assertEqual(first.results[0].ledger_ref, "L-0")
        self.assertEqual(second.results[0].ledger_ref, "L-0")

    def test_rejected_dates_never_match(self) -> None:
        primary_date = normalize_date("02/04/2025", strict=True)
        secondary_date = normalize_date("03/05/2025", strict=True)
        self.assertEqual((primary_date, secondary_date), ("", ""))

        summary = reconcile([_txn("AD-1", primary_date, 500)], [_txn("L-0", secondary_date, 500)])
        result = summary.results[0]
        self.assertFalse(result.is_matched)
        self.assertEqual(result.status, MatchStatus.PENDING)
        self.assertIsNone(result.match_method)
        self.assertEqual(summary.matched_count, 0)
        self.assertEqual(summary.pending_count, 1)
        self.assertEqual(pending_results(summary), [result])

    def test_missing_dataset_raises(self) -> None:
        with self.assertRaises(ValueError):
            reconcile(None, [])
        with self.assertRaises(ValueError):
            reconcile([], None)

    def test_empty_inputs(self) -> None:
        summary = reconcile([], [_txn("L-0", "2025-01-10", 1)])
        self.assertEqual(summary.matched_count, 0)
        self.assertEqual(summary.pending_count, 0)
        self.assertEqual(summary.results, [])

    def test_unmatched_secondary_keeps_pool_order(self) -> None:
        secondary = [
            _txn("L-0", "2025-01-10", 1),
            _txn("L-1", "2025-01-10", 500),
            _txn("L-2", "2025-01-10", 2),
        ]
        summary = reconcile([_txn("AD-1", "2025-01-10", 500)], secondary)
        self.assertEqual([t.id for t in unmatched_secondary(summary, secondary)], ["L-0", "L-2"])

    def test_summary_as_dict(self) -> None:
        summary = reconcile(
            [_txn("AD-1", "2025-01-10", 500), _txn("AD-2", "2025-01-10", 20)],
            [_txn("L-0", "2025-01-11", 500)],
        )
        payload = summary.as_dict()
        self.assertEqual(payload["matched_count"], 1)
        self.assertEqual(payload["pending_count"], 1)
        self.assertEqual(payload["total_count"], 2)
        self.assertEqual(payload["total_amount_cleared"], 500)
        self.assertEqual(payload["matched_by_method"], {"Primary (Exact)": 0, "Secondary (Tolerance)": 1})


if __name__ == "__main__":
    unittest.main()
