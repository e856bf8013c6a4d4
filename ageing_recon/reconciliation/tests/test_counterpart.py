"""Unit tests for ledger vs bank counterpart comparison."""

from __future__ import annotations

import unittest

from ageing_recon.reconciliation.counterpart import (
    STATUS_MATCH,
    STATUS_MISMATCH,
    compare_counterparts,
    daily_comparison,
    drill_down,
)
from ageing_recon.reconciliation.models import Transaction, TxnType

DEBIT = TxnType.DEBIT
CREDIT = TxnType.CREDIT


def _txn(txn_id: str, date: str, amount: float, txn_type: TxnType) -> Transaction:
    return Transaction(id=txn_id, date=date, amount=amount, type=txn_type)


class TestCompareCounterparts(unittest.TestCase):
    def test_requires_opposite_sides(self) -> None:
        ledger = [
            _txn("L-0", "2025-01-10", 500, DEBIT),
            _txn("L-1", "2025-01-10", 200, CREDIT),
            _txn("L-2", "2025-01-11", 100, DEBIT),
        ]
        bank = [
            _txn("B-0", "2025-01-10", 500, CREDIT),
            _txn("B-1", "2025-01-10", 200, CREDIT),
            _txn("B-2", "2025-01-12", 50, DEBIT),
        ]

        result = compare_counterparts(ledger, bank)
        self.assertEqual([(m.ledger.id, m.bank.id) for m in result.matched], [("L-0", "B-0")])
        self.assertEqual([t.id for t in result.ledger_only], ["L-1", "L-2"])
        self.assertEqual([t.id for t in result.bank_only], ["B-1", "B-2"])

    def test_later_ledger_entries_claim_first(self) -> None:
        ledger = [_txn("L-0", "2025-01-10", 500, DEBIT), _txn("L-1", "2025-01-10", 500, DEBIT)]
        bank = [_txn("B-0", "2025-01-10", 500, CREDIT)]

        result = compare_counterparts(ledger, bank)
        self.assertEqual(result.matched[0].ledger.id, "L-1")
        self.assertEqual([t.id for t in result.ledger_only], ["L-0"])
        self.assertEqual(result.bank_only, [])

    def test_dates_must_be_equal(self) -> None:
        result = compare_counterparts(
            [_txn("L-0", "2025-01-10", 500, DEBIT)],
            [_txn("B-0", "2025-01-11", 500, CREDIT)],
        )
        self.assertEqual(result.matched, [])


class TestDailyComparison(unittest.TestCase):
    def test_balanced_and_unbalanced_days(self) -> None:
        ledger = [
            _txn("L-0", "2025-01-10", 500, DEBIT),
            _txn("L-1", "2025-01-11", 300, DEBIT),
            _txn("L-2", "2025-01-11", 100, CREDIT),
        ]
        bank = [
            _txn("B-0", "2025-01-10", 500, CREDIT),
            _txn("B-1", "2025-01-11", 300, CREDIT),
            _txn("B-2", "2025-01-12", 40, DEBIT),
        ]

        days = {d.date: d for d in daily_comparison(ledger, bank)}
        self.assertEqual(sorted(days), ["2025-01-10", "2025-01-11", "2025-01-12"])

        self.assertEqual(days["2025-01-10"].status, STATUS_MATCH)

        jan11 = days["2025-01-11"]
        self.assertEqual(jan11.ledger_in, 300)
        self.assertEqual(jan11.ledger_out, 100)
        self.assertEqual(jan11.bank_in, 300)
        self.assertEqual(jan11.bank_out, 0)
        self.assertEqual(jan11.diff_out, 100)
        self.assertEqual(jan11.daily_balance_diff, -100)
        self.assertEqual(jan11.status, STATUS_MISMATCH)

        jan12 = days["2025-01-12"]
        self.assertEqual(jan12.ledger_net, 0)
        self.assertEqual(jan12.bank_net, -40)
        self.assertEqual(jan12.status, STATUS_MISMATCH)

    def test_undated_entries_ignored(self) -> None:
        days = daily_comparison([_txn("L-0", "", 500, DEBIT)], [])
        self.assertEqual(days, [])


class TestDrillDown(unittest.TestCase):
    def test_open_items_and_duplicates(self) -> None:
        ledger = [_txn("L-0", "2025-01-10", 500, DEBIT), _txn("L-1", "2025-01-10", 500, DEBIT)]
        bank = [_txn("B-0", "2025-01-10", 500, CREDIT), _txn("B-1", "2025-01-10", 80, DEBIT)]
        comparison = compare_counterparts(ledger, bank)

        detail = drill_down(comparison, "2025-01-10")
        self.assertEqual([t.id for t in detail.missing_in_bank], ["L-0"])
        self.assertEqual([t.id for t in detail.missing_in_ledger], ["B-1"])
        self.assertEqual(detail.duplicates, ["L-0"])
        self.assertAlmostEqual(detail.net_difference, 580)

    def test_other_dates_are_excluded(self) -> None:
        comparison = compare_counterparts([_txn("L-0", "2025-01-10", 5, DEBIT)], [])
        detail = drill_down(comparison, "2025-01-11")
        self.assertEqual(detail.missing_in_bank, [])
        self.assertEqual(detail.net_difference, 0)


if __name__ == "__main__":
    unittest.main()
