"""Unit tests for amount/date normalization."""

from __future__ import annotations

import unittest
from datetime import date, datetime

from ageing_recon.reconciliation.models import TxnType
from ageing_recon.reconciliation.normalize import (
    MISSING_DATE_DAYS,
    amount_marker,
    days_between,
    is_ambiguous_date,
    normalize_amount,
    normalize_date,
    parse_iso_date,
)


class TestNormalizeAmount(unittest.TestCase):
    def test_strips_grouping_and_dr_cr_markers(self) -> None:
        self.assertEqual(normalize_amount("1,00,000.00 Dr."), 100000.0)
        self.assertEqual(normalize_amount("2,886.00 Cr."), 2886.0)
        self.assertEqual(normalize_amount("(2,886.00)"), 2886.0)

    def test_numbers_pass_through_and_are_stable(self) -> None:
        for value in (0, 12, 1500.5, 0.01):
            once = normalize_amount(value)
            self.assertEqual(once, float(value))
            self.assertEqual(normalize_amount(once), once)

    def test_junk_and_empty_become_zero(self) -> None:
        self.assertEqual(normalize_amount(None), 0.0)
        self.assertEqual(normalize_amount(""), 0.0)
        self.assertEqual(normalize_amount("n/a"), 0.0)
        self.assertEqual(normalize_amount(float("nan")), 0.0)

    def test_negative_text_keeps_sign(self) -> None:
        self.assertEqual(normalize_amount("-250.75"), -250.75)


class TestAmountMarker(unittest.TestCase):
    def test_trailing_marker_sets_side(self) -> None:
        self.assertEqual(amount_marker("500.00 Dr"), TxnType.DEBIT)
        self.assertEqual(amount_marker("2,886.00 Cr."), TxnType.CREDIT)

    def test_no_marker(self) -> None:
        self.assertIsNone(amount_marker("500.00"))
        self.assertIsNone(amount_marker(500))
        self.assertIsNone(amount_marker(None))


class TestNormalizeDate(unittest.TestCase):
    def test_iso_input_is_unchanged(self) -> None:
        for value in ("2025-01-10", "2024-02-29", "1999-12-31"):
            self.assertEqual(normalize_date(value), value)

    def test_serial_dates(self) -> None:
        # Serial 25569 is 1970-01-01.
        self.assertEqual(normalize_date(25569), "1970-01-01")
        self.assertEqual(normalize_date(45362), "2024-03-11")
        self.assertEqual(normalize_date(45385), "2024-04-03")
        self.assertEqual(normalize_date(45362.5), "2024-03-11")

    def test_slash_dates_follow_convention(self) -> None:
        self.assertEqual(normalize_date("10/01/2025"), "2025-01-10")
        self.assertEqual(normalize_date("10/01/2025", day_first=False), "2025-10-01")
        self.assertEqual(normalize_date("5/1/2025"), "2025-01-05")

    def test_year_first_slash_date(self) -> None:
        self.assertEqual(normalize_date("2025/1/5"), "2025-01-05")
        self.assertEqual(normalize_date("2025/1/5", day_first=False), "2025-01-05")

    def test_strict_rejects_only_ambiguous_dates(self) -> None:
        self.assertEqual(normalize_date("02/04/2025", strict=True), "")
        self.assertEqual(normalize_date("13/04/2025", strict=True), "2025-04-13")
        self.assertEqual(normalize_date("04/04/2025", strict=True), "2025-04-04")

    def test_datetime_values(self) -> None:
        self.assertEqual(normalize_date(datetime(2025, 1, 10, 9, 30)), "2025-01-10")
        self.assertEqual(normalize_date(date(2025, 1, 10)), "2025-01-10")

    def test_missing_and_free_text(self) -> None:
        self.assertEqual(normalize_date(None), "")
        self.assertEqual(normalize_date("   "), "")
        self.assertEqual(normalize_date("  Jan 10 "), "Jan 10")

    def test_zero_and_empty_cells_are_undated(self) -> None:
        self.assertEqual(normalize_date(0), "")
        self.assertEqual(normalize_date(0.0), "")
        self.assertEqual(normalize_date(""), "")

    def test_is_ambiguous_date(self) -> None:
        self.assertTrue(is_ambiguous_date("02/04/2025"))
        self.assertFalse(is_ambiguous_date("2025/02/04"))
        self.assertFalse(is_ambiguous_date("25/04/2025"))
        self.assertFalse(is_ambiguous_date(45362))


class TestDayArithmetic(unittest.TestCase):
    def test_parse_iso_date(self) -> None:
        self.assertEqual(parse_iso_date("2025-01-10"), date(2025, 1, 10))
        self.assertEqual(parse_iso_date("2025-01-10T08:00:00"), date(2025, 1, 10))
        self.assertIsNone(parse_iso_date("10/01/2025"))
        self.assertIsNone(parse_iso_date(""))

    def test_days_between_is_absolute(self) -> None:
        self.assertEqual(days_between("2025-01-10", "2025-01-11"), 1)
        self.assertEqual(days_between("2025-01-11", "2025-01-10"), 1)
        self.assertEqual(days_between("2025-01-10", "2025-01-10"), 0)

    def test_days_between_missing_date(self) -> None:
        self.assertEqual(days_between("", "2025-01-10"), MISSING_DATE_DAYS)
        self.assertEqual(days_between("Jan 10", "2025-01-10"), MISSING_DATE_DAYS)


if __name__ == "__main__":
    unittest.main()
