"""Normalize raw spreadsheet cells into canonical amounts and ISO dates."""

from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime, timedelta
from typing import Any, Optional

from ageing_recon.reconciliation.models import TxnType

logger = logging.getLogger(__name__)

# Spreadsheet day 0 is 1899-12-30; serial 25569 is 1970-01-01.
SERIAL_EPOCH_OFFSET = 25569
_UNIX_EPOCH = datetime(1970, 1, 1)

# Returned by days_between when either side has no usable date.
MISSING_DATE_DAYS = 999

_DR_CR_MARKER = re.compile(r"\s*\b(dr|cr)\b\.?", re.IGNORECASE)
_TRAILING_MARKER = re.compile(r"\d\s*(dr|cr)\.?\s*$", re.IGNORECASE)
_NON_NUMERIC = re.compile(r"[^\d.\-]")
_LEADING_FLOAT = re.compile(r"^[-+]?(\d+\.?\d*|\.\d+)")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def normalize_amount(raw: Any) -> float:
    """
    "1,00,000.00 Dr." -> 100000.0, "2,886.00 Cr." -> 2886.0, junk -> 0.0.

    Numbers pass through unchanged. Never raises.
    """
    if _is_number(raw):
        if isinstance(raw, float) and math.isnan(raw):
            return 0.0
        return float(raw)
    if not raw:
        return 0.0
    text = str(raw).replace(",", "")
    text = _DR_CR_MARKER.sub("", text)
    text = _NON_NUMERIC.sub("", text)
    m = _LEADING_FLOAT.match(text)
    if not m:
        return 0.0
    try:
        return float(m.group(0))
    except ValueError:
        return 0.0


def amount_marker(raw: Any) -> Optional[TxnType]:
    """Dr/Cr suffix of a raw amount string, if any."""
    if raw is None or _is_number(raw):
        return None
    m = _TRAILING_MARKER.search(str(raw).strip())
    if not m:
        return None
    return TxnType.DEBIT if m.group(1).lower() == "dr" else TxnType.CREDIT


def _serial_to_iso(serial: float) -> str:
    millis = round((serial - SERIAL_EPOCH_OFFSET) * 86400 * 1000)
    return (_UNIX_EPOCH + timedelta(milliseconds=millis)).strftime("%Y-%m-%d")


def _split_slash_date(text: str) -> Optional[tuple[str, str, str]]:
    parts = [p.strip() for p in text.split("/")]
    if len(parts) != 3:
        return None
    return parts[0], parts[1], parts[2]


def is_ambiguous_date(raw: Any) -> bool:
    """
    True for slash dates like 02/04/2025 where day and month could swap.
    """
    if not isinstance(raw, str) or "/" not in raw:
        return False
    parts = _split_slash_date(raw.strip())
    if parts is None or len(parts[0]) == 4:
        return False
    try:
        first, second = int(parts[0]), int(parts[1])
    except ValueError:
        return False
    return first <= 12 and second <= 12 and first != second


def normalize_date(raw: Any, day_first: bool = True, strict: bool = False) -> str:
    """
    Convert a cell to YYYY-MM-DD.

    Numbers are spreadsheet serials. Slash strings are YYYY/MM/DD when the
    first part has four characters, otherwise DD/MM/YYYY (MM/DD/YYYY when
    day_first is False). With strict=True, dates where day and month could
    be swapped are rejected as "". Empty or zero cells give "". Other strings
    come back trimmed.
    """
    if not raw:
        return ""
    if isinstance(raw, datetime):
        return raw.strftime("%Y-%m-%d")
    if isinstance(raw, date):
        return raw.isoformat()
    if _is_number(raw):
        if isinstance(raw, float) and math.isnan(raw):
            return ""
        try:
            return _serial_to_iso(float(raw))
        except OverflowError:
            return ""
    text = str(raw).strip()
    if not text:
        return ""
    if "/" in text:
        parts = _split_slash_date(text)
        if parts is None:
            return text
        if len(parts[0]) == 4:
            year, month, day = parts
        else:
            if strict and is_ambiguous_date(text):
                logger.warning("Rejecting ambiguous date %r (day/month order unknown)", text)
                return ""
            if day_first:
                day, month, year = parts
            else:
                month, day, year = parts
        return f"{year}-{month.zfill(2)}-{day.zfill(2)}"
    return text


def parse_iso_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return datetime.strptime(str(value).strip()[:10], "%Y-%m-%d").date()
    except ValueError:
        return None


def days_between(a: str, b: str) -> int:
    """Absolute calendar-day difference; MISSING_DATE_DAYS if either is unusable."""
    da = parse_iso_date(a)
    db = parse_iso_date(b)
    if da is None or db is None:
        return MISSING_DATE_DAYS
    return abs((da - db).days)
