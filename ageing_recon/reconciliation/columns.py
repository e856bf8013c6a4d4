"""Column-role detection for source sheets and ageing row classification."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

# Logical column roles
ROLE_DATE = "date"
ROLE_DEBIT = "debit"
ROLE_CREDIT = "credit"
ROLE_AMOUNT = "amount"
ROLE_DESCRIPTION = "description"
ROLE_PARTY = "party"
ROLE_VOUCHER = "voucher"

TOTAL_MARKER = "Total"

# Role -> accepted header fragments. Role order matters:
# a header claimed by an earlier role is not offered to later ones.
LEDGER_LAYOUT: Dict[str, Tuple[str, ...]] = {
    ROLE_DATE: ("date", "time"),
    ROLE_VOUCHER: ("vh. no", "vh no", "voucher", "ref", "vh.type"),
    ROLE_DEBIT: ("debit", "withdrawal", "dr", "amount"),
    ROLE_CREDIT: ("credit", "deposit", "cr"),
    ROLE_PARTY: ("particulars", "party", "name", "narration", "description"),
}

STATEMENT_LAYOUT: Dict[str, Tuple[str, ...]] = {
    ROLE_DATE: ("date", "time"),
    ROLE_DEBIT: ("debit", "withdrawal", "dr"),
    ROLE_CREDIT: ("credit", "deposit", "cr"),
    ROLE_DESCRIPTION: ("description", "narration", "particulars", "details"),
    ROLE_VOUCHER: ("reference", "ref", "cheque", "voucher"),
}

# Ageing exports: References/party in A, date in C, amount in E.
AGEING_POSITIONS: Dict[str, int] = {ROLE_VOUCHER: 0, ROLE_DATE: 2, ROLE_AMOUNT: 4}

# Plain statement dumps: Date, Debit, Credit.
STATEMENT_POSITIONS: Dict[str, int] = {ROLE_DATE: 0, ROLE_DEBIT: 1, ROLE_CREDIT: 2}


def normalize_header(value: Any) -> str:
    """Lowercase + collapse whitespace."""
    if value is None:
        return ""
    return " ".join(str(value).lower().split())


def _fragment_matches(fragment: str, header: str) -> bool:
    # "dr"/"cr" only as whole words, otherwise "Description" reads as a credit column.
    if len(fragment) <= 2:
        return re.search(rf"\b{re.escape(fragment)}\b", header) is not None
    return fragment in header


@dataclass
class ColumnMap:
    """Resolved column per role; index into a row, or header key for records."""

    headers: List[str]
    indices: Dict[str, Optional[int]] = field(default_factory=dict)

    def index(self, role: str) -> Optional[int]:
        return self.indices.get(role)

    def header(self, role: str) -> Optional[str]:
        idx = self.indices.get(role)
        if idx is None or idx >= len(self.headers):
            return None
        return self.headers[idx]

    def value(self, row: Any, role: str) -> Any:
        """Cell for role from a list row or a keyed record; None when unresolved."""
        idx = self.indices.get(role)
        if idx is None:
            return None
        if isinstance(row, Mapping):
            key = self.header(role)
            return row.get(key) if key is not None else None
        if idx >= len(row):
            return None
        return row[idx]

    def resolved(self) -> Dict[str, Optional[str]]:
        return {role: self.header(role) for role in self.indices}


class ColumnStrategy:
    """Decides which column plays which role for a given header row."""

    def resolve(self, headers: Sequence[Any]) -> ColumnMap:
        raise NotImplementedError


class PositionalColumnStrategy(ColumnStrategy):
    """Fixed indices, headers ignored."""

    def __init__(self, positions: Mapping[str, int]):
        self.positions = dict(positions)

    def resolve(self, headers: Sequence[Any]) -> ColumnMap:
        return ColumnMap(
            headers=[str(h) if h is not None else "" for h in headers],
            indices=dict(self.positions),
        )


class HeaderColumnStrategy(ColumnStrategy):
    """
    Case-insensitive substring match of header names against per-role fragments.

    Headers are scanned in column order and the first one containing any of the
    role's fragments wins. Unresolved roles fall back to `positions` when given,
    even past the end of a trimmed header row.
    """

    def __init__(
        self,
        fragments: Mapping[str, Sequence[str]],
        positions: Optional[Mapping[str, int]] = None,
    ):
        self.fragments = {role: tuple(f.lower() for f in frags) for role, frags in fragments.items()}
        self.positions = dict(positions or {})

    def resolve(self, headers: Sequence[Any]) -> ColumnMap:
        normalized = [normalize_header(h) for h in headers]
        claimed: set[int] = set()
        indices: Dict[str, Optional[int]] = {}
        for role, frags in self.fragments.items():
            found: Optional[int] = None
            for i, header in enumerate(normalized):
                if i in claimed or not header:
                    continue
                if any(_fragment_matches(frag, header) for frag in frags):
                    found = i
                    break
            if found is None:
                pos = self.positions.get(role)
                if pos is not None and pos not in claimed:
                    found = pos
            if found is not None:
                claimed.add(found)
            indices[role] = found
        for role, pos in self.positions.items():
            indices.setdefault(role, pos)
        return ColumnMap(
            headers=[str(h) if h is not None else "" for h in headers],
            indices=indices,
        )


def record_headers(records: Sequence[Mapping[str, Any]]) -> List[str]:
    """Union of record keys in order of first appearance."""
    seen: Dict[str, None] = {}
    for rec in records:
        for key in rec.keys():
            seen.setdefault(key, None)
    return list(seen)


class RowKind(str, Enum):
    PARTY_HEADER = "party_header"
    DATA = "data"
    TOTAL = "total"
    BLANK = "blank"


def _has_value(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, float) and value != value:  # NaN
        return False
    return bool(value)


def classify_aging_row(row: Sequence[Any], date_col: int = AGEING_POSITIONS[ROLE_DATE]) -> RowKind:
    """
    Party header: no date, column 0 filled, no "Total" in column 0.
    Data: a date present and not a total row. Total: column 0 contains "Total".
    """
    if not row:
        return RowKind.BLANK
    col0 = row[0] if len(row) > 0 else None
    date_val = row[date_col] if len(row) > date_col else None
    is_total = _has_value(col0) and TOTAL_MARKER in str(col0)
    if is_total:
        return RowKind.TOTAL
    if _has_value(date_val):
        return RowKind.DATA
    if _has_value(col0):
        return RowKind.PARTY_HEADER
    return RowKind.BLANK
