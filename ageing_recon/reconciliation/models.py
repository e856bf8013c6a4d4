"""Dataclasses for reconciliation: Transaction, MatchResult, ageing groups."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class TxnType(str, Enum):
    """Side of the book a transaction sits on."""

    DEBIT = "DEBIT"
    CREDIT = "CREDIT"

    @property
    def opposite(self) -> "TxnType":
        return TxnType.CREDIT if self is TxnType.DEBIT else TxnType.DEBIT


class MatchStatus(str, Enum):
    """Match outcome for a primary (ageing) item."""

    MATCHED = "Matched"
    PENDING = "Pending"


class MatchMethod(str, Enum):
    """Which pass produced a match."""

    PRIMARY_EXACT = "Primary (Exact)"  # same amount, same date
    SECONDARY_TOLERANCE = "Secondary (Tolerance)"  # same amount, date +/- 1 day


@dataclass(frozen=True)
class Transaction:
    """Canonical transaction built from one source row."""

    id: str
    date: str  # YYYY-MM-DD, or "" when unparseable
    amount: float
    type: TxnType
    party_name: str = ""
    description: str = ""
    voucher_no: Optional[str] = None
    source: str = ""
    row_index: int = -1


@dataclass
class MatchResult:
    """A primary transaction and what the matcher found for it."""

    transaction: Transaction
    status: MatchStatus = MatchStatus.PENDING
    match_method: Optional[MatchMethod] = None
    ledger_ref: Optional[str] = None  # id of the consumed counterpart
    corrected_voucher_no: Optional[str] = None  # voucher number copied from the counterpart

    @property
    def id(self) -> str:
        return self.transaction.id

    @property
    def date(self) -> str:
        return self.transaction.date

    @property
    def amount(self) -> float:
        return self.transaction.amount

    @property
    def type(self) -> TxnType:
        return self.transaction.type

    @property
    def party_name(self) -> str:
        return self.transaction.party_name

    @property
    def voucher_no(self) -> Optional[str]:
        return self.transaction.voucher_no

    @property
    def is_matched(self) -> bool:
        return self.status == MatchStatus.MATCHED


@dataclass
class ReconciliationSummary:
    """Counts and results of one reconciliation run."""

    matched_count: int = 0
    pending_count: int = 0
    total_amount_cleared: float = 0.0
    results: List[MatchResult] = field(default_factory=list)

    def matched_by_method(self) -> Dict[str, int]:
        counts: Dict[str, int] = {m.value: 0 for m in MatchMethod}
        for r in self.results:
            if r.match_method is not None:
                counts[r.match_method.value] += 1
        return counts

    def as_dict(self) -> Dict[str, Any]:
        return {
            "matched_count": self.matched_count,
            "pending_count": self.pending_count,
            "total_count": len(self.results),
            "total_amount_cleared": round(self.total_amount_cleared, 2),
            "matched_by_method": self.matched_by_method(),
        }


@dataclass
class AgeingInput:
    """One outstanding item fed to the ageing aggregator."""

    date: str
    party_name: str
    reference_no: str
    amount: float


@dataclass
class AgeingBill:
    reference: str
    date: str
    days: Optional[int]  # None when the date could not be parsed
    amount: float
    bucket_index: Optional[int]  # None when older than the last bucket or undated


@dataclass
class AgeingGroup:
    """All bills of one party with running totals."""

    party_name: str
    total_amount: float = 0.0
    bills: List[AgeingBill] = field(default_factory=list)
    bucket_totals: List[float] = field(default_factory=list)


@dataclass
class CounterpartMatch:
    """A ledger entry paired with the bank entry on the other side."""

    ledger: Transaction
    bank: Transaction


@dataclass
class CounterpartComparison:
    matched: List[CounterpartMatch] = field(default_factory=list)
    ledger_only: List[Transaction] = field(default_factory=list)  # missing in bank
    bank_only: List[Transaction] = field(default_factory=list)  # missing in ledger


@dataclass
class DailyComparison:
    """Day-level money-in / money-out totals of ledger vs bank."""

    date: str
    ledger_in: float
    bank_in: float
    diff_in: float
    ledger_out: float
    bank_out: float
    diff_out: float
    ledger_net: float
    bank_net: float
    daily_balance_diff: float
    status: str  # MATCH or MISMATCH


@dataclass
class DateDrillDown:
    date: str
    missing_in_bank: List[Transaction]
    missing_in_ledger: List[Transaction]
    duplicates: List[str]  # ids in missing_in_bank that mirror an already matched ledger entry
    net_difference: float
