"""
Reconciliation utilities.

Ageing-to-ledger matching (exact then +/- 1 day), ledger-to-bank counterpart
comparison, and ageing bucket reports measured from a fixed report date.
"""

from ageing_recon.reconciliation.models import (
    AgeingGroup,
    AgeingInput,
    MatchMethod,
    MatchResult,
    MatchStatus,
    ReconciliationSummary,
    Transaction,
    TxnType,
)

__all__ = [
    "AgeingGroup",
    "AgeingInput",
    "MatchMethod",
    "MatchResult",
    "MatchStatus",
    "ReconciliationSummary",
    "Transaction",
    "TxnType",
]
