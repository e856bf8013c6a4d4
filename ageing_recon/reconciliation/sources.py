"""Build canonical transactions from ageing lists, ledgers and bank statements."""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Sequence, Union

from ageing_recon.reconciliation.columns import (
    AGEING_POSITIONS,
    LEDGER_LAYOUT,
    ROLE_AMOUNT,
    ROLE_CREDIT,
    ROLE_DATE,
    ROLE_DEBIT,
    ROLE_DESCRIPTION,
    ROLE_PARTY,
    ROLE_VOUCHER,
    STATEMENT_LAYOUT,
    STATEMENT_POSITIONS,
    ColumnStrategy,
    HeaderColumnStrategy,
    PositionalColumnStrategy,
    RowKind,
    classify_aging_row,
    record_headers,
)
from ageing_recon.reconciliation.models import Transaction, TxnType
from ageing_recon.reconciliation.normalize import amount_marker, normalize_amount, normalize_date

logger = logging.getLogger(__name__)

AGEING_SOURCE = "AD"
LEDGER_SOURCE = "L"
STATEMENT_SOURCE = "BANK"

UNKNOWN_PARTY = "Unknown"
LEDGER_PARTY_PLACEHOLDER = "Ledger Entry"
NO_DESCRIPTION = "No Description"

RowMatrix = Sequence[Sequence[Any]]
KeyedRows = Sequence[Mapping[str, Any]]


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value != value:
        return ""
    return str(value).strip()


def build_transaction(
    source: str,
    row_index: int,
    date_raw: Any,
    debit_raw: Any = None,
    credit_raw: Any = None,
    party_name: str = "",
    description: str = "",
    voucher_no: Optional[str] = None,
    day_first: bool = True,
    strict_dates: bool = False,
    type_override: Optional[TxnType] = None,
) -> Optional[Transaction]:
    """
    Debit wins when positive, otherwise credit. Returns None for amount <= 0.
    """
    debit = normalize_amount(debit_raw)
    credit = normalize_amount(credit_raw)
    amount = debit if debit > 0 else credit
    if amount <= 0:
        return None
    txn_type = TxnType.DEBIT if debit > 0 else TxnType.CREDIT
    if type_override is not None:
        txn_type = type_override
    return Transaction(
        id=f"{source}-{row_index}",
        date=normalize_date(date_raw, day_first=day_first, strict=strict_dates),
        amount=amount,
        type=txn_type,
        party_name=party_name,
        description=description,
        voucher_no=voucher_no or None,
        source=source,
        row_index=row_index,
    )


def parse_aging_source(
    rows: RowMatrix,
    day_first: bool = True,
    strict_dates: bool = False,
    strategy: Optional[ColumnStrategy] = None,
) -> List[Transaction]:
    """
    Parse an ageing (age-due) export laid out as party blocks.

    Row 0 is the header. A party header row sets the current party until the
    next one; total rows are skipped and leave the party unchanged. Column 0
    of a data row is its voucher reference.
    """
    if not rows:
        return []
    columns = (strategy or PositionalColumnStrategy(AGEING_POSITIONS)).resolve(rows[0])
    date_col = columns.index(ROLE_DATE)
    if date_col is None:
        date_col = AGEING_POSITIONS[ROLE_DATE]

    transactions: List[Transaction] = []
    current_party = ""
    skipped = 0
    for i in range(1, len(rows)):
        row = rows[i]
        kind = classify_aging_row(row, date_col=date_col)
        if kind == RowKind.PARTY_HEADER:
            current_party = _text(row[0])
            continue
        if kind != RowKind.DATA:
            continue
        amount_raw = columns.value(row, ROLE_AMOUNT)
        txn = build_transaction(
            AGEING_SOURCE,
            i,
            date_raw=columns.value(row, ROLE_DATE),
            debit_raw=amount_raw,
            party_name=current_party or UNKNOWN_PARTY,
            voucher_no=_text(columns.value(row, ROLE_VOUCHER)) or None,
            day_first=day_first,
            strict_dates=strict_dates,
            type_override=amount_marker(amount_raw),
        )
        if txn is None:
            skipped += 1
            continue
        transactions.append(txn)
    logger.info("Parsed ageing source: %d transaction(s), %d zero/invalid row(s) skipped", len(transactions), skipped)
    return transactions


def parse_ledger_source(
    records: KeyedRows,
    day_first: bool = True,
    strict_dates: bool = False,
    strategy: Optional[ColumnStrategy] = None,
) -> List[Transaction]:
    """Parse keyed ledger rows (header -> value) into transactions."""
    if not records:
        return []
    columns = (strategy or HeaderColumnStrategy(LEDGER_LAYOUT)).resolve(record_headers(records))
    logger.debug("Ledger columns resolved: %s", columns.resolved())

    transactions: List[Transaction] = []
    for index, record in enumerate(records):
        voucher = _text(columns.value(record, ROLE_VOUCHER))
        txn = build_transaction(
            LEDGER_SOURCE,
            index,
            date_raw=columns.value(record, ROLE_DATE),
            debit_raw=columns.value(record, ROLE_DEBIT),
            credit_raw=columns.value(record, ROLE_CREDIT),
            party_name=_text(columns.value(record, ROLE_PARTY)) or LEDGER_PARTY_PLACEHOLDER,
            voucher_no=voucher or None,
            day_first=day_first,
            strict_dates=strict_dates,
        )
        if txn is not None:
            transactions.append(txn)
    logger.info(
        "Parsed ledger source: %d transaction(s) from %d row(s)",
        len(transactions),
        len(records),
    )
    return transactions


def parse_statement_source(
    rows: Union[RowMatrix, KeyedRows],
    source: str = STATEMENT_SOURCE,
    day_first: bool = True,
    strict_dates: bool = False,
    strategy: Optional[ColumnStrategy] = None,
) -> List[Transaction]:
    """
    Parse a bank statement (or a ledger exported the same way) with Debit/Credit columns.

    Accepts a matrix whose first row is the header, or keyed records. Matrix
    headers that cannot be recognised fall back to Date, Debit, Credit by position.
    """
    if not rows:
        return []
    if isinstance(rows[0], Mapping):
        headers = record_headers(rows)  # type: ignore[arg-type]
        body = list(rows)
    else:
        headers = list(rows[0])
        body = list(rows[1:])
    columns = (strategy or HeaderColumnStrategy(STATEMENT_LAYOUT, positions=STATEMENT_POSITIONS)).resolve(headers)
    logger.debug("Statement columns resolved: %s", columns.resolved())

    transactions: List[Transaction] = []
    for offset, row in enumerate(body):
        if not row:
            continue
        description = _text(columns.value(row, ROLE_DESCRIPTION))
        txn = build_transaction(
            source,
            offset,
            date_raw=columns.value(row, ROLE_DATE),
            debit_raw=columns.value(row, ROLE_DEBIT),
            credit_raw=columns.value(row, ROLE_CREDIT),
            description=description or NO_DESCRIPTION,
            voucher_no=_text(columns.value(row, ROLE_VOUCHER)) or None,
            day_first=day_first,
            strict_dates=strict_dates,
        )
        if txn is not None:
            transactions.append(txn)
    logger.info("Parsed %s statement: %d transaction(s) from %d row(s)", source, len(transactions), len(body))
    return transactions
