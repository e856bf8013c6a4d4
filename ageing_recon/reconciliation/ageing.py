"""Group outstanding items by party and bucket them by age against a report date."""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Iterable, List, NamedTuple, Optional, Sequence, Union

from ageing_recon.reconciliation.models import (
    AgeingBill,
    AgeingGroup,
    AgeingInput,
    MatchResult,
    MatchStatus,
)
from ageing_recon.reconciliation.normalize import parse_iso_date

logger = logging.getLogger(__name__)


class AgeingBucket(NamedTuple):
    label: str
    min_days: int
    max_days: int


# Inclusive day ranges, checked in order.
AGEING_BUCKETS: tuple[AgeingBucket, ...] = (
    AgeingBucket("1 To 30 Days", 1, 30),
    AgeingBucket("31 To 60 Days", 31, 60),
    AgeingBucket("61 To 120 Days", 61, 120),
    AgeingBucket("121 To 360 Days", 121, 360),
)


def bucket_index(days: Optional[int], buckets: Sequence[AgeingBucket] = AGEING_BUCKETS) -> Optional[int]:
    """Index of the first bucket containing `days`; None past the last bucket, for 0 or undated."""
    if days is None:
        return None
    for i, b in enumerate(buckets):
        if b.min_days <= days <= b.max_days:
            return i
    return None


def _as_report_date(report_date: Union[date, str]) -> date:
    parsed = parse_iso_date(report_date)
    if parsed is None:
        raise ValueError(f"Invalid report date: {report_date!r} (expected YYYY-MM-DD)")
    return parsed


def build_aging_report(
    records: Iterable[AgeingInput],
    report_date: Union[date, str],
    sort_parties: bool = True,
    buckets: Sequence[AgeingBucket] = AGEING_BUCKETS,
) -> List[AgeingGroup]:
    """
    One group per party: every record becomes a bill, adds to the party total,
    and adds to its bucket's total when it falls in one.

    `report_date` is the fixed point ages are measured from; records with an
    unparseable date keep days=None and count only towards the party total.
    """
    as_of = _as_report_date(report_date)
    groups: Dict[str, AgeingGroup] = {}
    skipped = 0
    for rec in records:
        if not rec.party_name:
            skipped += 1
            continue
        group = groups.get(rec.party_name)
        if group is None:
            group = AgeingGroup(party_name=rec.party_name, bucket_totals=[0.0] * len(buckets))
            groups[rec.party_name] = group

        rec_date = parse_iso_date(rec.date)
        days = (as_of - rec_date).days if rec_date is not None else None
        idx = bucket_index(days, buckets)

        group.total_amount += rec.amount
        if idx is not None:
            group.bucket_totals[idx] += rec.amount
        group.bills.append(
            AgeingBill(
                reference=rec.reference_no,
                date=rec.date,
                days=days,
                amount=rec.amount,
                bucket_index=idx,
            )
        )

    out = list(groups.values())
    if sort_parties:
        out.sort(key=lambda g: g.party_name)
    if skipped:
        logger.warning("Ageing report skipped %d record(s) without a party name", skipped)
    return out


def ageing_inputs_from_results(
    results: Iterable[MatchResult],
    matched_only: bool = False,
) -> List[AgeingInput]:
    """Reshape match results for the ageing report; reference prefers the corrected voucher."""
    out: List[AgeingInput] = []
    for r in results:
        if matched_only and r.status != MatchStatus.MATCHED:
            continue
        out.append(
            AgeingInput(
                date=r.date,
                party_name=r.party_name,
                reference_no=r.corrected_voucher_no or r.voucher_no or "",
                amount=r.amount,
            )
        )
    return out


def ageing_totals(groups: Sequence[AgeingGroup], bucket_count: int = len(AGEING_BUCKETS)) -> Dict[str, object]:
    """Grand total and column totals across all parties."""
    bucket_totals = [0.0] * bucket_count
    for g in groups:
        for i, v in enumerate(g.bucket_totals[:bucket_count]):
            bucket_totals[i] += v
    return {
        "party_count": len(groups),
        "bill_count": sum(len(g.bills) for g in groups),
        "total_amount": round(sum(g.total_amount for g in groups), 2),
        "bucket_totals": [round(v, 2) for v in bucket_totals],
        "unbucketed_amount": round(
            sum(b.amount for g in groups for b in g.bills if b.bucket_index is None), 2
        ),
    }
