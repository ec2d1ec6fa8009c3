"""
Local view filtering.

Narrows an already-loaded transaction sequence for display: by kind,
category, minimum amount and date range. Nothing here talks to the remote
store; server-side filtering is the pagination controller's job.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from bizledger.models.finance import DateRange, Transaction, TransactionKind
from bizledger.state.summary import ZERO, parse_amount


def filter_transactions(
    transactions: Iterable[Transaction],
    kind: Optional[TransactionKind] = None,
    category_id: Optional[str] = None,
    min_amount: Optional[Decimal] = None,
    date_range: Optional[DateRange] = None,
) -> list[Transaction]:
    """Return the transactions matching every given criterion, in order."""
    result = []
    for t in transactions:
        if kind is not None and t.kind != kind:
            continue
        if category_id is not None and t.category_id != category_id:
            continue
        if min_amount is not None and parse_amount(t.amount) < min_amount:
            continue
        if date_range is not None:
            day = t.transaction_date
            if not isinstance(day, date) or not date_range.contains(day):
                continue
        result.append(t)
    return result


def filtered_total(transactions: Iterable[Transaction]) -> Decimal:
    return sum((parse_amount(t.amount) for t in transactions), ZERO)


def sort_for_display(transactions: Iterable[Transaction], newest_first: bool = True) -> list[Transaction]:
    """
    Order by date for a table. Undated records go last.

    The loaded sequence itself keeps insertion order; this returns a copy.
    """
    transactions = list(transactions)
    dated = [t for t in transactions if isinstance(t.transaction_date, date)]
    undated = [t for t in transactions if not isinstance(t.transaction_date, date)]
    dated.sort(key=lambda t: t.transaction_date, reverse=newest_first)
    return dated + undated
