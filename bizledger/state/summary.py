"""
Summary Aggregator

Derives totals and chart-ready series from a transaction sequence.

DESIGN DECISION: An amount can reach this module as a Decimal, a number or
a string, since a merged patch is not re-validated. Anything that does not
parse counts as zero.
"""

from collections import defaultdict
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping, Optional, Sequence

from bizledger.models.finance import (
    Category,
    FinancialSummary,
    MonthlyTrendPoint,
    Transaction,
    TransactionKind,
)


ZERO = Decimal("0")


def parse_amount(value: Any) -> Decimal:
    """
    Convert an amount in any plausible representation to a Decimal.

    Returns zero for None, booleans, NaN/infinity and unparseable text.
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return ZERO
    if not amount.is_finite():
        return ZERO
    return amount


def _kind_of(transaction: Transaction) -> Optional[TransactionKind]:
    kind = transaction.kind
    if isinstance(kind, TransactionKind):
        return kind
    try:
        return TransactionKind(kind)
    except ValueError:
        return None


def compute_summary(transactions: Iterable[Transaction]) -> FinancialSummary:
    """
    Build the financial summary of `transactions` in a single pass.

    Each transaction only counts towards the per-category map of its own kind.
    """
    total_income = ZERO
    total_expense = ZERO
    income_by_category: dict[str, Decimal] = defaultdict(lambda: ZERO)
    expense_by_category: dict[str, Decimal] = defaultdict(lambda: ZERO)

    for t in transactions:
        amount = parse_amount(t.amount)
        kind = _kind_of(t)
        if kind == TransactionKind.INCOME:
            total_income += amount
            income_by_category[t.category_id] += amount
        elif kind == TransactionKind.EXPENSE:
            total_expense += amount
            expense_by_category[t.category_id] += amount

    return FinancialSummary(
        total_income=total_income,
        total_expense=total_expense,
        balance=total_income - total_expense,
        income_by_category=dict(income_by_category),
        expense_by_category=dict(expense_by_category),
    )


def category_breakdown(
    categories: Sequence[Category],
    by_category: Mapping[str, Decimal],
) -> list[tuple[Category, Decimal]]:
    """
    Pair each category with its total, in category order.

    Categories with nothing booked against them are left out, as are totals
    whose category no longer exists.
    """
    rows = []
    for category in categories:
        amount = by_category.get(category.id, ZERO)
        if amount > 0:
            rows.append((category, amount))
    return rows


def category_share(amount: Decimal, total: Decimal) -> Decimal:
    """Percentage of `total` that `amount` represents (0 when total is 0)."""
    if total == 0:
        return ZERO
    return (amount / total * 100).quantize(Decimal("0.1"))


def monthly_trend(
    transactions: Iterable[Transaction],
    months: int = 6,
) -> list[MonthlyTrendPoint]:
    """
    Income and expense per calendar month, oldest first.

    Only the latest `months` months that have any transactions are returned.
    Undated transactions are skipped.
    """
    buckets: dict[str, MonthlyTrendPoint] = {}
    for t in transactions:
        day = t.transaction_date
        if not isinstance(day, date):
            continue
        key = day.strftime("%Y-%m")
        point = buckets.setdefault(key, MonthlyTrendPoint(month=key))
        amount = parse_amount(t.amount)
        kind = _kind_of(t)
        if kind == TransactionKind.INCOME:
            point.income += amount
        elif kind == TransactionKind.EXPENSE:
            point.expense += amount

    if months <= 0:
        return []
    return [buckets[key] for key in sorted(buckets)[-months:]]
