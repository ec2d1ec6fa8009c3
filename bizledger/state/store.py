"""
Ledger Store

Owns the single transaction sequence and the two category collections.
The pagination controller and the mutation coordinator are the only writers.

The summary is rebuilt whenever an assignment actually changes the
transaction content, and at no other time.
"""

from typing import Optional, Sequence

from bizledger.models.finance import (
    Category,
    FinancialSummary,
    Transaction,
    TransactionKind,
)
from bizledger.state.summary import compute_summary


class LedgerStore:
    """Shared, locally cached view of the remote ledger."""

    def __init__(self):
        self._transactions: list[Transaction] = []
        self._summary = FinancialSummary()
        self._categories: dict[TransactionKind, list[Category]] = {
            TransactionKind.INCOME: [],
            TransactionKind.EXPENSE: [],
        }
        self.revision = 0

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    @property
    def transactions(self) -> list[Transaction]:
        return list(self._transactions)

    @transactions.setter
    def transactions(self, value: Sequence[Transaction]) -> None:
        new = list(value)
        if new == self._transactions:
            return
        self._transactions = new
        self._summary = compute_summary(new)
        self.revision += 1

    @property
    def summary(self) -> FinancialSummary:
        return self._summary

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    def categories(self, kind: TransactionKind) -> list[Category]:
        return list(self._categories[kind])

    def set_categories(self, kind: TransactionKind, categories: Sequence[Category]) -> None:
        self._categories[kind] = list(categories)

    @property
    def income_categories(self) -> list[Category]:
        return self.categories(TransactionKind.INCOME)

    @property
    def expense_categories(self) -> list[Category]:
        return self.categories(TransactionKind.EXPENSE)

    def all_categories(self) -> list[Category]:
        """Both collections concatenated, income first. For display lookups only."""
        return self.income_categories + self.expense_categories

    def find_category(self, category_id: str, kind: TransactionKind) -> Optional[Category]:
        for category in self._categories[kind]:
            if category.id == category_id:
                return category
        return None
