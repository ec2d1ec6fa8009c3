"""Shared fixtures: transaction/category factories and an in-memory store."""

from datetime import date
from decimal import Decimal

import pytest

from bizledger.config import AppSettings
from bizledger.models.finance import Category, Transaction, TransactionKind
from bizledger.services.remote import InMemoryRemoteClient


@pytest.fixture
def make_txn():
    """Build a Transaction with sensible defaults."""

    def _make(
        transaction_id: str,
        amount="100",
        kind: TransactionKind = TransactionKind.INCOME,
        category_id: str = "cat-1",
        day: date = date(2024, 1, 1),
        description=None,
    ) -> Transaction:
        return Transaction(
            id=transaction_id,
            amount=Decimal(str(amount)),
            kind=kind,
            category_id=category_id,
            transaction_date=day,
            description=description,
        )

    return _make


@pytest.fixture
def categories() -> list[Category]:
    return [
        Category(id="cat-1", name="Tuition", kind=TransactionKind.INCOME, icon="🎓"),
        Category(id="cat-2", name="Exams", kind=TransactionKind.INCOME, icon="📝"),
        Category(id="cat-3", name="Fuel", kind=TransactionKind.EXPENSE, icon="⛽"),
        Category(id="cat-4", name="Rent", kind=TransactionKind.EXPENSE, icon="🏠"),
    ]


@pytest.fixture
def remote(categories) -> InMemoryRemoteClient:
    return InMemoryRemoteClient(categories=categories)


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(page_size=3, temp_id_prefix="temp-", trend_months=6)
