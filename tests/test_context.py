"""
End-to-end tests for FinanceContext over the in-memory store.
"""

from datetime import date
from decimal import Decimal

import pytest

from bizledger.audit import AuditLogger
from bizledger.context import FinanceContext, create_finance_context
from bizledger.models.audit import AuditEventType
from bizledger.models.finance import (
    LoadStatus,
    TransactionDraft,
    TransactionKind,
    TransactionPatch,
)
from bizledger.services.remote import InMemoryRemoteClient, RemoteConnectionError


INCOME = TransactionKind.INCOME
EXPENSE = TransactionKind.EXPENSE


@pytest.fixture
def context(remote, app_settings):
    return FinanceContext(remote=remote, kind=INCOME, settings=app_settings)


class TestInitialState:
    """Tests for a freshly constructed context."""

    def test_starts_empty_with_zero_summary(self, context):
        assert context.transactions == []
        assert context.summary.total_income == 0
        assert context.summary.balance == 0
        assert context.income_categories == []
        assert context.has_more is False
        assert context.is_loading is False

    def test_factory_uses_given_remote(self, remote, app_settings):
        context = create_finance_context(remote=remote, kind=EXPENSE, settings=app_settings)
        assert context.remote is remote
        assert context.filters.kind == EXPENSE


class TestStart:
    """Tests for start() and category loading."""

    @pytest.mark.asyncio
    async def test_start_loads_categories_then_page(self, remote, context, make_txn):
        remote.transactions = [make_txn(str(i), amount=10) for i in range(4)]

        result = await context.start()

        assert result.status == LoadStatus.LOADED
        assert [c.id for c in context.income_categories] == ["cat-1", "cat-2"]
        assert [c.id for c in context.expense_categories] == ["cat-3", "cat-4"]
        assert len(context.transactions) == 3
        assert context.has_more is True
        assert context.summary.total_income == Decimal("30")
        assert [name for name, _ in remote.calls] == ["list_categories", "list_transactions"]

    @pytest.mark.asyncio
    async def test_category_failure_keeps_collections(self, remote, app_settings, categories):
        audit = AuditLogger()
        context = FinanceContext(remote=remote, settings=app_settings, audit_logger=audit)
        await context.load_categories()

        remote.categories = []
        remote.fail_next("list_categories", RemoteConnectionError("offline"))
        result = await context.load_categories()

        assert result.status == LoadStatus.FAILED
        assert len(context.income_categories) == 2
        assert audit.events[-1].event_type == AuditEventType.REMOTE_ERROR


class TestFlows:
    """Read and write flows through the context."""

    @pytest.mark.asyncio
    async def test_create_update_delete(self, context):
        await context.start()

        created = await context.create_transaction(
            TransactionDraft(category_id="cat-1", amount="100", date="2024-01-10", type="income")
        )
        new_id = created.result_id
        assert context.summary.total_income == Decimal("100")

        await context.update_transaction(new_id, TransactionPatch(amount="150"))
        assert context.summary.total_income == Decimal("150")

        await context.delete_transaction(new_id)
        assert context.transactions == []
        assert context.summary.total_income == 0

    @pytest.mark.asyncio
    async def test_set_filters_reloads(self, remote, context, make_txn):
        remote.transactions = [
            make_txn("i1"),
            make_txn("e1", kind=EXPENSE, category_id="cat-3"),
        ]
        await context.start()

        result = await context.set_filters(kind=EXPENSE)

        assert result.status == LoadStatus.LOADED
        assert context.filters.kind == EXPENSE
        assert [t.id for t in context.transactions] == ["e1"]
        assert context.summary.total_expense == Decimal("100")

    @pytest.mark.asyncio
    async def test_delete_category_cascades(self, remote, context, make_txn):
        remote.transactions = [
            make_txn("a", category_id="cat-1"),
            make_txn("b", category_id="cat-2"),
        ]
        await context.start()

        await context.delete_category("cat-1", INCOME)

        assert [c.id for c in context.income_categories] == ["cat-2"]
        assert [t.id for t in context.transactions] == ["b"]


class TestAnalytics:
    """Tests for the analytics views."""

    @pytest.mark.asyncio
    async def test_breakdown_and_trend(self, remote, context, make_txn):
        remote.transactions = [
            make_txn("a", amount=100, category_id="cat-1", day=date(2024, 1, 5)),
            make_txn("b", amount=50, category_id="cat-1", day=date(2024, 2, 5)),
        ]
        await context.start()

        breakdown = context.income_breakdown()
        assert [(c.id, amount) for c, amount in breakdown] == [("cat-1", Decimal("150"))]
        assert context.expense_breakdown() == []

        trend = context.monthly_trend()
        assert [p.month for p in trend] == ["2024-01", "2024-02"]
        assert trend[0].income == Decimal("100")

    @pytest.mark.asyncio
    async def test_trend_window_from_settings(self, remote, context, make_txn):
        remote.transactions = [make_txn(str(m), day=date(2023, m, 1)) for m in range(1, 4)]
        await context.start()
        assert len(context.monthly_trend(months=2)) == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
