"""
Tests for the ledger store and the audit logger.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from bizledger.audit import AuditLogger
from bizledger.models.audit import AuditEventBuilder, AuditEventType
from bizledger.models.finance import TransactionKind
from bizledger.state.store import LedgerStore


class TestLedgerStore:
    """Tests for LedgerStore."""

    def test_summary_follows_assignment(self, make_txn):
        store = LedgerStore()
        store.transactions = [make_txn("a", amount=10), make_txn("b", amount=4, kind=TransactionKind.EXPENSE)]
        assert store.summary.total_income == Decimal("10")
        assert store.summary.balance == Decimal("6")
        assert store.revision == 1

    def test_equal_assignment_is_not_a_change(self, make_txn):
        store = LedgerStore()
        rows = [make_txn("a")]
        store.transactions = rows
        summary = store.summary
        store.transactions = list(rows)
        assert store.revision == 1
        assert store.summary is summary

    def test_reads_are_copies(self, make_txn):
        store = LedgerStore()
        store.transactions = [make_txn("a")]
        store.transactions.append(make_txn("b"))
        assert len(store.transactions) == 1

    def test_stored_records_cannot_be_edited_in_place(self, make_txn):
        """The summary can only go stale through assignment, and that recomputes it."""
        store = LedgerStore()
        store.transactions = [make_txn("a", amount=100)]
        with pytest.raises(ValidationError):
            store.transactions[0].amount = Decimal("999")
        assert store.transactions[0].amount == Decimal("100")
        assert store.summary.total_income == Decimal("100")

    def test_categories_by_kind(self, categories):
        store = LedgerStore()
        store.set_categories(TransactionKind.INCOME, categories[:2])
        store.set_categories(TransactionKind.EXPENSE, categories[2:])
        assert store.find_category("cat-3", TransactionKind.EXPENSE).name == "Fuel"
        assert store.find_category("cat-3", TransactionKind.INCOME) is None
        assert [c.id for c in store.all_categories()] == ["cat-1", "cat-2", "cat-3", "cat-4"]


class TestAuditLogger:
    """Tests for AuditLogger."""

    @pytest.mark.asyncio
    async def test_events_are_kept(self):
        logger = AuditLogger()
        assert await logger.log(AuditEventBuilder.records_dropped(2, 5)) is True
        assert logger.events[0].event_type == AuditEventType.RECORDS_DROPPED

    @pytest.mark.asyncio
    async def test_event_history_is_bounded(self):
        logger = AuditLogger(max_events=3)
        for offset in range(5):
            await logger.log(AuditEventBuilder.page_loaded("income", offset, 1, True, reset=False))
        assert [e.details["offset"] for e in logger.events] == [2, 3, 4]

    @pytest.mark.asyncio
    async def test_log_remote_error(self):
        logger = AuditLogger()
        await logger.log_remote_error("list_categories", "offline", status_code=None)
        event = logger.events[-1]
        assert event.event_type == AuditEventType.REMOTE_ERROR
        assert event.error_message == "offline"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
