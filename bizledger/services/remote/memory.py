"""
In-Memory Remote Store

Implements the RemoteClient contract over plain lists. Used by the tests and
for running the state engine without a server.

Failures can be injected per operation with `fail_next(...)`, and
`gate(...)` holds an operation until the test releases it, which is how the
tests interleave completions with other work.
"""

import asyncio
from itertools import count
from typing import Any, Optional

from bizledger.models.finance import (
    Category,
    CategoryDraft,
    DateRange,
    Transaction,
    TransactionDraft,
    TransactionKind,
    TransactionPatch,
)
from bizledger.models.mutation import FullRecordResponse, PatchResponse, UpdateResponse
from bizledger.services.remote.interface import (
    NotFoundError,
    RemoteClient,
    RemoteError,
)


class InMemoryRemoteClient(RemoteClient):
    """
    A remote store that lives in the process.

    Args:
        transactions: Initial records (kept in insertion order)
        categories: Initial categories
        echo_full_record: Answer updates with the full record (True) or
            with the raw patch (False)
    """

    def __init__(
        self,
        transactions: Optional[list[Transaction]] = None,
        categories: Optional[list[Category]] = None,
        echo_full_record: bool = True,
    ):
        self.transactions: list[Transaction] = list(transactions or [])
        self.categories: list[Category] = list(categories or [])
        self.echo_full_record = echo_full_record
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.extra_records: list[Any] = []
        self._ids = count(1)
        self._failures: dict[str, list[RemoteError]] = {}
        self._gates: dict[str, asyncio.Event] = {}

    # -------------------------------------------------------------------------
    # Test controls
    # -------------------------------------------------------------------------

    def fail_next(self, operation: str, error: Optional[RemoteError] = None) -> None:
        """Make the next call of `operation` raise."""
        self._failures.setdefault(operation, []).append(
            error or RemoteError(f"{operation} failed", status_code=500)
        )

    def gate(self, operation: str) -> asyncio.Event:
        """Hold calls of `operation` until the returned event is set."""
        event = asyncio.Event()
        self._gates[operation] = event
        return event

    def release(self, operation: str) -> None:
        event = self._gates.pop(operation, None)
        if event is not None:
            event.set()

    async def _enter(self, operation: str, **arguments: Any) -> None:
        self.calls.append((operation, arguments))
        event = self._gates.get(operation)
        if event is not None:
            await event.wait()
        pending = self._failures.get(operation)
        if pending:
            raise pending.pop(0)

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def list_transactions(
        self,
        kind: TransactionKind,
        limit: int,
        offset: int,
        search: Optional[str] = None,
        date_range: Optional[DateRange] = None,
    ) -> list[dict[str, Any]]:
        await self._enter(
            "list_transactions",
            kind=kind,
            limit=limit,
            offset=offset,
            search=search,
            date_range=date_range,
        )
        matches = [t for t in self.transactions if t.kind == kind]
        if search:
            needle = search.lower()
            matches = [t for t in matches if needle in (t.description or "").lower()]
        if date_range is not None:
            matches = [t for t in matches if date_range.contains(t.transaction_date)]

        page = [t.to_wire() for t in matches[offset:offset + limit]]
        if self.extra_records:
            page.extend(self.extra_records)
            self.extra_records = []
        return page

    async def create_transaction(self, draft: TransactionDraft) -> Transaction:
        await self._enter("create_transaction", draft=draft)
        record = Transaction.from_draft(self._next_id("txn"), draft)
        self.transactions.append(record)
        return record

    async def update_transaction(
        self,
        transaction_id: str,
        patch: TransactionPatch,
    ) -> UpdateResponse:
        await self._enter("update_transaction", transaction_id=transaction_id, patch=patch)
        for index, record in enumerate(self.transactions):
            if record.id == transaction_id:
                updated = record.model_copy(update=patch.changes())
                self.transactions[index] = updated
                if self.echo_full_record:
                    return FullRecordResponse(record=updated)
                return PatchResponse(changes=patch.to_wire())
        raise NotFoundError(f"Transaction {transaction_id} not found", status_code=404)

    async def delete_transaction(self, transaction_id: str) -> None:
        await self._enter("delete_transaction", transaction_id=transaction_id)
        self.transactions = [t for t in self.transactions if t.id != transaction_id]

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def list_categories(self) -> list[Category]:
        await self._enter("list_categories")
        return list(self.categories)

    async def create_category(self, draft: CategoryDraft) -> Category:
        await self._enter("create_category", draft=draft)
        category = Category(id=self._next_id("cat"), **draft.model_dump())
        self.categories.append(category)
        return category

    async def delete_category(self, category_id: str) -> None:
        await self._enter("delete_category", category_id=category_id)
        self.categories = [c for c in self.categories if c.id != category_id]
        self.transactions = [t for t in self.transactions if t.category_id != category_id]
