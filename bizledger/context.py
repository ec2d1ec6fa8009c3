"""
Finance Context

The one object every screen reads from. It ties together:
1. The ledger store (transactions, categories, summary)
2. The pagination controller (reads)
3. The mutation coordinator (writes)
4. The audit logger

DESIGN DECISION: The context is constructed once and passed by reference.
It starts empty with a zero summary; nothing is fetched until `start()`.
Consumers read through it and write only through its methods.
"""

from decimal import Decimal
from typing import Any, Optional

from bizledger.audit import AuditLogger
from bizledger.config import AppSettings, get_settings
from bizledger.models.audit import AuditEventBuilder
from bizledger.models.finance import (
    Category,
    CategoryDraft,
    FilterParams,
    FinancialSummary,
    LoadResult,
    LoadStatus,
    MonthlyTrendPoint,
    Transaction,
    TransactionDraft,
    TransactionKind,
    TransactionPatch,
)
from bizledger.models.mutation import MutationRecord
from bizledger.services.remote import HttpRemoteClient, RemoteClient, RemoteError
from bizledger.state.mutations import MutationCoordinator
from bizledger.state.pagination import PaginationController
from bizledger.state.store import LedgerStore
from bizledger.state.summary import category_breakdown, monthly_trend


class FinanceContext:
    """
    Shared finance data for one organization and one transaction kind view.
    """

    def __init__(
        self,
        remote: RemoteClient,
        kind: TransactionKind = TransactionKind.INCOME,
        settings: Optional[AppSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._settings = settings or get_settings().app
        self.remote = remote
        self.audit_logger = audit_logger or AuditLogger()
        self.store = LedgerStore()
        self.pagination = PaginationController(
            remote=remote,
            store=self.store,
            filters=FilterParams(kind=kind),
            page_size=self._settings.page_size,
            audit_logger=self.audit_logger,
        )
        self.mutations = MutationCoordinator(
            remote=remote,
            store=self.store,
            temp_id_prefix=self._settings.temp_id_prefix,
            audit_logger=self.audit_logger,
        )

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    @property
    def transactions(self) -> list[Transaction]:
        return self.store.transactions

    @property
    def summary(self) -> FinancialSummary:
        return self.store.summary

    @property
    def income_categories(self) -> list[Category]:
        return self.store.income_categories

    @property
    def expense_categories(self) -> list[Category]:
        return self.store.expense_categories

    @property
    def filters(self) -> FilterParams:
        return self.pagination.filters

    @property
    def has_more(self) -> bool:
        return self.pagination.has_more

    @property
    def is_loading(self) -> bool:
        return self.pagination.is_loading

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def start(self) -> LoadResult:
        """Load categories, then the first page of transactions."""
        await self.load_categories()
        return await self.pagination.load_page(reset=True)

    async def load_categories(self) -> LoadResult:
        """
        Replace both category collections with the store's.

        On failure the current collections are kept.
        """
        try:
            categories = await self.remote.list_categories()
        except RemoteError as e:
            await self.audit_logger.log_remote_error(
                operation="list_categories",
                error_message=e.message,
                status_code=e.status_code,
            )
            return LoadResult(status=LoadStatus.FAILED, error_message=e.message)

        for kind in TransactionKind:
            self.store.set_categories(kind, [c for c in categories if c.kind == kind])
        await self.audit_logger.log(
            AuditEventBuilder.categories_loaded(
                len(self.store.income_categories),
                len(self.store.expense_categories),
            )
        )
        return LoadResult(
            status=LoadStatus.LOADED,
            received=len(categories),
            accepted=len(categories),
        )

    async def load_page(self, reset: bool = False) -> LoadResult:
        return await self.pagination.load_page(reset=reset)

    async def load_more(self) -> LoadResult:
        return await self.pagination.load_more()

    async def set_filters(self, **changes: Any) -> Optional[LoadResult]:
        """Change kind, search or date_range; reloads on any change."""
        return await self.pagination.update_filters(**changes)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def create_transaction(self, draft: TransactionDraft) -> MutationRecord:
        return await self.mutations.create(draft)

    async def update_transaction(
        self,
        transaction_id: str,
        patch: TransactionPatch,
    ) -> MutationRecord:
        return await self.mutations.update(transaction_id, patch)

    async def delete_transaction(self, transaction_id: str) -> MutationRecord:
        return await self.mutations.delete(transaction_id)

    async def create_category(self, draft: CategoryDraft) -> MutationRecord:
        return await self.mutations.create_category(draft)

    async def delete_category(self, category_id: str, kind: TransactionKind) -> MutationRecord:
        return await self.mutations.delete_category(category_id, kind)

    # -------------------------------------------------------------------------
    # Analytics
    # -------------------------------------------------------------------------

    def income_breakdown(self) -> list[tuple[Category, Decimal]]:
        return category_breakdown(self.income_categories, self.summary.income_by_category)

    def expense_breakdown(self) -> list[tuple[Category, Decimal]]:
        return category_breakdown(self.expense_categories, self.summary.expense_by_category)

    def monthly_trend(self, months: Optional[int] = None) -> list[MonthlyTrendPoint]:
        return monthly_trend(self.transactions, months or self._settings.trend_months)

    async def close(self) -> None:
        await self.remote.close()


def create_finance_context(
    remote: Optional[RemoteClient] = None,
    kind: TransactionKind = TransactionKind.INCOME,
    settings: Optional[AppSettings] = None,
) -> FinanceContext:
    """
    Factory function to create the finance context.

    Args:
        remote: Remote store to use. Defaults to the REST API configured
                in the environment.
        kind: Transaction kind the list view starts on
        settings: Application settings; loaded from the environment if omitted

    Returns:
        A context with empty collections and a zero summary
    """
    if remote is None:
        remote = HttpRemoteClient()
    return FinanceContext(remote=remote, kind=kind, settings=settings)
