"""
Pagination / Fetch Controller

Loads transactions from the remote store one offset-based page at a time.

GUARANTEES:
- At most one list request is outstanding; a second call while one is in
  flight is skipped, not queued
- A failed fetch leaves the loaded sequence and `has_more` untouched
- Records without an id or an amount never reach the local view
- A page fetched for filters that have since changed is discarded, and the
  reload for the new filters runs once that fetch has finished

`has_more` is true when a page comes back full. A collection whose size is
an exact multiple of the page size therefore costs one extra, empty fetch.
"""

from typing import Any, Mapping, Optional, Sequence

from pydantic import ValidationError

from bizledger.audit import AuditLogger
from bizledger.models.audit import AuditEvent, AuditEventBuilder
from bizledger.models.finance import (
    FilterParams,
    LoadResult,
    LoadStatus,
    Transaction,
    TransactionKind,
)
from bizledger.services.remote import RemoteClient, RemoteError
from bizledger.state.reducer import dedupe_by_id
from bizledger.state.store import LedgerStore


def validate_records(
    records: Sequence[Any],
    kind: TransactionKind,
) -> list[Transaction]:
    """
    Turn raw list records into transactions, dropping malformed ones.

    A record needs at least an id and an amount. Records that omit their
    kind take the kind that was requested.
    """
    page = []
    for record in records:
        if not isinstance(record, Mapping):
            continue
        if record.get("id") in (None, "") or record.get("amount") is None:
            continue
        data = dict(record)
        if "type" not in data and "kind" not in data:
            data["type"] = kind.value
        try:
            page.append(Transaction.model_validate(data))
        except ValidationError:
            continue
    return page


class PaginationController:
    """
    Incremental loader for the transaction list of one filter set.
    """

    def __init__(
        self,
        remote: RemoteClient,
        store: LedgerStore,
        filters: FilterParams,
        page_size: int,
        audit_logger: Optional[AuditLogger] = None,
    ):
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self._remote = remote
        self._store = store
        self._filters = filters
        self._page_size = page_size
        self._audit_logger = audit_logger

        self._has_more = False
        self._in_flight = False
        self._generation = 0
        self._reload_pending = False

    @property
    def filters(self) -> FilterParams:
        return self._filters

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def is_loading(self) -> bool:
        return self._in_flight

    async def _audit(self, event: AuditEvent) -> None:
        if self._audit_logger:
            await self._audit_logger.log(event)

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def load_page(self, reset: bool = False) -> LoadResult:
        """
        Fetch the next page, or the first page again when `reset` is True.

        If the filters changed while this fetch was in flight, its page is
        dropped and the reload for the new filters runs before returning;
        the result returned is then the reload's.
        """
        if self._in_flight:
            return LoadResult(status=LoadStatus.SKIPPED, has_more=self._has_more)

        self._in_flight = True
        try:
            result = await self._fetch(reset)
        finally:
            self._in_flight = False

        if self._reload_pending:
            self._reload_pending = False
            return await self.load_page(reset=True)
        return result

    async def load_more(self) -> LoadResult:
        """Fetch the next page if the store may have more."""
        if not self._has_more:
            return LoadResult(status=LoadStatus.SKIPPED, has_more=False)
        return await self.load_page(reset=False)

    async def _fetch(self, reset: bool) -> LoadResult:
        generation = self._generation
        filters = self._filters
        offset = 0 if reset else len(self._store.transactions)

        try:
            records = await self._remote.list_transactions(
                kind=filters.kind,
                limit=self._page_size,
                offset=offset,
                search=filters.search,
                date_range=filters.date_range,
            )
        except RemoteError as e:
            if generation != self._generation:
                return await self._discard(generation, offset)
            await self._audit(
                AuditEventBuilder.page_load_failed(filters.kind.value, offset, e.message)
            )
            return LoadResult(
                status=LoadStatus.FAILED,
                offset=offset,
                has_more=self._has_more,
                error_message=e.message,
            )

        if generation != self._generation:
            return await self._discard(generation, offset)

        page = validate_records(records, filters.kind)
        if len(page) < len(records):
            await self._audit(AuditEventBuilder.records_dropped(len(records) - len(page), len(records)))

        has_more = len(page) == self._page_size
        if reset:
            self._store.transactions = dedupe_by_id(page)
        else:
            self._store.transactions = dedupe_by_id([*self._store.transactions, *page])
        self._has_more = has_more

        await self._audit(
            AuditEventBuilder.page_loaded(filters.kind.value, offset, len(page), has_more, reset)
        )
        return LoadResult(
            status=LoadStatus.LOADED,
            offset=offset,
            received=len(records),
            accepted=len(page),
            has_more=has_more,
        )

    async def _discard(self, generation: int, offset: int) -> LoadResult:
        await self._audit(AuditEventBuilder.stale_page_discarded(generation, self._generation))
        return LoadResult(status=LoadStatus.STALE, offset=offset, has_more=self._has_more)

    # -------------------------------------------------------------------------
    # Filters
    # -------------------------------------------------------------------------

    async def set_filters(self, filters: FilterParams) -> Optional[LoadResult]:
        """
        Replace the active filters and reload from the first page.

        Returns None when nothing changed. When a fetch is in flight the
        reload is deferred until it completes, and SKIPPED is returned here.
        """
        if filters == self._filters:
            return None

        self._filters = filters
        self._generation += 1
        date_range = None
        if filters.date_range is not None:
            date_range = f"{filters.date_range.start}..{filters.date_range.end}"
        await self._audit(
            AuditEventBuilder.filters_changed(filters.kind.value, filters.search, date_range)
        )

        if self._in_flight:
            self._reload_pending = True
            return LoadResult(status=LoadStatus.SKIPPED, has_more=self._has_more)
        return await self.load_page(reset=True)

    async def update_filters(self, **changes: Any) -> Optional[LoadResult]:
        """
        Change individual filter fields (kind, search, date_range).

        Usage:
            await controller.update_filters(search="rent")
            await controller.update_filters(date_range=None)
        """
        data = {
            "kind": self._filters.kind,
            "search": self._filters.search,
            "date_range": self._filters.date_range,
        }
        data.update(changes)
        return await self.set_filters(FilterParams.model_validate(data))
