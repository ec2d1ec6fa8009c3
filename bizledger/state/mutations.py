"""
Optimistic Mutation Coordinator

Wraps writes against the remote store with speculative local changes:

- create: placeholder appended at once, swapped for the stored record on
  success, removed on failure
- update: applied only after the store confirms (no speculative change)
- delete: removed at once, the whole prior sequence restored on failure
- delete_category: applied after the store confirms, cascading to the
  category's transactions

Every call returns a MutationRecord in state CONFIRMED or ROLLED_BACK.
Remote failures are reported on the record, never raised. Writes are not
retried and are not ordered against each other.
"""

import time
from itertools import count
from typing import Optional

from pydantic import ValidationError

from bizledger.audit import AuditLogger
from bizledger.models.audit import AuditEvent, AuditEventBuilder
from bizledger.models.finance import (
    CategoryDraft,
    Transaction,
    TransactionDraft,
    TransactionKind,
    TransactionPatch,
)
from bizledger.models.mutation import (
    FullRecordResponse,
    MutationOperation,
    MutationRecord,
    PatchResponse,
)
from bizledger.services.remote import RemoteClient, RemoteError
from bizledger.state.reducer import (
    append,
    contains_id,
    merge_by_id,
    remove_by_category,
    remove_by_id,
    replace_by_id,
)
from bizledger.state.store import LedgerStore


class MutationCoordinator:
    """
    Applies writes to the local view and the remote store in the right order.
    """

    def __init__(
        self,
        remote: RemoteClient,
        store: LedgerStore,
        temp_id_prefix: str = "temp-",
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._remote = remote
        self._store = store
        self._temp_id_prefix = temp_id_prefix
        self._audit_logger = audit_logger
        self._sequence = count(1)

    async def _audit(self, event: AuditEvent) -> None:
        if self._audit_logger:
            await self._audit_logger.log(event)

    def new_temp_id(self) -> str:
        """
        A placeholder id that is not in the current set.

        Time-based with a per-coordinator counter, so two ids generated in
        the same nanosecond still differ.
        """
        while True:
            candidate = f"{self._temp_id_prefix}{time.time_ns()}-{next(self._sequence)}"
            if not contains_id(self._store.transactions, candidate):
                return candidate

    def is_temporary(self, transaction_id: str) -> bool:
        return transaction_id.startswith(self._temp_id_prefix)

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def create(self, draft: TransactionDraft) -> MutationRecord:
        """
        Show the transaction immediately, then confirm it with the store.
        """
        temp_id = self.new_temp_id()
        mutation = MutationRecord(
            operation=MutationOperation.CREATE_TRANSACTION,
            target_id=temp_id,
        )
        self._store.transactions = append(
            self._store.transactions,
            Transaction.from_draft(temp_id, draft),
        )

        try:
            created = await self._remote.create_transaction(draft)
        except RemoteError as e:
            self._store.transactions = remove_by_id(self._store.transactions, temp_id)
            mutation.roll_back(e.message)
            await self._audit(
                AuditEventBuilder.transaction_create_rolled_back(
                    temp_id, e.message, mutation.mutation_id
                )
            )
            return mutation

        current = self._store.transactions
        if created.id != temp_id and contains_id(current, created.id):
            # A page load already brought the stored record in
            current = replace_by_id(remove_by_id(current, temp_id), created.id, created)
        else:
            current = replace_by_id(current, temp_id, created)
        self._store.transactions = current

        mutation.confirm(created.id)
        await self._audit(
            AuditEventBuilder.transaction_created(
                temp_id, created.id, str(created.amount), mutation.mutation_id
            )
        )
        return mutation

    async def update(self, transaction_id: str, patch: TransactionPatch) -> MutationRecord:
        """
        Send the update and apply whatever the store confirms.

        A full record echo replaces the local record; a patch echo is merged
        into it.
        """
        mutation = MutationRecord(
            operation=MutationOperation.UPDATE_TRANSACTION,
            target_id=transaction_id,
        )

        try:
            response = await self._remote.update_transaction(transaction_id, patch)
        except RemoteError as e:
            mutation.roll_back(e.message)
            await self._audit(
                AuditEventBuilder.transaction_update_failed(
                    transaction_id, e.message, mutation.mutation_id
                )
            )
            return mutation

        if isinstance(response, FullRecordResponse):
            self._store.transactions = replace_by_id(
                self._store.transactions, transaction_id, response.record
            )
            result_id = response.record.id
            fields = sorted(patch.changes())
        else:
            changes = self._confirmed_changes(response, patch)
            self._store.transactions = merge_by_id(
                self._store.transactions, transaction_id, changes
            )
            result_id = transaction_id
            fields = sorted(changes)

        mutation.confirm(result_id)
        await self._audit(
            AuditEventBuilder.transaction_updated(
                transaction_id, response.variant, fields, mutation.mutation_id
            )
        )
        return mutation

    @staticmethod
    def _confirmed_changes(response: PatchResponse, sent: TransactionPatch) -> dict:
        """
        Field changes from a patch echo, typed like the model.

        Falls back to what was sent when the echo names no usable field.
        """
        try:
            changes = TransactionPatch.model_validate(response.changes).changes()
        except ValidationError:
            changes = {}
        return changes or sent.changes()

    async def delete(self, transaction_id: str) -> MutationRecord:
        """
        Remove the transaction at once; put everything back if the store refuses.
        """
        mutation = MutationRecord(
            operation=MutationOperation.DELETE_TRANSACTION,
            target_id=transaction_id,
        )
        prior = self._store.transactions
        self._store.transactions = remove_by_id(prior, transaction_id)

        try:
            await self._remote.delete_transaction(transaction_id)
        except RemoteError as e:
            self._store.transactions = prior
            mutation.roll_back(e.message)
            await self._audit(
                AuditEventBuilder.transaction_delete_rolled_back(
                    transaction_id, e.message, mutation.mutation_id
                )
            )
            return mutation

        mutation.confirm()
        await self._audit(
            AuditEventBuilder.transaction_deleted(transaction_id, mutation.mutation_id)
        )
        return mutation

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def create_category(self, draft: CategoryDraft) -> MutationRecord:
        mutation = MutationRecord(
            operation=MutationOperation.CREATE_CATEGORY,
            target_id=draft.name,
        )
        try:
            category = await self._remote.create_category(draft)
        except RemoteError as e:
            mutation.roll_back(e.message)
            await self._audit(
                AuditEventBuilder.category_write_failed(
                    None, "create", e.message, mutation.mutation_id
                )
            )
            return mutation

        existing = [c for c in self._store.categories(category.kind) if c.id != category.id]
        self._store.set_categories(category.kind, [*existing, category])

        mutation.confirm(category.id)
        await self._audit(
            AuditEventBuilder.category_created(
                category.id, category.name, category.kind.value, mutation.mutation_id
            )
        )
        return mutation

    async def delete_category(self, category_id: str, kind: TransactionKind) -> MutationRecord:
        """
        Delete a category and, locally, every transaction filed under it.
        """
        mutation = MutationRecord(
            operation=MutationOperation.DELETE_CATEGORY,
            target_id=category_id,
        )
        try:
            await self._remote.delete_category(category_id)
        except RemoteError as e:
            mutation.roll_back(e.message)
            await self._audit(
                AuditEventBuilder.category_write_failed(
                    category_id, "delete", e.message, mutation.mutation_id
                )
            )
            return mutation

        self._store.set_categories(
            kind,
            [c for c in self._store.categories(kind) if c.id != category_id],
        )
        before = self._store.transactions
        after = remove_by_category(before, category_id)
        self._store.transactions = after

        mutation.confirm()
        await self._audit(
            AuditEventBuilder.category_deleted(
                category_id, kind.value, len(before) - len(after), mutation.mutation_id
            )
        )
        return mutation
