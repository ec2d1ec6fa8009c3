"""
Transaction Set Reducer

Pure transformations over an ordered sequence of transactions. Insertion
order is the canonical order; sorting for display happens elsewhere.

Every function returns a new list, never mutates its input, runs in O(n)
and treats a missing id as a no-op rather than an error.
"""

from typing import Any, Mapping, Sequence, Union

from bizledger.models.finance import Transaction, TransactionPatch


def append(transactions: Sequence[Transaction], transaction: Transaction) -> list[Transaction]:
    """
    Add `transaction` at the end.

    No duplicate check: callers only append records with fresh ids.
    """
    return [*transactions, transaction]


def replace_by_id(
    transactions: Sequence[Transaction],
    transaction_id: str,
    replacement: Transaction,
) -> list[Transaction]:
    """
    Swap the record with `transaction_id` for `replacement`, keeping its position.

    `replacement` may carry a different id (temporary id promoted to a
    permanent one).
    """
    return [replacement if t.id == transaction_id else t for t in transactions]


def merge_by_id(
    transactions: Sequence[Transaction],
    transaction_id: str,
    patch: Union[TransactionPatch, Mapping[str, Any]],
) -> list[Transaction]:
    """
    Overwrite the fields named in `patch` on the record with `transaction_id`.

    The id itself is always kept. Keys that are not transaction fields are
    ignored.
    """
    if isinstance(patch, TransactionPatch):
        changes = patch.changes()
    else:
        changes = Transaction.field_changes(patch)

    if not changes:
        return list(transactions)
    return [
        t.model_copy(update=changes) if t.id == transaction_id else t
        for t in transactions
    ]


def remove_by_id(transactions: Sequence[Transaction], transaction_id: str) -> list[Transaction]:
    return [t for t in transactions if t.id != transaction_id]


def remove_by_category(transactions: Sequence[Transaction], category_id: str) -> list[Transaction]:
    """Drop every transaction filed under `category_id`."""
    return [t for t in transactions if t.category_id != category_id]


def dedupe_by_id(transactions: Sequence[Transaction]) -> list[Transaction]:
    """
    Keep one record per id.

    The last occurrence's value wins; it takes the position where the id
    first appeared.
    """
    by_id: dict[str, Transaction] = {}
    for t in transactions:
        by_id[t.id] = t
    return list(by_id.values())


def contains_id(transactions: Sequence[Transaction], transaction_id: str) -> bool:
    return any(t.id == transaction_id for t in transactions)
