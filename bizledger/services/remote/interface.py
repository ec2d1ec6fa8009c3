"""
Abstract Remote Store Interface

DESIGN DECISION: The state engine talks to the backing store only through
this interface. This allows us to:
1. Swap the REST API for another backend without touching the state engine
2. Use an in-memory store for testing
3. Keep response-shape ambiguity at the boundary, not in business logic

Every method either returns its documented value or raises a RemoteError.
"""

from abc import ABC, abstractmethod
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
from bizledger.models.mutation import UpdateResponse


class RemoteClient(ABC):
    """
    Abstract interface for the remote finance store.

    Any backend (REST API, in-memory fake) must implement these methods.
    """

    @abstractmethod
    async def list_transactions(
        self,
        kind: TransactionKind,
        limit: int,
        offset: int,
        search: Optional[str] = None,
        date_range: Optional[DateRange] = None,
    ) -> list[dict[str, Any]]:
        """
        List one page of transactions matching the filters.

        Args:
            kind: Only transactions of this kind
            limit: Maximum number of records
            offset: Number of matching records to skip
            search: Free-text search over descriptions
            date_range: Inclusive calendar-date bounds

        Returns:
            Raw records as the store sent them. Callers validate them.

        Raises:
            RemoteError: If the request fails
        """
        pass

    @abstractmethod
    async def create_transaction(self, draft: TransactionDraft) -> Transaction:
        """
        Create a transaction.

        Returns:
            The stored record, carrying its permanent id

        Raises:
            RemoteError: If the create fails
            MalformedResponseError: If the store's answer is not a transaction
        """
        pass

    @abstractmethod
    async def update_transaction(
        self,
        transaction_id: str,
        patch: TransactionPatch,
    ) -> UpdateResponse:
        """
        Apply a partial update.

        Returns:
            FullRecordResponse if the store echoed the whole record,
            PatchResponse if it echoed only the changed fields

        Raises:
            RemoteError: If the update fails
            NotFoundError: If the transaction doesn't exist
        """
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: str) -> None:
        """
        Delete a transaction.

        Raises:
            RemoteError: If the delete fails
        """
        pass

    @abstractmethod
    async def list_categories(self) -> list[Category]:
        """
        List all categories of both kinds.

        Malformed entries are skipped.
        """
        pass

    @abstractmethod
    async def create_category(self, draft: CategoryDraft) -> Category:
        """
        Create a category.

        Raises:
            RemoteError: If the create fails
        """
        pass

    @abstractmethod
    async def delete_category(self, category_id: str) -> None:
        """
        Delete a category. The store cascades to its transactions.

        Raises:
            RemoteError: If the delete fails
        """
        pass

    async def close(self) -> None:
        """Release any held connections."""
        return None


class RemoteError(Exception):
    """Base exception for remote store operations."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NotFoundError(RemoteError):
    """Entity not found in the remote store."""
    pass


class RemoteConnectionError(RemoteError):
    """Could not reach the remote store."""
    pass


class MalformedResponseError(RemoteError):
    """The remote store answered with something we cannot interpret."""
    pass
