"""
Abstract Transaction Store Interface

DESIGN DECISION: We define an abstract interface for the remote store.
This allows us to:
1. Swap Google Sheets for a hosted database later
2. Use in-memory storage for offline use and testing
3. Keep the state manager decoupled from any storage backend

Every call is scoped to an owner. The interface is intentionally small:
list, insert and delete are the only operations the tracker needs.
"""

from abc import ABC, abstractmethod

from fintrack.models.transaction import TransactionRecord


class TransactionStoreInterface(ABC):
    """
    Abstract interface for the remote transaction store.

    Implementations must wrap every backend failure in StoreError.
    """

    @abstractmethod
    async def list_transactions(self, owner_id: str) -> list[TransactionRecord]:
        """
        List every record owned by `owner_id`.

        Returns:
            Records sorted by date, newest first

        Raises:
            StoreError: On network or authorization failure
        """
        pass

    @abstractmethod
    async def insert_transaction(self, record: TransactionRecord) -> None:
        """
        Persist a new record.

        Raises:
            DuplicateError: If a record with the same id exists
            StoreError: On any other failure
        """
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: str, owner_id: str) -> None:
        """
        Delete a record matching both id and owner.

        Deleting an absent id succeeds without doing anything.

        Raises:
            StoreError: If the delete fails
        """
        pass


class StoreError(Exception):
    """Base exception for remote store operations."""
    pass


class DuplicateError(StoreError):
    """Attempted to insert a record whose id already exists."""
    pass


class StoreConnectionError(StoreError):
    """Could not connect to the storage backend."""
    pass
