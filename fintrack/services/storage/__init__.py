"""
Storage Services Package

Provides the abstract store interface and concrete implementations.
Google Sheets is the remote backend; the in-memory store covers offline
use and tests.
"""

from fintrack.services.storage.interface import (
    DuplicateError,
    StoreConnectionError,
    StoreError,
    TransactionStoreInterface,
)
from fintrack.services.storage.memory import InMemoryTransactionStore
from fintrack.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsTransactionStore,
)

__all__ = [
    # Interface
    "TransactionStoreInterface",
    # Exceptions
    "DuplicateError",
    "StoreConnectionError",
    "StoreError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsTransactionStore",
    "InMemoryTransactionStore",
]
