"""Services package."""

from fintrack.services.identity import (
    IdentityProviderInterface,
    LocalIdentityProvider,
)
from fintrack.services.storage import (
    DuplicateError,
    GoogleSheetsClient,
    GoogleSheetsTransactionStore,
    InMemoryTransactionStore,
    StoreConnectionError,
    StoreError,
    TransactionStoreInterface,
)

__all__ = [
    # Identity
    "IdentityProviderInterface",
    "LocalIdentityProvider",
    # Storage
    "DuplicateError",
    "GoogleSheetsClient",
    "GoogleSheetsTransactionStore",
    "InMemoryTransactionStore",
    "StoreConnectionError",
    "StoreError",
    "TransactionStoreInterface",
]
