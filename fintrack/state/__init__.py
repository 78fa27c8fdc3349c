"""Transaction state package."""

from fintrack.state.manager import TransactionStateManager
from fintrack.state.writes import (
    NotAuthenticatedError,
    PendingWrite,
    RollbackToken,
    WriteKind,
)

__all__ = [
    "NotAuthenticatedError",
    "PendingWrite",
    "RollbackToken",
    "TransactionStateManager",
    "WriteKind",
]
