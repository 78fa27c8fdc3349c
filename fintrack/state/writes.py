"""
Optimistic Write Bookkeeping

Every write runs in two explicit phases:

1. Apply: mutate the local collection synchronously and capture a
   RollbackToken holding the exact record (and its position) needed to
   undo the change.
2. Confirm: ask the remote store asynchronously. On success the token is
   dropped; on failure it is applied to undo the local change.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum

from fintrack.models.transaction import Transaction


class NotAuthenticatedError(Exception):
    """A write was attempted while no identity is signed in."""
    pass


class WriteKind(str, Enum):
    INSERT = "insert"
    DELETE = "delete"


@dataclass(frozen=True)
class RollbackToken:
    """
    Undo information for one optimistic write.

    Captured at the moment of the local mutation, never recomputed later.
    `session` ties the token to the identity it was issued under; a token
    from an earlier session is never applied.
    """

    kind: WriteKind
    transaction: Transaction
    sequence: int
    session: int


@dataclass(frozen=True)
class PendingWrite:
    """
    Handle returned by an accepted write.

    The transaction is already visible in the collection. Awaiting the
    handle waits for remote confirmation and yields True on success,
    False if the write was rolled back.
    """

    transaction: Transaction
    task: "asyncio.Task[bool]"

    def __await__(self):
        return self.task.__await__()

    def done(self) -> bool:
        return self.task.done()
