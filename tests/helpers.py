"""
Shared test helpers.

No test talks to a real backend. FlakyStore is the in-memory store with
switches for failing each operation and gates for holding a load open.
"""

import asyncio
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from fintrack.models.transaction import (
    TransactionInput,
    TransactionRecord,
    TransactionType,
)
from fintrack.services.storage import InMemoryTransactionStore, StoreError


T1 = datetime(2024, 1, 10, 9, 0, tzinfo=timezone.utc)
T2 = datetime(2024, 2, 5, 18, 30, tzinfo=timezone.utc)
T3 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def run_async(coro):
    """Run a coroutine to completion on a fresh event loop."""
    return asyncio.run(coro)


def make_input(
    transaction_type: TransactionType = TransactionType.EXPENSE,
    amount="10",
    category: str = "Food",
    date: datetime = T1,
    description: Optional[str] = None,
) -> TransactionInput:
    return TransactionInput(
        type=transaction_type,
        amount=Decimal(str(amount)),
        category=category,
        description=description,
        date=date,
    )


def make_record(
    owner: str,
    transaction_type: TransactionType = TransactionType.EXPENSE,
    amount="10",
    category: str = "Food",
    date: datetime = T1,
    description: Optional[str] = None,
) -> TransactionRecord:
    return TransactionRecord(
        id=str(uuid4()),
        type=transaction_type,
        amount=Decimal(str(amount)),
        category=category,
        description=description,
        date=date.isoformat(),
        owner=owner,
    )


class FlakyStore(InMemoryTransactionStore):
    """In-memory store that can fail on demand and hold loads open."""

    def __init__(self, records=None):
        super().__init__(records)
        self.fail_list = False
        self.fail_insert = False
        self.fail_delete = False
        # Keep waiting on a gate even after the load task is cancelled
        self.ignore_cancellation = False
        self.calls: list[tuple[str, str]] = []
        self._gates: dict[str, asyncio.Event] = {}
        self._arrivals: dict[str, asyncio.Event] = {}

    def hold_list(self, owner_id: str) -> asyncio.Event:
        """
        Hold the reply to the next list for `owner_id` until the returned
        event is set. The records are read before waiting.
        """
        gate = asyncio.Event()
        self._gates[owner_id] = gate
        return gate

    def delay_list(self, owner_id: str) -> asyncio.Event:
        """Keep the next list for `owner_id` from reading until the event is set."""
        arrival = asyncio.Event()
        self._arrivals[owner_id] = arrival
        return arrival

    def count(self, operation: str) -> int:
        return sum(1 for op, _ in self.calls if op == operation)

    async def list_transactions(self, owner_id):
        self.calls.append(("list", owner_id))
        arrival = self._arrivals.pop(owner_id, None)
        if arrival is not None:
            await arrival.wait()
        # Snapshot on arrival, like a network read; a held reply is stale
        records = await super().list_transactions(owner_id)
        gate = self._gates.pop(owner_id, None)
        if gate is not None:
            try:
                await gate.wait()
            except asyncio.CancelledError:
                if not self.ignore_cancellation:
                    raise
                await gate.wait()
        if self.fail_list:
            raise StoreError("list failed")
        return records

    async def insert_transaction(self, record):
        self.calls.append(("insert", record.id))
        if self.fail_insert:
            raise StoreError("insert failed")
        await super().insert_transaction(record)

    async def delete_transaction(self, transaction_id, owner_id):
        self.calls.append(("delete", transaction_id))
        if self.fail_delete:
            raise StoreError("delete failed")
        await super().delete_transaction(transaction_id, owner_id)
