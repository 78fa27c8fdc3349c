"""
In-Memory Transaction Store

Process-local backend used when no remote store is configured, and by the
test suite. Records are copied on the way in and out so callers can never
alias stored state.
"""

from datetime import datetime
from typing import Optional

from fintrack.models.transaction import TransactionRecord, as_utc
from fintrack.services.storage.interface import (
    DuplicateError,
    StoreError,
    TransactionStoreInterface,
)


class InMemoryTransactionStore(TransactionStoreInterface):
    """Dict-backed store keyed by record id."""

    def __init__(self, records: Optional[list[TransactionRecord]] = None):
        self._records: dict[str, TransactionRecord] = {}
        for record in records or []:
            self._records[record.id] = record.model_copy()

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, transaction_id: object) -> bool:
        return str(transaction_id) in self._records

    async def list_transactions(self, owner_id: str) -> list[TransactionRecord]:
        records = [
            record.model_copy()
            for record in self._records.values()
            if record.owner == owner_id
        ]
        try:
            records.sort(key=lambda r: as_utc(datetime.fromisoformat(r.date)), reverse=True)
        except ValueError as e:
            raise StoreError(f"Failed to list transactions: {e}")
        return records

    async def insert_transaction(self, record: TransactionRecord) -> None:
        if record.id in self._records:
            raise DuplicateError(f"Transaction already exists: {record.id}")
        self._records[record.id] = record.model_copy()

    async def delete_transaction(self, transaction_id: str, owner_id: str) -> None:
        record = self._records.get(transaction_id)
        if record is not None and record.owner == owner_id:
            del self._records[transaction_id]
