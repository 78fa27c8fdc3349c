"""
Transaction State Manager

Owns the authoritative in-memory transaction collection for the signed-in
identity and keeps it in step with the remote store.

GUARANTEES:
- Every transaction in the collection belongs to the current identity;
  changing identity clears the collection and reloads it
- Adds and deletes are visible immediately; the remote call completes
  later and a failure undoes exactly the change it belongs to
- A load superseded by a newer identity change never overwrites state
- Writes made while a load is in flight survive that load, even when its
  snapshot was taken before the store saw them
- Store failures and signed-out writes become notifications, never
  exceptions for the presentation layer
- Totals are recomputed from the collection on every read

No remote operation is retried. Each write is attempted once and either
stands or is rolled back.
"""

import asyncio
from decimal import Decimal
from typing import Coroutine, Optional, Union
from uuid import UUID

import structlog
from pydantic import ValidationError

from fintrack.models.notification import NotificationBuilder
from fintrack.models.transaction import (
    FinancialSummary,
    Transaction,
    TransactionInput,
    TransactionRecord,
    TransactionType,
)
from fintrack.notifications import Notifier
from fintrack.queries import (
    TransactionFilter,
    TypeFilter,
    category_breakdown,
    filter_transactions,
    summarize,
    total_for_type,
)
from fintrack.services.identity import IdentityProviderInterface
from fintrack.services.storage import StoreError, TransactionStoreInterface
from fintrack.state.writes import (
    NotAuthenticatedError,
    PendingWrite,
    RollbackToken,
    WriteKind,
)


logger = structlog.get_logger(__name__)


class TransactionStateManager:
    """
    The tracker's single source of truth for transactions.

    Consumers read through the properties and accessors below and mutate
    only through add_transaction() and delete_transaction().

    Must be used from within a running event loop: identity changes and
    writes schedule their remote calls as tasks on it.
    """

    def __init__(
        self,
        store: TransactionStoreInterface,
        notifier: Optional[Notifier] = None,
    ):
        self._store = store
        self._notifier = notifier or Notifier()

        # Collection: id -> transaction, plus an insertion sequence used to
        # order transactions that share a date (higher = inserted later)
        self._transactions: dict[UUID, Transaction] = {}
        self._sequence: dict[UUID, int] = {}
        self._next_sequence = 0

        self._current_owner: Optional[str] = None
        self._loading = False

        # Incremented on every identity change
        self._session = 0
        self._load_task: Optional[asyncio.Task] = None

        self._pending_writes: set[asyncio.Task] = set()

        # Writes applied while a load is in flight, confirmed or not. The
        # load's snapshot may predate them, so they are replayed over it
        self._journal_inserts: dict[UUID, Transaction] = {}
        self._journal_deletes: set[UUID] = set()

        self._unsubscribe = None
        self._disposed = False

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @classmethod
    def create(
        cls,
        identity_provider: IdentityProviderInterface,
        store: TransactionStoreInterface,
        notifier: Optional[Notifier] = None,
    ) -> "TransactionStateManager":
        """
        Build a manager wired to an identity provider.

        Subscribes to identity changes and, if someone is already signed
        in, starts loading their transactions.
        """
        manager = cls(store, notifier)
        manager._unsubscribe = identity_provider.subscribe(manager.on_identity_change)

        identity = identity_provider.current_identity
        if identity is not None:
            manager.on_identity_change(identity)

        return manager

    async def dispose(self) -> None:
        """
        Stop reacting to identity changes and release state.

        Cancels an in-flight load and waits for pending write
        confirmations (and their rollbacks) to finish.
        """
        if self._disposed:
            return
        self._disposed = True

        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

        load_task = self._cancel_load()
        pending = list(self._pending_writes)
        if load_task is not None:
            pending.append(load_task)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        self._reset_collection()
        self._clear_journal()
        self._current_owner = None
        self._loading = False
        logger.info("state_manager_disposed")

    async def wait_idle(self) -> None:
        """Wait until no load and no write confirmation is in flight."""
        while True:
            pending = list(self._pending_writes)
            if self._load_task is not None and not self._load_task.done():
                pending.append(self._load_task)
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    # =========================================================================
    # READ ACCESS
    # =========================================================================

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        """All transactions, newest date first; ties go to the latest insert."""
        return tuple(sorted(
            self._transactions.values(),
            key=lambda t: (t.date, self._sequence[t.id]),
            reverse=True,
        ))

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def current_owner(self) -> Optional[str]:
        return self._current_owner

    @property
    def notifier(self) -> Notifier:
        return self._notifier

    def get(self, transaction_id: Union[UUID, str]) -> Optional[Transaction]:
        key = self._coerce_id(transaction_id)
        return self._transactions.get(key) if key is not None else None

    @property
    def total_income(self) -> Decimal:
        return total_for_type(self._transactions.values(), TransactionType.INCOME)

    @property
    def total_expense(self) -> Decimal:
        return total_for_type(self._transactions.values(), TransactionType.EXPENSE)

    @property
    def balance(self) -> Decimal:
        return self.total_income - self.total_expense

    def category_breakdown(self, transaction_type: TransactionType) -> dict[str, Decimal]:
        """Category -> summed amount for one transaction type."""
        return category_breakdown(self.transactions, transaction_type)

    def summary(self) -> FinancialSummary:
        return summarize(self.transactions)

    def filter(
        self,
        type_filter: Union[TypeFilter, str] = TypeFilter.ALL,
        search: str = "",
    ) -> list[Transaction]:
        """Ordered history narrowed by type tab and search text."""
        return filter_transactions(
            self.transactions,
            TransactionFilter(type=type_filter, search=search),
        )

    # =========================================================================
    # IDENTITY
    # =========================================================================

    def on_identity_change(self, identity: Optional[str]) -> Optional[asyncio.Task]:
        """
        React to a new signed-in identity (or to sign-out when None).

        Clears the collection and, for a real identity, starts loading its
        transactions. Returns the load task, or None after sign-out.

        The newest identity always wins: any earlier load is cancelled and
        its result ignored. Repeating the identity whose load is still in
        flight returns that same load.
        """
        self._ensure_active()

        if (
            identity is not None
            and identity == self._current_owner
            and self._load_task is not None
            and not self._load_task.done()
        ):
            return self._load_task

        # Fetch the loop before touching state so a call from outside a
        # running loop leaves the manager as it was
        loop = asyncio.get_running_loop() if identity is not None else None

        self._cancel_load()
        self._session += 1
        self._current_owner = identity
        self._reset_collection()
        self._clear_journal()

        if identity is None:
            self._loading = False
            logger.info("collection_cleared_signed_out")
            return None

        self._loading = True
        self._load_task = loop.create_task(self._load(identity, self._session))
        return self._load_task

    async def _load(self, owner: str, session: int) -> None:
        logger.info("load_started", owner=owner)
        try:
            records = await self._store.list_transactions(owner)
        except StoreError as e:
            self._fail_load(owner, session, e)
            return
        except Exception as e:
            logger.error("load_failed_unexpected", owner=owner, error=str(e), exc_info=True)
            self._fail_load(owner, session, e)
            return

        if session != self._session:
            logger.info("stale_load_discarded", owner=owner, record_count=len(records))
            return

        self._replace_collection(records)
        self._loading = False
        logger.info("load_completed", owner=owner, count=len(self._transactions))

    def _fail_load(self, owner: str, session: int, error: Exception) -> None:
        if session != self._session:
            logger.info("stale_load_failure_ignored", owner=owner, error=str(error))
            return
        logger.error("load_failed", owner=owner, error=str(error))
        # Nothing loaded; only writes made during this load remain
        self._replace_collection([])
        self._loading = False
        self._notifier.notify(NotificationBuilder.load_failed(owner, str(error)))

    def _replace_collection(self, records: list[TransactionRecord]) -> None:
        """
        Install freshly loaded records as the collection.

        The snapshot may predate writes made while the load was in flight,
        so the journal is replayed over it: deleted ids are dropped and
        inserted transactions are kept, whether or not the store has
        confirmed them yet.
        """
        loaded = []
        seen = set()
        for record in records:
            try:
                transaction = Transaction.from_record(record)
            except ValidationError as e:
                logger.warning("malformed_record_skipped", record_id=record.id, error=str(e))
                continue
            if transaction.owner != self._current_owner:
                logger.warning("foreign_record_skipped", record_id=record.id)
                continue
            if transaction.id in self._journal_deletes or transaction.id in seen:
                continue
            seen.add(transaction.id)
            loaded.append(transaction)

        self._reset_collection()

        # Records arrive newest first; the first one must rank as the most
        # recent insert among equal dates
        for transaction in reversed(loaded):
            self._put(transaction)

        for transaction in self._journal_inserts.values():
            if transaction.id not in seen and transaction.id not in self._journal_deletes:
                self._put(transaction)

        self._clear_journal()

    # =========================================================================
    # WRITES
    # =========================================================================

    def add_transaction(self, data: TransactionInput) -> Optional[PendingWrite]:
        """
        Add a transaction for the current identity.

        The transaction appears in the collection before this returns.
        Returns None (with a notification) when nobody is signed in.
        """
        self._ensure_active()
        try:
            owner = self._require_owner()
        except NotAuthenticatedError as e:
            logger.warning("write_rejected", action="add", error=str(e))
            self._notifier.notify(NotificationBuilder.not_authenticated("add a transaction"))
            return None

        transaction = Transaction.from_input(data, owner=owner)
        token = self._apply_insert(transaction)
        task = self._spawn(self._confirm_insert(token))
        return PendingWrite(transaction=transaction, task=task)

    def delete_transaction(self, transaction_id: Union[UUID, str]) -> Optional[PendingWrite]:
        """
        Delete a transaction by id.

        The transaction disappears before this returns. Returns None when
        nobody is signed in (with a notification) or when the id is not in
        the collection (silently, without contacting the store).
        """
        self._ensure_active()
        try:
            owner = self._require_owner()
        except NotAuthenticatedError as e:
            logger.warning("write_rejected", action="delete", error=str(e))
            self._notifier.notify(NotificationBuilder.not_authenticated("delete a transaction"))
            return None

        transaction = self.get(transaction_id)
        if transaction is None:
            logger.debug("delete_skipped_not_found", transaction_id=str(transaction_id), owner=owner)
            return None

        token = self._apply_delete(transaction)
        task = self._spawn(self._confirm_delete(token))
        return PendingWrite(transaction=transaction, task=task)

    def _apply_insert(self, transaction: Transaction) -> RollbackToken:
        self._put(transaction)
        token = RollbackToken(
            kind=WriteKind.INSERT,
            transaction=transaction,
            sequence=self._sequence[transaction.id],
            session=self._session,
        )
        if self._loading:
            self._journal_inserts[transaction.id] = transaction
        return token

    def _apply_delete(self, transaction: Transaction) -> RollbackToken:
        token = RollbackToken(
            kind=WriteKind.DELETE,
            transaction=transaction,
            sequence=self._sequence[transaction.id],
            session=self._session,
        )
        self._remove(transaction.id)
        if self._loading:
            self._journal_deletes.add(transaction.id)
        return token

    async def _confirm_insert(self, token: RollbackToken) -> bool:
        transaction = token.transaction
        try:
            await self._store.insert_transaction(transaction.to_record())
        except StoreError as e:
            logger.error(
                "insert_failed",
                transaction_id=str(transaction.id),
                owner=transaction.owner,
                error=str(e),
            )
            self._rollback(token)
            self._notifier.notify(NotificationBuilder.save_failed(transaction, str(e)))
            return False

        logger.info("insert_confirmed", transaction_id=str(transaction.id), owner=transaction.owner)
        self._notifier.notify(NotificationBuilder.transaction_added(transaction))
        return True

    async def _confirm_delete(self, token: RollbackToken) -> bool:
        transaction = token.transaction
        try:
            # Scoped to the owner as well, so a bad id can never reach
            # another identity's record
            await self._store.delete_transaction(str(transaction.id), transaction.owner)
        except StoreError as e:
            logger.error(
                "delete_failed",
                transaction_id=str(transaction.id),
                owner=transaction.owner,
                error=str(e),
            )
            self._rollback(token)
            self._notifier.notify(NotificationBuilder.delete_failed(transaction, str(e)))
            return False

        logger.info("delete_confirmed", transaction_id=str(transaction.id), owner=transaction.owner)
        self._notifier.notify(NotificationBuilder.transaction_deleted(transaction))
        return True

    def _rollback(self, token: RollbackToken) -> None:
        """Undo one optimistic write using its captured snapshot."""
        transaction_id = token.transaction.id

        if token.session != self._session:
            logger.info(
                "rollback_skipped_identity_changed",
                transaction_id=str(transaction_id),
                kind=token.kind.value,
            )
            return

        if token.kind is WriteKind.INSERT:
            self._remove(transaction_id)
            self._journal_inserts.pop(transaction_id, None)
        else:
            self._journal_deletes.discard(transaction_id)
            if transaction_id not in self._transactions:
                # Original sequence puts it back exactly where it was
                self._put(token.transaction, sequence=token.sequence)

        logger.info("rollback_applied", transaction_id=str(transaction_id), kind=token.kind.value)

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _put(self, transaction: Transaction, sequence: Optional[int] = None) -> None:
        if sequence is None:
            sequence = self._next_sequence
            self._next_sequence += 1
        self._transactions[transaction.id] = transaction
        self._sequence[transaction.id] = sequence

    def _remove(self, transaction_id: UUID) -> None:
        self._transactions.pop(transaction_id, None)
        self._sequence.pop(transaction_id, None)

    def _reset_collection(self) -> None:
        self._transactions.clear()
        self._sequence.clear()

    def _clear_journal(self) -> None:
        self._journal_inserts.clear()
        self._journal_deletes.clear()

    def _require_owner(self) -> str:
        if self._current_owner is None:
            raise NotAuthenticatedError("No identity is signed in")
        return self._current_owner

    def _ensure_active(self) -> None:
        if self._disposed:
            raise RuntimeError("TransactionStateManager has been disposed")

    def _cancel_load(self) -> Optional[asyncio.Task]:
        task = self._load_task
        self._load_task = None
        if task is not None and not task.done():
            task.cancel()
        return task

    def _spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)
        return task

    @staticmethod
    def _coerce_id(transaction_id: Union[UUID, str]) -> Optional[UUID]:
        if isinstance(transaction_id, UUID):
            return transaction_id
        try:
            return UUID(str(transaction_id))
        except ValueError:
            return None
