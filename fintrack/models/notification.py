"""
Notification Models for Finance Tracker

Every outcome of a user-facing operation produces exactly one transient
notification: a successful add or delete, a failed save/delete/load, or an
attempt to write while signed out.

The presentation layer shows them as toasts; the notifier also writes each
one to the structured log.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from fintrack.models.transaction import Transaction, TransactionType


class NotificationKind(str, Enum):
    """What happened."""
    # Successful writes
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_DELETED = "transaction_deleted"

    # Remote store failures
    LOAD_FAILED = "load_failed"
    SAVE_FAILED = "save_failed"
    DELETE_FAILED = "delete_failed"

    # Rejected before touching state
    NOT_AUTHENTICATED = "not_authenticated"


class NotificationLevel(str, Enum):
    """How the notification should be presented."""
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notification(BaseModel):
    """A single user-facing notification."""

    notification_id: UUID = Field(
        default_factory=uuid4,
        description="Unique notification identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the notification was raised (UTC)"
    )

    kind: NotificationKind
    level: NotificationLevel = NotificationLevel.SUCCESS

    message: str = Field(
        ...,
        max_length=500,
        description="Human-readable outcome"
    )

    # Context
    transaction_id: Optional[UUID] = None
    owner: Optional[str] = None
    error_message: Optional[str] = None
    details: dict[str, Any] = Field(default_factory=dict)

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "notification_id": str(self.notification_id),
            "timestamp": self.timestamp.isoformat(),
            "kind": self.kind.value,
            "level": self.level.value,
            "message": self.message,
            "transaction_id": str(self.transaction_id) if self.transaction_id else None,
            "owner": self.owner,
            "error_message": self.error_message,
            "details": self.details,
        }


class NotificationBuilder:
    """
    Helper class to build notifications with the app's wording.

    Usage:
        notification = NotificationBuilder.transaction_added(transaction)
        notification = NotificationBuilder.save_failed(transaction, str(error))
    """

    @staticmethod
    def transaction_added(transaction: Transaction) -> Notification:
        label = "Income" if transaction.type is TransactionType.INCOME else "Expense"
        return Notification(
            kind=NotificationKind.TRANSACTION_ADDED,
            message=f"{label} added successfully!",
            transaction_id=transaction.id,
            owner=transaction.owner,
            details={
                "type": transaction.type.value,
                "amount": str(transaction.amount),
                "category": transaction.category,
            },
        )

    @staticmethod
    def transaction_deleted(transaction: Transaction) -> Notification:
        return Notification(
            kind=NotificationKind.TRANSACTION_DELETED,
            message="Transaction deleted successfully!",
            transaction_id=transaction.id,
            owner=transaction.owner,
        )

    @staticmethod
    def load_failed(owner: str, error_message: str) -> Notification:
        return Notification(
            kind=NotificationKind.LOAD_FAILED,
            level=NotificationLevel.ERROR,
            message="Failed to load transactions",
            owner=owner,
            error_message=error_message,
        )

    @staticmethod
    def save_failed(transaction: Transaction, error_message: str) -> Notification:
        return Notification(
            kind=NotificationKind.SAVE_FAILED,
            level=NotificationLevel.ERROR,
            message="Failed to save transaction",
            transaction_id=transaction.id,
            owner=transaction.owner,
            error_message=error_message,
        )

    @staticmethod
    def delete_failed(transaction: Transaction, error_message: str) -> Notification:
        return Notification(
            kind=NotificationKind.DELETE_FAILED,
            level=NotificationLevel.ERROR,
            message="Failed to delete transaction",
            transaction_id=transaction.id,
            owner=transaction.owner,
            error_message=error_message,
        )

    @staticmethod
    def not_authenticated(action: str) -> Notification:
        return Notification(
            kind=NotificationKind.NOT_AUTHENTICATED,
            level=NotificationLevel.WARNING,
            message=f"You must be signed in to {action}",
            details={
                "action": action,
            },
        )
