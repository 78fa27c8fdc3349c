"""
Data Models Package

This package contains all Pydantic models used in the Finance Tracker.
All data flowing through the system must conform to these schemas.
"""

from fintrack.models.transaction import (
    EARLIEST_TRANSACTION_DATE,
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    FinancialSummary,
    Transaction,
    TransactionInput,
    TransactionRecord,
    TransactionType,
    suggested_categories,
)
from fintrack.models.notification import (
    Notification,
    NotificationBuilder,
    NotificationKind,
    NotificationLevel,
)
from fintrack.models.validation import ValidationIssue, ValidationResult

__all__ = [
    # Transaction models
    "EARLIEST_TRANSACTION_DATE",
    "EXPENSE_CATEGORIES",
    "INCOME_CATEGORIES",
    "FinancialSummary",
    "Transaction",
    "TransactionInput",
    "TransactionRecord",
    "TransactionType",
    "suggested_categories",
    # Notification models
    "Notification",
    "NotificationBuilder",
    "NotificationKind",
    "NotificationLevel",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
]
