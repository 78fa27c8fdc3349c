"""
Core Data Models for Finance Tracker

These models define the strict schemas for all transaction data flowing
through the system. They are designed to:
1. Enforce type safety at runtime
2. Reject bad values instead of coercing them (a negative amount never
   silently becomes a positive one)
3. Be serializable for the remote store and for logging

DESIGN DECISION: Transactions are frozen. A transaction is created once,
removed by id, and never edited in place, so the models make in-place
mutation impossible.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


EARLIEST_TRANSACTION_DATE = datetime(1900, 1, 1, tzinfo=timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so every stored date is comparable."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# =============================================================================
# ENUMS & VOCABULARY
# =============================================================================

class TransactionType(str, Enum):
    """The two kinds of money movement we track."""
    INCOME = "income"
    EXPENSE = "expense"


# Categories offered by the entry form. Categories stay free-form; these are
# suggestions, not an allow-list.
INCOME_CATEGORIES = (
    "Salary",
    "Freelance",
    "Investments",
    "Gifts",
    "Other Income",
)

EXPENSE_CATEGORIES = (
    "Food",
    "Transportation",
    "Housing",
    "Utilities",
    "Entertainment",
    "Healthcare",
    "Shopping",
    "Education",
    "Other Expenses",
)


def suggested_categories(transaction_type: TransactionType) -> tuple[str, ...]:
    """Get the suggested category vocabulary for a transaction type."""
    if TransactionType(transaction_type) is TransactionType.INCOME:
        return INCOME_CATEGORIES
    return EXPENSE_CATEGORIES


# =============================================================================
# TRANSACTION MODELS
# =============================================================================

class TransactionInput(BaseModel):
    """
    What the presentation layer submits when the user adds a transaction.

    Has no id and no owner: both are assigned by the state manager.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    type: TransactionType = Field(
        ...,
        description="Income or expense"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount in currency units (must be positive)"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Category label"
    )
    description: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Optional free-text note"
    )
    date: datetime = Field(
        ...,
        description="When the transaction happened"
    )

    @field_validator('date')
    @classmethod
    def validate_date_range(cls, v: datetime) -> datetime:
        """Dates may be past or present, never future, never before 1900."""
        v = as_utc(v)
        if v < EARLIEST_TRANSACTION_DATE:
            raise ValueError("Date cannot be before 1900-01-01")
        if v > datetime.now(timezone.utc):
            raise ValueError("Date cannot be in the future")
        return v


class TransactionRecord(BaseModel):
    """
    A transaction as the remote store persists it.

    Dates travel as ISO-8601 text and ids as text.
    """

    id: str
    type: TransactionType
    amount: Decimal
    category: str
    description: Optional[str] = None
    date: str = Field(
        ...,
        description="ISO-8601 timestamp"
    )
    owner: str = Field(
        ...,
        description="Identity that owns this record"
    )


class Transaction(BaseModel):
    """
    A transaction in the tracker's collection.

    CRITICAL: `id` and `owner` are set by the state manager, never by the user.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique transaction ID"
    )
    owner: str = Field(
        ...,
        min_length=1,
        description="Identity that created the transaction"
    )
    type: TransactionType
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount in currency units"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
    )
    description: Optional[str] = None
    date: datetime

    @field_validator('date')
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return as_utc(v)

    @classmethod
    def from_input(cls, data: TransactionInput, owner: str) -> "Transaction":
        """Create a new transaction with a fresh id, owned by `owner`."""
        return cls(
            id=uuid4(),
            owner=owner,
            type=data.type,
            amount=data.amount,
            category=data.category,
            description=data.description,
            date=data.date,
        )

    @classmethod
    def from_record(cls, record: TransactionRecord) -> "Transaction":
        """Convert a persisted record (text id, ISO date) to a Transaction."""
        return cls.model_validate({
            "id": record.id,
            "owner": record.owner,
            "type": record.type,
            "amount": record.amount,
            "category": record.category,
            "description": record.description,
            "date": record.date,
        })

    def to_record(self) -> TransactionRecord:
        """Serialize for the remote store."""
        return TransactionRecord(
            id=str(self.id),
            type=self.type,
            amount=self.amount,
            category=self.category,
            description=self.description,
            date=self.date.isoformat(),
            owner=self.owner,
        )

    @property
    def is_income(self) -> bool:
        return self.type is TransactionType.INCOME


# =============================================================================
# AGGREGATE MODELS
# =============================================================================

class FinancialSummary(BaseModel):
    """
    Dashboard totals derived from a transaction collection.

    Always computed on demand, never stored.
    """

    total_income: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")
    income_by_category: dict[str, Decimal] = Field(default_factory=dict)
    expense_by_category: dict[str, Decimal] = Field(default_factory=dict)
    transaction_count: int = Field(default=0, ge=0)
