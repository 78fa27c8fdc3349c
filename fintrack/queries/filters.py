"""
Transaction History Filters

Narrows the ordered history the way the transaction list does: by type
tab (all / income / expense) and by a free-text search over description
and category. Filtering never reorders.
"""

from enum import Enum
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field

from fintrack.models.transaction import Transaction, TransactionType


class TypeFilter(str, Enum):
    """Type tabs of the history view."""
    ALL = "all"
    INCOME = "income"
    EXPENSE = "expense"


class TransactionFilter(BaseModel):
    """Criteria for browsing the transaction history."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    type: TypeFilter = Field(
        default=TypeFilter.ALL,
        description="Restrict to one transaction type"
    )
    search: str = Field(
        default="",
        max_length=200,
        description="Case-insensitive text matched against description or category"
    )

    def matches(self, transaction: Transaction) -> bool:
        if self.type is not TypeFilter.ALL:
            if transaction.type is not TransactionType(self.type.value):
                return False

        if not self.search:
            return True

        term = self.search.lower()
        description = (transaction.description or "").lower()
        return term in description or term in transaction.category.lower()


def filter_transactions(
    transactions: Iterable[Transaction],
    criteria: TransactionFilter,
) -> list[Transaction]:
    """Keep transactions matching `criteria`, preserving their order."""
    return [t for t in transactions if criteria.matches(t)]
