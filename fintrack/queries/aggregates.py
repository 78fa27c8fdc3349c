"""
Aggregate Computation

DESIGN DECISION: Aggregates are pure functions of a transaction collection.
Nothing here is cached or stored, so totals can never drift from the
transactions they summarize.

Amounts are Decimal, which keeps `balance == total_income - total_expense`
exact.
"""

from decimal import Decimal
from typing import Iterable

from fintrack.models.transaction import (
    FinancialSummary,
    Transaction,
    TransactionType,
)


def total_for_type(
    transactions: Iterable[Transaction],
    transaction_type: TransactionType,
) -> Decimal:
    """Sum of amounts for one transaction type."""
    transaction_type = TransactionType(transaction_type)
    return sum(
        (t.amount for t in transactions if t.type is transaction_type),
        Decimal("0"),
    )


def category_breakdown(
    transactions: Iterable[Transaction],
    transaction_type: TransactionType,
) -> dict[str, Decimal]:
    """
    Group one type's transactions by category and sum each group.

    Categories are grouped by exact text equality. Keys appear in the
    order their category is first seen.
    """
    transaction_type = TransactionType(transaction_type)
    groups: dict[str, Decimal] = {}

    for transaction in transactions:
        if transaction.type is not transaction_type:
            continue
        groups[transaction.category] = (
            groups.get(transaction.category, Decimal("0")) + transaction.amount
        )

    return groups


def summarize(transactions: Iterable[Transaction]) -> FinancialSummary:
    """Compute every dashboard figure from the collection."""
    transactions = list(transactions)

    total_income = total_for_type(transactions, TransactionType.INCOME)
    total_expense = total_for_type(transactions, TransactionType.EXPENSE)

    return FinancialSummary(
        total_income=total_income,
        total_expense=total_expense,
        balance=total_income - total_expense,
        income_by_category=category_breakdown(transactions, TransactionType.INCOME),
        expense_by_category=category_breakdown(transactions, TransactionType.EXPENSE),
        transaction_count=len(transactions),
    )
