"""Aggregates and history filters."""

from fintrack.queries.aggregates import category_breakdown, summarize, total_for_type
from fintrack.queries.filters import TransactionFilter, TypeFilter, filter_transactions

__all__ = [
    "TransactionFilter",
    "TypeFilter",
    "category_breakdown",
    "filter_transactions",
    "summarize",
    "total_for_type",
]
