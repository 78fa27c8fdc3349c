"""
Tests for aggregate and filter queries.
"""

from decimal import Decimal

from fintrack.models.transaction import Transaction, TransactionType
from fintrack.queries import (
    TransactionFilter,
    TypeFilter,
    category_breakdown,
    filter_transactions,
    summarize,
    total_for_type,
)
from tests.helpers import T1, T2, T3, make_input


INCOME = TransactionType.INCOME
EXPENSE = TransactionType.EXPENSE


def transaction(transaction_type, amount, category, date=T1, description=None):
    return Transaction.from_input(
        make_input(transaction_type, amount, category, date, description),
        owner="alice",
    )


HISTORY = [
    transaction(EXPENSE, "12", "Food", T3, "Pizza night"),
    transaction(INCOME, "900", "Freelance", T3, "Logo work"),
    transaction(EXPENSE, "40.25", "Transportation", T2),
    transaction(EXPENSE, "3", "Food", T2, "coffee"),
    transaction(INCOME, "1000", "Salary", T1),
]


class TestAggregates:
    """Tests for totals and category breakdowns."""

    def test_totals(self):
        assert total_for_type(HISTORY, INCOME) == Decimal("1900")
        assert total_for_type(HISTORY, "expense") == Decimal("55.25")

    def test_empty_collection(self):
        assert total_for_type([], INCOME) == Decimal("0")
        assert category_breakdown([], EXPENSE) == {}

    def test_category_breakdown_sums_per_category(self):
        breakdown = category_breakdown(HISTORY, EXPENSE)

        assert breakdown == {"Food": Decimal("15"), "Transportation": Decimal("40.25")}
        assert list(breakdown) == ["Food", "Transportation"]

    def test_categories_group_by_exact_text(self):
        """Test that differently-cased categories stay separate."""
        items = [
            transaction(EXPENSE, "1", "food"),
            transaction(EXPENSE, "2", "Food"),
        ]
        assert category_breakdown(items, EXPENSE) == {
            "food": Decimal("1"),
            "Food": Decimal("2"),
        }

    def test_summarize(self):
        summary = summarize(HISTORY)

        assert summary.total_income == Decimal("1900")
        assert summary.total_expense == Decimal("55.25")
        assert summary.balance == Decimal("1844.75")
        assert summary.income_by_category == {
            "Freelance": Decimal("900"),
            "Salary": Decimal("1000"),
        }
        assert summary.transaction_count == 5

    def test_decimal_balance_is_exact(self):
        """Test that many small amounts do not accumulate float error."""
        items = [transaction(EXPENSE, "0.1", "Food") for _ in range(10)]
        items.append(transaction(INCOME, "1", "Gifts"))

        assert summarize(items).balance == Decimal("0")


class TestFilters:
    """Tests for history filtering."""

    def test_default_filter_keeps_everything(self):
        assert filter_transactions(HISTORY, TransactionFilter()) == HISTORY

    def test_type_tab(self):
        result = filter_transactions(HISTORY, TransactionFilter(type=TypeFilter.INCOME))
        assert [t.category for t in result] == ["Freelance", "Salary"]

    def test_search_is_case_insensitive(self):
        result = filter_transactions(HISTORY, TransactionFilter(search="  FOOD "))
        assert [t.description for t in result] == ["Pizza night", "coffee"]

    def test_search_matches_description(self):
        result = filter_transactions(HISTORY, TransactionFilter(search="logo"))
        assert [t.category for t in result] == ["Freelance"]

    def test_type_and_search_combine(self):
        criteria = TransactionFilter(type="expense", search="o")
        result = filter_transactions(HISTORY, criteria)
        assert [t.category for t in result] == ["Food", "Transportation", "Food"]
