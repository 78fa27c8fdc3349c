"""
Tests for Finance Tracker

Test strategy:
1. Unit tests for individual components (models, validators, queries)
2. State manager scenarios against an in-memory store with failure switches
3. No real network calls in tests (the Sheets store runs against fakes)
"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID

from pydantic import ValidationError

from fintrack.models.notification import (
    NotificationBuilder,
    NotificationKind,
    NotificationLevel,
)
from fintrack.models.transaction import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    FinancialSummary,
    Transaction,
    TransactionInput,
    TransactionRecord,
    TransactionType,
    suggested_categories,
)
from tests.helpers import T1, make_input


class TestTransactionInput:
    """Tests for the entry-form payload."""

    def test_input_creation(self):
        """Test TransactionInput model creation."""
        data = make_input(TransactionType.INCOME, "1000", "Salary", T1, "March pay")
        assert data.type is TransactionType.INCOME
        assert data.amount == Decimal("1000")
        assert data.description == "March pay"

    def test_input_strips_whitespace(self):
        """Test that whitespace is stripped from text fields."""
        data = make_input(category="  Food  ", description="  lunch ")
        assert data.category == "Food"
        assert data.description == "lunch"

    def test_input_accepts_type_value(self):
        """Test that the plain string value is accepted for the type."""
        data = TransactionInput(type="expense", amount=Decimal("3"), category="Food", date=T1)
        assert data.type is TransactionType.EXPENSE

    @pytest.mark.parametrize("amount", ["0", "-100"])
    def test_input_rejects_non_positive_amount(self, amount):
        """Test that zero and negative amounts are rejected."""
        with pytest.raises(ValidationError):
            make_input(amount=amount)

    def test_input_rejects_empty_category(self):
        """Test that a blank category is rejected after stripping."""
        with pytest.raises(ValidationError):
            make_input(category="   ")

    def test_input_rejects_unknown_type(self):
        """Test that only income and expense are valid types."""
        with pytest.raises(ValidationError):
            TransactionInput(type="transfer", amount=Decimal("1"), category="Food", date=T1)

    def test_input_rejects_future_date(self):
        """Test that a date in the future is rejected."""
        tomorrow = datetime.now(timezone.utc) + timedelta(days=1)
        with pytest.raises(ValidationError, match="future"):
            make_input(date=tomorrow)

    def test_input_rejects_date_before_1900(self):
        """Test the lower bound on dates."""
        with pytest.raises(ValidationError, match="1900"):
            make_input(date=datetime(1899, 12, 31, tzinfo=timezone.utc))

    def test_naive_date_is_treated_as_utc(self):
        """Test that a naive datetime becomes an aware UTC one."""
        data = make_input(date=datetime(2024, 1, 10, 9, 0))
        assert data.date == T1
        assert data.date.tzinfo is not None


class TestTransaction:
    """Tests for the collection model."""

    def test_from_input_assigns_id_and_owner(self):
        """Test that each new transaction gets a fresh id and the given owner."""
        data = make_input()
        first = Transaction.from_input(data, owner="alice")
        second = Transaction.from_input(data, owner="alice")

        assert isinstance(first.id, UUID)
        assert first.id != second.id
        assert first.owner == "alice"
        assert first.amount == data.amount
        assert first.category == data.category

    def test_transaction_is_frozen(self):
        """Test that fields cannot be reassigned."""
        transaction = Transaction.from_input(make_input(), owner="alice")
        with pytest.raises(ValidationError):
            transaction.amount = Decimal("999")

    def test_transaction_requires_owner(self):
        """Test that an empty owner is rejected."""
        with pytest.raises(ValidationError):
            Transaction.from_input(make_input(), owner="")

    def test_record_conversion_keeps_fields(self):
        """Test that converting to a record and back loses nothing."""
        transaction = Transaction.from_input(
            make_input(TransactionType.INCOME, "1234.56", "Freelance", T1, "logo"),
            owner="alice",
        )
        record = transaction.to_record()

        assert record.id == str(transaction.id)
        assert record.date == "2024-01-10T09:00:00+00:00"
        assert Transaction.from_record(record) == transaction

    def test_from_record_parses_zulu_suffix(self):
        """Test that an ISO date ending in Z is read as UTC."""
        record = TransactionRecord(
            id="3f2b8c1e-4d6a-4f1e-9b7a-2c5d8e9f0a1b",
            type=TransactionType.EXPENSE,
            amount=Decimal("12.50"),
            category="Food",
            date="2024-01-10T09:00:00Z",
            owner="alice",
        )
        transaction = Transaction.from_record(record)
        assert transaction.date == T1
        assert transaction.is_income is False

    def test_from_record_rejects_bad_id(self):
        """Test that a record with a non-UUID id fails validation."""
        record = TransactionRecord(
            id="row-7",
            type=TransactionType.EXPENSE,
            amount=Decimal("1"),
            category="Food",
            date="2024-01-10T09:00:00+00:00",
            owner="alice",
        )
        with pytest.raises(ValidationError):
            Transaction.from_record(record)


class TestCategories:
    """Tests for the suggested category vocabulary."""

    def test_suggestions_by_type(self):
        assert suggested_categories(TransactionType.INCOME) == INCOME_CATEGORIES
        assert suggested_categories("expense") == EXPENSE_CATEGORIES
        assert "Salary" in INCOME_CATEGORIES
        assert "Food" in EXPENSE_CATEGORIES


class TestFinancialSummary:
    """Tests for the dashboard aggregate model."""

    def test_empty_summary(self):
        summary = FinancialSummary()
        assert summary.balance == Decimal("0")
        assert summary.expense_by_category == {}
        assert summary.transaction_count == 0


class TestNotificationModels:
    """Tests for notification models and builder."""

    def test_added_message_depends_on_type(self):
        """Test the income and expense success wording."""
        income = Transaction.from_input(make_input(TransactionType.INCOME), owner="alice")
        expense = Transaction.from_input(make_input(TransactionType.EXPENSE), owner="alice")

        assert NotificationBuilder.transaction_added(income).message == "Income added successfully!"
        assert NotificationBuilder.transaction_added(expense).message == "Expense added successfully!"

    def test_failure_notifications(self):
        """Test that store failures are errors carrying the cause."""
        transaction = Transaction.from_input(make_input(), owner="alice")

        save = NotificationBuilder.save_failed(transaction, "timeout")
        delete = NotificationBuilder.delete_failed(transaction, "timeout")
        load = NotificationBuilder.load_failed("alice", "timeout")

        assert save.kind is NotificationKind.SAVE_FAILED
        assert save.message == "Failed to save transaction"
        assert delete.message == "Failed to delete transaction"
        assert load.message == "Failed to load transactions"
        for notification in (save, delete, load):
            assert notification.level is NotificationLevel.ERROR
            assert notification.error_message == "timeout"

    def test_not_authenticated_is_warning(self):
        notification = NotificationBuilder.not_authenticated("add a transaction")
        assert notification.level is NotificationLevel.WARNING
        assert notification.message == "You must be signed in to add a transaction"
        assert notification.details["action"] == "add a transaction"

    def test_notification_to_log_dict(self):
        """Test conversion to log dictionary."""
        transaction = Transaction.from_input(make_input(), owner="alice")
        notification = NotificationBuilder.transaction_deleted(transaction)

        log_dict = notification.to_log_dict()

        assert log_dict["kind"] == "transaction_deleted"
        assert log_dict["level"] == "success"
        assert log_dict["transaction_id"] == str(transaction.id)
        assert log_dict["owner"] == "alice"
        assert "timestamp" in log_dict
