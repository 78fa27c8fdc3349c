"""Input validation package."""

from fintrack.validation.validator import TransactionInputValidator

__all__ = ["TransactionInputValidator"]
