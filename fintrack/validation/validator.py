"""
Two-Stage Input Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Amount present and strictly positive
- Category present
- Date present, not in the future, not before 1900
- Any failure here blocks submission

STAGE 2 - SEMANTIC VALIDATION:
- Category outside the suggested vocabulary for its type
- Unusually large amounts
- Never blocks; the user decides

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the form can show them.
"""

from decimal import Decimal
from typing import Any, Optional

from pydantic import ValidationError

from fintrack.config import get_settings
from fintrack.models.transaction import TransactionInput, suggested_categories
from fintrack.models.validation import ValidationIssue, ValidationResult


# Friendlier wording for the schema failures users actually hit
FIELD_MESSAGES = {
    "amount": "Amount must be positive",
    "category": "Category is required",
    "type": "Choose income or expense",
    "date": "A valid date is required",
}


class TransactionInputValidator:
    """
    Validates raw add-transaction form data through a two-stage pipeline.

    Stage 1: Schema validation (builds a TransactionInput)
    Stage 2: Semantic validation (plausibility warnings)
    """

    def __init__(self, max_amount: Optional[Decimal] = None):
        """
        Args:
            max_amount: Amount above which an entry gets a warning.
                        Defaults to AppSettings.max_transaction_amount.
        """
        if max_amount is None:
            max_amount = Decimal(str(get_settings().app.max_transaction_amount))
        self._max_amount = max_amount

    def _validate_schema(
        self,
        data: dict[str, Any],
    ) -> tuple[Optional[TransactionInput], list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (parsed_input_or_None, list_of_issues)
        """
        try:
            return TransactionInput.model_validate(data), []
        except ValidationError as e:
            issues = []
            seen = set()
            for error in e.errors():
                field = str(error["loc"][0]) if error["loc"] else "input"
                if field in seen:
                    continue
                seen.add(field)

                if error["type"] == "missing":
                    issue_type = "missing"
                    message = FIELD_MESSAGES.get(field, f"{field} is required")
                elif error["type"] == "value_error":
                    # Raised by our own validators; their text is already user-facing
                    issue_type = "invalid_value"
                    message = str(error["ctx"]["error"]) if "ctx" in error else error["msg"]
                else:
                    issue_type = "invalid_value"
                    message = FIELD_MESSAGES.get(field, error["msg"])

                issues.append(ValidationIssue(
                    field=field,
                    issue_type=issue_type,
                    message=message,
                    severity="error",
                ))
            return None, issues

    def _validate_semantic(
        self,
        parsed: TransactionInput,
    ) -> list[ValidationIssue]:
        """
        Stage 2: Semantic validation.

        Only produces warnings and hints.
        """
        issues = []

        if parsed.category not in suggested_categories(parsed.type):
            issues.append(ValidationIssue(
                field="category",
                issue_type="custom_category",
                message=f"'{parsed.category}' is not one of the usual {parsed.type.value} categories",
                severity="info",
                suggested_fix="A custom category is fine; check the spelling",
            ))

        if parsed.amount > self._max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({parsed.amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        return issues

    def validate(self, data: dict[str, Any]) -> ValidationResult:
        """
        Run the full two-stage validation pipeline.

        Args:
            data: Raw form values (type, amount, category, description, date)

        Returns:
            ValidationResult with all issues found and, when valid,
            the parsed TransactionInput
        """
        parsed, issues = self._validate_schema(data)

        # Only run stage 2 if stage 1 passes
        if parsed is not None:
            issues.extend(self._validate_semantic(parsed))

        warnings = [issue.message for issue in issues if issue.severity == "warning"]

        return ValidationResult(
            schema_valid=parsed is not None,
            is_valid=parsed is not None,
            parsed=parsed,
            issues=issues,
            warnings=warnings,
        )

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """Generate a short summary of validation results for the form."""
        if result.is_valid and not result.warnings:
            return "✅ Looks good!"

        lines = []

        if not result.schema_valid:
            lines.append("❌ Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
