"""
Validation Models

Results of checking what a user typed into the add-transaction form
before it reaches the state manager.
"""

from typing import Optional

from pydantic import BaseModel, Field

from fintrack.models.transaction import TransactionInput


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage validation.

    Stage 1: Schema validation (types, required fields, ranges)
    Stage 2: Semantic validation (non-blocking plausibility checks)
    """

    schema_valid: bool = Field(
        ...,
        description="Did schema validation pass?"
    )
    is_valid: bool = Field(
        ...,
        description="Can the input be submitted?"
    )

    # Present only when schema validation passed
    parsed: Optional[TransactionInput] = None

    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    # Warnings don't block but should be shown
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")
