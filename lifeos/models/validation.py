"""
Validation result models.

ValidationOutcome is the single-rule result returned by the guard
functions. ValidationIssue / ValidationResult describe a multi-field,
two-stage check such as validating a new loan.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ValidationOutcome(BaseModel):
    """Result of a single guard: valid, or invalid with a message."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.valid


VALID = ValidationOutcome(valid=True)


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'out_of_range', 'invalid_number', 'unaffordable')"
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
    Result of a two-stage validation.

    Stage 1: Field validation (each input on its own)
    Stage 2: Serviceability (inputs checked against income)
    """

    validated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    # Stage results
    fields_valid: bool = Field(
        ...,
        description="Did field validation pass?"
    )
    serviceability_valid: bool = Field(
        ...,
        description="Did the serviceability checks pass?"
    )

    is_valid: bool = Field(
        ...,
        description="Overall validation result"
    )

    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All issues found"
    )
    warnings: list[str] = Field(
        default_factory=list,
        description="Warning messages (non-blocking)"
    )

    # Derived figures, when field validation passed
    monthly_payment: Optional[float] = Field(
        default=None,
        description="EMI computed for the proposed loan"
    )
    emi_to_income_ratio: Optional[float] = None
    debt_to_income_ratio: Optional[float] = None
