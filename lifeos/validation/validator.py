"""
Two-Stage Loan Validation

DESIGN DECISION: Checking a proposed loan happens in two distinct stages:

STAGE 1 - FIELD VALIDATION:
- Principal is a positive, finite amount
- Interest rate is realistic (0-50%)
- Tenure is within 1-600 months

STAGE 2 - SERVICEABILITY:
- EMI-to-income ratio stays within 40%
- Debt-to-income (existing debt plus this loan) stays within 60%

Stage 2 needs the EMI, which is meaningless if stage 1 failed, so it is
skipped in that case.

IMPORTANT: Validation NEVER silently fixes issues and never raises.
It reports them; the caller decides whether to block or warn.
"""

from typing import Optional

from lifeos.finance.formulas import debt_to_income_ratio, emi, emi_to_income_ratio
from lifeos.models.finance import InterestCalculation
from lifeos.models.validation import (
    ValidationIssue,
    ValidationOutcome,
    ValidationResult,
)
from lifeos.validation.guards import (
    is_affordable,
    is_valid_amount,
    is_valid_debt_to_income,
    is_valid_interest_rate,
    is_valid_tenure,
)


def _issue(
    field: str,
    issue_type: str,
    outcome: ValidationOutcome,
    severity: str = "error",
    suggested_fix: Optional[str] = None,
) -> ValidationIssue:
    return ValidationIssue(
        field=field,
        issue_type=issue_type,
        message=outcome.error or "Invalid value",
        severity=severity,
        suggested_fix=suggested_fix,
    )


class LoanInputValidator:
    """
    Validates a proposed loan through a two-stage pipeline.

    Stage 1: Field validation
    Stage 2: Serviceability against monthly income
    """

    def __init__(self, strict_serviceability: bool = False):
        """
        Initialize validator.

        Args:
            strict_serviceability: Report serviceability problems as errors
                                   instead of warnings.
        """
        self._serviceability_severity = "error" if strict_serviceability else "warning"

    def _validate_fields(
        self,
        principal: float,
        annual_rate_percent: float,
        tenure_months: float,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: each input on its own.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        amount = is_valid_amount(principal, "Loan amount")
        if not amount:
            issues.append(_issue(
                "principal", "invalid_amount", amount,
                suggested_fix="Enter the amount borrowed",
            ))

        rate = is_valid_interest_rate(annual_rate_percent)
        if not rate:
            issues.append(_issue(
                "interest_rate", "out_of_range", rate,
                suggested_fix="Use the annual rate in percent, e.g. 8.5",
            ))

        tenure = is_valid_tenure(tenure_months)
        if not tenure:
            issues.append(_issue(
                "tenure_months", "out_of_range", tenure,
                suggested_fix="Enter the tenure in months, e.g. 60 for five years",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def _validate_serviceability(
        self,
        monthly_payment: float,
        principal: float,
        monthly_income: float,
        existing_monthly_emi: float,
        existing_debt: float,
    ) -> tuple[bool, list[ValidationIssue]]:
        """Stage 2: the loan against income and the debt already carried."""
        issues = []

        affordability = is_affordable(existing_monthly_emi + monthly_payment, monthly_income)
        if not affordability:
            issues.append(_issue(
                "monthly_payment", "unaffordable", affordability,
                severity=self._serviceability_severity,
                suggested_fix="Borrow less or choose a longer tenure",
            ))

        dti = is_valid_debt_to_income(existing_debt + principal, monthly_income)
        if not dti:
            issues.append(_issue(
                "total_debt", "over_leveraged", dti,
                severity=self._serviceability_severity,
                suggested_fix="Pay down existing debt before taking new loans",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)
        return is_valid, issues

    def validate(
        self,
        principal: float,
        annual_rate_percent: float,
        tenure_months: float,
        monthly_income: float,
        method: InterestCalculation = InterestCalculation.REDUCING,
        existing_monthly_emi: float = 0.0,
        existing_debt: float = 0.0,
    ) -> ValidationResult:
        """
        Run full two-stage validation.

        Args:
            principal: Amount to borrow
            annual_rate_percent: Stated annual interest rate
            tenure_months: Loan tenure
            monthly_income: Income the EMI is paid from
            method: How interest is calculated
            existing_monthly_emi: EMIs already being paid
            existing_debt: Outstanding principal of existing loans

        Returns:
            ValidationResult with all issues found
        """
        all_issues = []

        fields_valid, field_issues = self._validate_fields(
            principal, annual_rate_percent, tenure_months,
        )
        all_issues.extend(field_issues)

        serviceability_valid = False
        monthly_payment = None
        emi_ratio = None
        dti_ratio = None

        # Only run stage 2 if stage 1 passes
        if fields_valid:
            monthly_payment = emi(principal, annual_rate_percent, tenure_months, method)
            emi_ratio = emi_to_income_ratio(existing_monthly_emi + monthly_payment, monthly_income)
            dti_ratio = debt_to_income_ratio(existing_debt + principal, monthly_income)

            serviceability_valid, service_issues = self._validate_serviceability(
                monthly_payment,
                principal,
                monthly_income,
                existing_monthly_emi,
                existing_debt,
            )
            all_issues.extend(service_issues)

        warnings = [issue.message for issue in all_issues if issue.severity == "warning"]

        return ValidationResult(
            fields_valid=fields_valid,
            serviceability_valid=serviceability_valid,
            is_valid=fields_valid and serviceability_valid,
            issues=all_issues,
            warnings=warnings,
            monthly_payment=monthly_payment,
            emi_to_income_ratio=emi_ratio,
            debt_to_income_ratio=dti_ratio,
        )


def get_user_friendly_summary(result: ValidationResult) -> str:
    """
    Generate a user-friendly summary of validation results.

    This is what we show to non-technical users.
    """
    if result.is_valid and not result.warnings:
        return "✅ All checks passed! This loan fits your income."

    lines = []

    errors = [issue for issue in result.issues if issue.severity == "error"]
    if errors:
        lines.append("❌ Some details need fixing:")
        for issue in errors:
            lines.append(f"   • {issue.message}")
            if issue.suggested_fix:
                lines.append(f"     💡 {issue.suggested_fix}")

    if result.warnings:
        if lines:
            lines.append("")
        lines.append("⚠️ Please consider the following:")
        for warning in result.warnings:
            lines.append(f"   • {warning}")

    lines.append("")
    if result.is_valid:
        lines.append("You can still proceed, but this loan will strain your budget.")
    else:
        lines.append("Please fix the issues above before continuing.")

    return "\n".join(lines)
