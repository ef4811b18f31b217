"""
Input Guards and Safe Evaluation

DESIGN DECISION: Guards NEVER raise for expected domain violations.
Each one returns a ValidationOutcome and the caller decides whether to
block the action or merely warn.

safe_calculate is the only generic containment mechanism for arithmetic.
Every formula that divides by something that can be zero goes through it.
"""

import math
from numbers import Real
from typing import Any, Callable, Optional

import structlog

from lifeos.models.validation import VALID, ValidationOutcome


logger = structlog.get_logger(__name__)

AFFORDABILITY_LIMIT_PERCENT = 40.0
DEBT_TO_INCOME_LIMIT_PERCENT = 60.0
SAVINGS_TARGET_INCOME_SHARE = 0.7
MAX_INTEREST_RATE_PERCENT = 50.0
MAX_TENURE_MONTHS = 600


def _as_number(value: Any) -> Optional[float]:
    """Return value as a finite float, or None if it isn't one."""
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    number = float(value)
    if not math.isfinite(number):
        return None
    return number


def _not_a_number(field_name: str) -> ValidationOutcome:
    return ValidationOutcome(valid=False, error=f"{field_name} must be a valid number")


def safe_calculate(fn: Callable[[], Any], default: float = 0.0) -> float:
    """
    Evaluate fn and return its result as a float.

    Returns default when fn raises, or when the result is NaN, infinite
    or not a number at all.
    """
    try:
        result = fn()
    except Exception as e:
        logger.debug("calculation_failed", error=str(e), error_type=type(e).__name__)
        return default

    number = _as_number(result)
    if number is None:
        logger.debug("calculation_not_finite", result=repr(result))
        return default
    return number


# =============================================================================
# GUARDS
# =============================================================================

def is_non_negative(value: Any, field_name: str = "Value") -> ValidationOutcome:
    number = _as_number(value)
    if number is None:
        return _not_a_number(field_name)
    if number < 0:
        return ValidationOutcome(valid=False, error=f"{field_name} cannot be negative")
    return VALID


def is_valid_percentage(value: Any, field_name: str = "Percentage") -> ValidationOutcome:
    number = _as_number(value)
    if number is None:
        return _not_a_number(field_name)
    if number < 0 or number > 100:
        return ValidationOutcome(
            valid=False,
            error=f"{field_name} must be between 0 and 100",
        )
    return VALID


def is_valid_interest_rate(value: Any) -> ValidationOutcome:
    """Annual rate in percent, 0 to 50 inclusive."""
    number = _as_number(value)
    if number is None:
        return _not_a_number("Interest rate")
    if number < 0 or number > MAX_INTEREST_RATE_PERCENT:
        return ValidationOutcome(
            valid=False,
            error="Interest rate must be between 0% and 50%",
        )
    return VALID


def is_valid_tenure(months: Any) -> ValidationOutcome:
    number = _as_number(months)
    if number is None:
        return _not_a_number("Tenure")
    if number < 1 or number > MAX_TENURE_MONTHS:
        return ValidationOutcome(
            valid=False,
            error="Tenure must be between 1 and 600 months",
        )
    return VALID


def is_affordable(monthly_payment: Any, monthly_income: Any) -> ValidationOutcome:
    """
    EMI-to-income ratio must not exceed 40%.

    With no income, any positive payment is unaffordable.
    """
    payment = _as_number(monthly_payment)
    income = _as_number(monthly_income)
    if payment is None:
        return _not_a_number("Monthly payment")
    if income is None:
        return _not_a_number("Monthly income")

    if income <= 0:
        if payment > 0:
            return ValidationOutcome(
                valid=False,
                error="EMI-to-income ratio cannot be computed without income; "
                      "any payment exceeds the safe limit of 40%",
            )
        return VALID

    ratio = payment / income * 100
    if ratio > AFFORDABILITY_LIMIT_PERCENT:
        return ValidationOutcome(
            valid=False,
            error=f"EMI-to-income ratio ({ratio:.1f}%) exceeds safe limit of 40%",
        )
    return VALID


def is_valid_debt_to_income(total_debt: Any, monthly_income: Any) -> ValidationOutcome:
    """Outstanding debt against annual income must not exceed 60%."""
    debt = _as_number(total_debt)
    income = _as_number(monthly_income)
    if debt is None:
        return _not_a_number("Total debt")
    if income is None:
        return _not_a_number("Monthly income")

    if income <= 0:
        if debt > 0:
            return ValidationOutcome(
                valid=False,
                error="Debt-to-income ratio cannot be computed without income; "
                      "any debt exceeds the safe limit of 60%",
            )
        return VALID

    ratio = debt / (income * 12) * 100
    if ratio > DEBT_TO_INCOME_LIMIT_PERCENT:
        return ValidationOutcome(
            valid=False,
            error=f"Debt-to-income ratio ({ratio:.1f}%) exceeds safe limit of 60%",
        )
    return VALID


def is_valid_savings_target(target: Any, income: Any) -> ValidationOutcome:
    target_number = _as_number(target)
    income_number = _as_number(income)
    if target_number is None:
        return _not_a_number("Savings target")
    if income_number is None:
        return _not_a_number("Monthly income")

    if target_number > income_number * SAVINGS_TARGET_INCOME_SHARE:
        return ValidationOutcome(
            valid=False,
            error="Savings target cannot exceed 70% of monthly income",
        )
    return VALID


def is_valid_amount(amount: Any, field_name: str = "Amount") -> ValidationOutcome:
    number = _as_number(amount)
    if number is None:
        return _not_a_number(field_name)
    if number <= 0:
        return ValidationOutcome(valid=False, error=f"{field_name} must be greater than 0")
    return VALID
