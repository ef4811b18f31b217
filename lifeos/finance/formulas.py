"""
Financial Formula Library

Pure functions over plain numbers. Nothing here reads or writes state.

DESIGN DECISION: Every formula is total. Arithmetic runs inside
safe_calculate, so a zero denominator, an overflow or a non-finite input
yields the documented default (usually 0) instead of an exception, NaN
or infinity. Callers never need to guard these calls.

Money is a float throughout; the stored document is JSON and the
containment above is defined in terms of NaN and infinity.
"""

import math
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from lifeos.models.finance import (
    InterestCalculation,
    Liability,
    RiskLabel,
    RiskProfile,
    TaxProfile,
    TaxRegime,
)
from lifeos.models.planner import GoalHorizon
from lifeos.validation.guards import safe_calculate


# =============================================================================
# CONSTANTS
# =============================================================================

CESS_MULTIPLIER = 1.04

# (upper bound of the slab, rate applied inside it)
OLD_REGIME_SLABS: tuple[tuple[float, float], ...] = (
    (250_000, 0.0),
    (500_000, 0.05),
    (1_000_000, 0.20),
    (math.inf, 0.30),
)
OLD_REGIME_STANDARD_DEDUCTION = 50_000
OLD_REGIME_REBATE_LIMIT = 500_000

NEW_REGIME_SLABS: tuple[tuple[float, float], ...] = (
    (300_000, 0.0),
    (700_000, 0.05),
    (1_000_000, 0.10),
    (1_200_000, 0.15),
    (1_500_000, 0.20),
    (math.inf, 0.30),
)
NEW_REGIME_STANDARD_DEDUCTION = 75_000
NEW_REGIME_REBATE_LIMIT = 700_000

COOLING_OFF_HOURS = 24
DEFAULT_INFLATION_RATE = 6.0


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up."""
    return math.floor(value + 0.5)


# =============================================================================
# LOANS
# =============================================================================

def emi(
    principal: float,
    annual_rate_percent: float,
    tenure_months: float,
    method: InterestCalculation = InterestCalculation.REDUCING,
) -> float:
    """
    Monthly instalment for a loan.

    Reducing balance uses the standard amortization formula.
    Flat rate charges interest on the full principal for the whole tenure,
    so for the same stated rate its EMI is higher than reducing balance.
    """
    if method == InterestCalculation.FLAT:
        def flat() -> float:
            total_interest = principal * (annual_rate_percent / 100) * (tenure_months / 12)
            return (principal + total_interest) / tenure_months
        return safe_calculate(flat)

    def reducing() -> float:
        r = annual_rate_percent / 1200
        if r == 0:
            return principal / tenure_months
        growth = (1 + r) ** tenure_months
        return principal * r * growth / (growth - 1)

    return safe_calculate(reducing)


class PrepaymentSimulation(BaseModel):
    """Outcome of paying extra on top of the EMI every month."""

    model_config = ConfigDict(frozen=True)

    new_monthly_payment: float
    outstanding: float
    estimated_months: float
    original_interest: float
    interest_saved: float
    months_saved: float


def prepayment_simulation(loan: Liability, extra_payment: float) -> PrepaymentSimulation:
    """
    Estimate the effect of a monthly prepayment.

    This is a linear approximation, not an amortization schedule: the
    remaining months are outstanding / (new EMI - one month of interest on
    the outstanding), and interest saved compares remaining scheduled
    payments against new EMI times the estimated months.
    """
    monthly = loan.monthly_payment
    new_emi = monthly + extra_payment
    outstanding = loan.outstanding

    estimated_months = 0.0
    if new_emi > 0:
        estimated_months = safe_calculate(
            lambda: outstanding / (new_emi - outstanding * (loan.interest_rate / 1200))
        )

    remaining_scheduled = safe_calculate(
        lambda: loan.tenure_months - loan.paid_amount / monthly
    )
    interest_saved = safe_calculate(
        lambda: max(0.0, monthly * remaining_scheduled - new_emi * estimated_months)
    )
    original_interest = safe_calculate(
        lambda: monthly * loan.tenure_months - loan.total_amount
    )
    months_saved = remaining_scheduled - estimated_months if estimated_months else 0.0

    return PrepaymentSimulation(
        new_monthly_payment=new_emi,
        outstanding=outstanding,
        estimated_months=estimated_months,
        original_interest=original_interest,
        interest_saved=interest_saved,
        months_saved=months_saved,
    )


def credit_utilization(
    total_amount: float,
    paid_amount: float,
    credit_limit: Optional[float],
) -> float:
    """Share of a credit line in use, in percent. 0 without a limit."""
    if not credit_limit:
        return 0.0
    return percent_of(total_amount - paid_amount, credit_limit)


# =============================================================================
# GROWTH AND GOALS
# =============================================================================

def future_value(present_value: float, annual_rate_percent: float, years: float) -> float:
    """Compound present_value annually. Used for inflation and for growth."""
    return safe_calculate(lambda: present_value * (1 + annual_rate_percent / 100) ** years)


def required_monthly_sip(
    target_value: float,
    annual_return_percent: float,
    years: float,
) -> float:
    """
    Monthly investment that grows to target_value in the given years.

    With no time left the whole amount is needed at once; with a 0% return
    it is a straight split over the months.
    """
    n = years * 12
    if n == 0:
        return safe_calculate(lambda: target_value)

    r = annual_return_percent / 12 / 100
    if r == 0:
        return safe_calculate(lambda: target_value / n)

    return safe_calculate(lambda: target_value * r / ((1 + r) ** n - 1))


def expected_return_for_horizon(years: float) -> float:
    """Assumed annual return for a goal this many years away."""
    if years < 3:
        return 6.0
    if years < 7:
        return 10.0
    return 12.0


def goal_horizon_for_years(years: Optional[float]) -> GoalHorizon:
    if years and years > 7:
        return GoalHorizon.TEN_PLUS_YEARS
    if years and years > 3:
        return GoalHorizon.FIVE_YEARS
    return GoalHorizon.THREE_YEARS


class GoalPlan(BaseModel):
    """Cached figures for a financial goal."""

    model_config = ConfigDict(frozen=True)

    future_value: int
    required_sip: int
    expected_return: float
    horizon: GoalHorizon


def plan_financial_goal(
    current_cost: Optional[float],
    years_away: Optional[float],
    inflation_rate: Optional[float],
) -> GoalPlan:
    """
    Inflate today's cost to the goal date and size the SIP that reaches it.

    Missing or zero inputs fall back to: cost 0, 1 year, 6% inflation.
    """
    cost = current_cost or 0.0
    years = years_away or 1
    inflation = inflation_rate or DEFAULT_INFLATION_RATE

    expected = expected_return_for_horizon(years)
    target = round_half_up(future_value(cost, inflation, years))
    sip = round_half_up(required_monthly_sip(target, expected, years))

    return GoalPlan(
        future_value=target,
        required_sip=sip,
        expected_return=expected,
        horizon=goal_horizon_for_years(years_away),
    )


# =============================================================================
# TAX
# =============================================================================

class TaxComputation(BaseModel):
    model_config = ConfigDict(frozen=True)

    tax: int
    taxable_income: float


class TaxComparison(BaseModel):
    """Both regimes side by side and which one to pick."""

    model_config = ConfigDict(frozen=True)

    old_regime: TaxComputation
    new_regime: TaxComputation
    recommended_regime: TaxRegime
    savings: int
    refund_due: float
    effective_rate: float


def _slab_tax(taxable_income: float, slabs: tuple[tuple[float, float], ...]) -> float:
    tax = 0.0
    lower = 0.0
    for upper, rate in slabs:
        if taxable_income <= lower:
            break
        tax += (min(taxable_income, upper) - lower) * rate
        lower = upper
    return tax


def _regime_tax(
    taxable_income: float,
    slabs: tuple[tuple[float, float], ...],
    rebate_limit: float,
) -> TaxComputation:
    def compute() -> float:
        if taxable_income <= rebate_limit:
            return 0.0
        return _slab_tax(taxable_income, slabs) * CESS_MULTIPLIER

    return TaxComputation(
        tax=round_half_up(safe_calculate(compute)),
        taxable_income=max(0.0, taxable_income),
    )


def income_tax_old_regime(profile: TaxProfile) -> TaxComputation:
    """
    Old regime: itemized deductions and a 50,000 standard deduction on
    salary, full rebate up to 5,00,000 taxable, 4% cess.
    """
    taxable = profile.gross_income - profile.total_deductions
    if profile.salary > 0:
        taxable -= OLD_REGIME_STANDARD_DEDUCTION
    return _regime_tax(taxable, OLD_REGIME_SLABS, OLD_REGIME_REBATE_LIMIT)


def income_tax_new_regime(profile: TaxProfile) -> TaxComputation:
    """
    New regime: only a 75,000 standard deduction on salary, full rebate up
    to 7,00,000 taxable, 4% cess. Itemized deductions are ignored.
    """
    taxable = profile.gross_income
    if profile.salary > 0:
        taxable -= NEW_REGIME_STANDARD_DEDUCTION
    return _regime_tax(taxable, NEW_REGIME_SLABS, NEW_REGIME_REBATE_LIMIT)


def compare_tax_regimes(profile: TaxProfile) -> TaxComparison:
    """The old regime is recommended only when it is strictly cheaper."""
    old = income_tax_old_regime(profile)
    new = income_tax_new_regime(profile)

    recommended = TaxRegime.OLD if old.tax < new.tax else TaxRegime.NEW
    lower_tax = min(old.tax, new.tax)

    return TaxComparison(
        old_regime=old,
        new_regime=new,
        recommended_regime=recommended,
        savings=abs(old.tax - new.tax),
        refund_due=max(0.0, profile.tds_deducted - lower_tax),
        effective_rate=percent_of(lower_tax, profile.gross_income),
    )


# =============================================================================
# SAFETY NET
# =============================================================================

def emergency_fund_multiplier(is_job_stable: bool, has_dependents: bool) -> int:
    """
    Months of expenses to hold in reserve.

    stable, no dependents -> 3
    unstable, dependents  -> 12
    anything else         -> 6
    """
    if is_job_stable and not has_dependents:
        return 3
    if not is_job_stable and has_dependents:
        return 12
    return 6


def emergency_fund_target(
    monthly_expense: float,
    is_job_stable: bool,
    has_dependents: bool,
) -> float:
    multiplier = emergency_fund_multiplier(is_job_stable, has_dependents)
    return safe_calculate(lambda: monthly_expense * multiplier)


# =============================================================================
# RATIOS
# =============================================================================

def percent_of(part: float, whole: float) -> float:
    """part as a percentage of whole; 0 when whole is 0."""
    if whole == 0:
        return 0.0
    return safe_calculate(lambda: part / whole * 100)


def emi_to_income_ratio(total_monthly_emi: float, monthly_income: float) -> float:
    return percent_of(total_monthly_emi, monthly_income)


def debt_to_income_ratio(total_debt: float, monthly_income: float) -> float:
    """Outstanding debt against annual income, in percent."""
    return percent_of(total_debt, monthly_income * 12)


def savings_rate(income: float, expenses: float) -> float:
    """Share of income not spent, in percent."""
    return percent_of(income - expenses, income)


def readiness_score(
    basic_total: int,
    basic_complete: int,
    advanced_total: int,
    advanced_complete: int,
) -> int:
    """Completion of the two tool tiers, each weighted 50, rounded."""
    def compute() -> float:
        basic = basic_complete / basic_total * 50 if basic_total > 0 else 0
        advanced = advanced_complete / advanced_total * 50 if advanced_total > 0 else 0
        return round_half_up(basic + advanced)

    return int(safe_calculate(compute))


# =============================================================================
# MISC
# =============================================================================

def opportunity_score(
    interest: int,
    capability: int,
    effortlessness: int,
    return_potential: int,
) -> int:
    return interest + capability + effortlessness + return_potential


RISK_DESCRIPTIONS = {
    RiskLabel.AGGRESSIVE: "Heavy Equity focus.",
    RiskLabel.CONSERVATIVE: "Focus on Debt/Gold.",
    RiskLabel.MODERATE: "Balanced approach.",
}


def risk_profile_for_score(score: int) -> RiskProfile:
    """Map a 0-30 quiz score to a risk profile. Scores are clamped into range."""
    score = max(0, min(30, score))
    if score <= 10:
        label = RiskLabel.CONSERVATIVE
    elif score >= 25:
        label = RiskLabel.AGGRESSIVE
    else:
        label = RiskLabel.MODERATE
    return RiskProfile(score=score, label=label, description=RISK_DESCRIPTIONS[label])


def cooling_off_hours_left(created_at: datetime, now: datetime) -> float:
    """Hours until a wishlist item may be bought."""
    elapsed_hours = (now - created_at).total_seconds() / 3600
    return max(0.0, COOLING_OFF_HOURS - elapsed_hours)
