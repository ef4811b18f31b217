"""
Derived figures over the application data root.

Everything here is read-only and recomputed on demand; nothing derived is
stored back into the aggregate. All arithmetic goes through the formula
library, so a root with no income or no tools yields zeros, not errors.
"""

import math
from collections import defaultdict
from typing import Iterable

from pydantic import BaseModel, ConfigDict

from lifeos.finance import formulas
from lifeos.models.app_data import AppData
from lifeos.models.finance import (
    AssetType,
    ESBICategory,
    FinancialToolStatus,
    InsuranceType,
    Liability,
    LoanPurpose,
    Transaction,
    TransactionType,
)
from lifeos.models.planner import GoalTier


HIGH_INTEREST_THRESHOLD = 12.0
TAX_CATEGORY = "Tax"
LIFE_COVER_INCOME_MULTIPLE = 10


class _Summary(BaseModel):
    model_config = ConfigDict(frozen=True)


# =============================================================================
# CASH FLOW
# =============================================================================

class IncomeStats(_Summary):
    total_income: float
    total_expenses: float
    net_savings: float
    savings_rate: float
    transaction_count: int


def income_stats(transactions: Iterable[Transaction]) -> IncomeStats:
    """
    Totals over all transactions.

    savings_rate is the share of income left after expenses.
    """
    transactions = tuple(transactions)
    income = sum(t.amount for t in transactions if t.type == TransactionType.INCOME)
    expenses = sum(t.amount for t in transactions if t.type == TransactionType.EXPENSE)
    return IncomeStats(
        total_income=income,
        total_expenses=expenses,
        net_savings=income - expenses,
        savings_rate=formulas.savings_rate(income, expenses),
        transaction_count=len(transactions),
    )


def expense_breakdown(transactions: Iterable[Transaction]) -> dict[str, float]:
    """Expense totals per free-form category, in first-seen order."""
    breakdown: dict[str, float] = {}
    for t in transactions:
        if t.type == TransactionType.EXPENSE:
            breakdown[t.category] = breakdown.get(t.category, 0.0) + t.amount
    return breakdown


class ESBISplit(_Summary):
    by_quadrant: dict[ESBICategory, float]
    active_income: float
    passive_income: float
    passive_percent: int


def esbi_split(transactions: Iterable[Transaction]) -> ESBISplit:
    """
    Income per cashflow quadrant.

    Untagged income counts as Employee. Business and Investor income is
    passive.
    """
    by_quadrant: dict[ESBICategory, float] = defaultdict(float)
    for t in transactions:
        if t.type == TransactionType.INCOME:
            by_quadrant[t.esbi_category or ESBICategory.EMPLOYEE] += t.amount

    total = sum(by_quadrant.values())
    active = by_quadrant[ESBICategory.EMPLOYEE] + by_quadrant[ESBICategory.SELF_EMPLOYED]
    passive = by_quadrant[ESBICategory.BUSINESS] + by_quadrant[ESBICategory.INVESTOR]
    return ESBISplit(
        by_quadrant={k: v for k, v in by_quadrant.items() if v},
        active_income=active,
        passive_income=passive,
        passive_percent=formulas.round_half_up(formulas.percent_of(passive, total)),
    )


# =============================================================================
# BALANCE SHEET
# =============================================================================

class DebtAnalysis(_Summary):
    good_debt: float
    bad_debt: float
    high_interest_debt: float
    total_debt: float


def debt_analysis(liabilities: Iterable[Liability]) -> DebtAnalysis:
    """Outstanding principal split by purpose; high interest is above 12%."""
    good = bad = high = 0.0
    for loan in liabilities:
        if loan.purpose == LoanPurpose.PRODUCTIVE:
            good += loan.outstanding
        elif loan.purpose == LoanPurpose.CONSUMPTION:
            bad += loan.outstanding
        if loan.interest_rate > HIGH_INTEREST_THRESHOLD:
            high += loan.outstanding
    return DebtAnalysis(
        good_debt=good,
        bad_debt=bad,
        high_interest_debt=high,
        total_debt=good + bad,
    )


class NetWorth(_Summary):
    savings: float
    investments: float
    liabilities: float
    net_worth: float


def total_savings(data: AppData) -> float:
    return sum(a.value for a in data.assets if a.type == AssetType.SAVING)


def net_worth(data: AppData) -> NetWorth:
    """Savings plus both kinds of investments minus outstanding debt."""
    savings = total_savings(data)
    investments = (
        sum(a.value for a in data.assets if a.type == AssetType.INVESTMENT)
        + sum(i.current_value for i in data.investments)
    )
    debt = sum(loan.outstanding for loan in data.liabilities)
    return NetWorth(
        savings=savings,
        investments=investments,
        liabilities=debt,
        net_worth=savings + investments - debt,
    )


# =============================================================================
# SAFETY NET
# =============================================================================

class EmergencyFundProgress(_Summary):
    saved: float
    target: float
    progress_percent: int
    months_to_goal: int


def emergency_fund_progress(data: AppData) -> EmergencyFundProgress:
    """
    How far the savings assets are towards the configured target.

    Months to goal assumes the monthly savings target is put aside each
    month (at least 1 per month).
    """
    saved = total_savings(data)
    target = data.savings_config.target_amount

    progress = 0
    if target > 0:
        progress = min(100, formulas.round_half_up(formulas.percent_of(saved, target)))

    monthly_rate = data.income_target.savings or 1
    months = max(0, math.ceil(formulas.safe_calculate(lambda: (target - saved) / monthly_rate)))

    return EmergencyFundProgress(
        saved=saved,
        target=target,
        progress_percent=progress,
        months_to_goal=months,
    )


class LifeCoverGap(_Summary):
    annual_income: float
    required_cover: float
    current_cover: float
    gap: float


def life_cover_gap(data: AppData) -> LifeCoverGap:
    """Term cover needed: ten years of target income plus all outstanding debt."""
    annual_income = data.income_target.total * 12
    debt = sum(loan.outstanding for loan in data.liabilities)
    required = annual_income * LIFE_COVER_INCOME_MULTIPLE + debt
    current = sum(
        p.sum_assured for p in data.insurance_policies
        if p.type == InsuranceType.TERM_LIFE
    )
    return LifeCoverGap(
        annual_income=annual_income,
        required_cover=required,
        current_cover=current,
        gap=required - current,
    )


def tool_readiness_score(data: AppData) -> int:
    basic = [t for t in data.financial_tools if t.is_basic]
    advanced = [t for t in data.financial_tools if not t.is_basic]
    return formulas.readiness_score(
        len(basic),
        sum(1 for t in basic if t.status == FinancialToolStatus.COMPLETE),
        len(advanced),
        sum(1 for t in advanced if t.status == FinancialToolStatus.COMPLETE),
    )


# =============================================================================
# PLAN
# =============================================================================

class FinancialHealthCheck(_Summary):
    monthly_income: float
    monthly_expenses: float
    total_emi: float
    monthly_surplus: float
    required_emergency_fund: float
    required_term_cover: float
    emi_ratio: float

    emergency: bool
    insurance: bool
    debt: bool
    surplus: bool

    @property
    def is_safety_secure(self) -> bool:
        return self.emergency and self.insurance and self.debt


def financial_health_check(data: AppData) -> FinancialHealthCheck:
    """
    The four report-card checks.

    emergency: savings cover at least 80% of the required fund
    insurance: term cover is at least 10x annual income
    debt:      EMIs take less than 40% of income
    surplus:   more than 10% of income is left over
    Tax payments are not counted as expenses.
    """
    income = sum(t.amount for t in data.transactions if t.type == TransactionType.INCOME)
    expenses = sum(
        t.amount for t in data.transactions
        if t.type == TransactionType.EXPENSE and t.category != TAX_CATEGORY
    )
    total_emi = sum(loan.monthly_payment for loan in data.liabilities)
    surplus = max(0.0, income - expenses - total_emi)

    required_fund = data.savings_config.target_amount or expenses * 6
    term_cover = sum(
        p.sum_assured for p in data.insurance_policies
        if p.type == InsuranceType.TERM_LIFE
    )
    required_cover = income * 12 * LIFE_COVER_INCOME_MULTIPLE
    emi_ratio = formulas.emi_to_income_ratio(total_emi, income)

    return FinancialHealthCheck(
        monthly_income=income,
        monthly_expenses=expenses,
        total_emi=total_emi,
        monthly_surplus=surplus,
        required_emergency_fund=required_fund,
        required_term_cover=required_cover,
        emi_ratio=emi_ratio,
        emergency=total_savings(data) >= required_fund * 0.8,
        insurance=term_cover >= required_cover,
        debt=emi_ratio < 40,
        surplus=surplus > income * 0.1,
    )


class InvestmentReadiness(_Summary):
    emergency: bool
    insurance: bool
    no_high_interest_debt: bool

    @property
    def is_eligible(self) -> bool:
        return self.emergency and self.insurance and self.no_high_interest_debt


def investment_readiness(data: AppData) -> InvestmentReadiness:
    """
    Gate for goal-based investing: emergency fund at least half funded,
    at least one insurance policy, and no loan above 12%.
    """
    target = data.savings_config.target_amount
    return InvestmentReadiness(
        emergency=target > 0 and total_savings(data) >= target * 0.5,
        insurance=len(data.insurance_policies) > 0,
        no_high_interest_debt=not any(
            loan.interest_rate > HIGH_INTEREST_THRESHOLD for loan in data.liabilities
        ),
    )


class GoalSipTotals(_Summary):
    freedom: float
    lifestyle: float
    target_total: float
    actual_total: float


def goal_sip_totals(data: AppData) -> GoalSipTotals:
    """Required SIP per goal tier against SIPs actually running."""
    freedom = sum(g.required_sip or 0 for g in data.goals if g.tier == GoalTier.FREEDOM)
    lifestyle = sum(g.required_sip or 0 for g in data.goals if g.tier == GoalTier.LIFESTYLE)
    target = sum(g.required_sip or 0 for g in data.goals if g.is_financial)
    actual = sum(i.monthly_sip_amount for i in data.investments if i.is_sip)
    return GoalSipTotals(
        freedom=freedom,
        lifestyle=lifestyle,
        target_total=target,
        actual_total=actual,
    )
