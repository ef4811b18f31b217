"""
Tests for derived analytics over the default data.

The default document has 5000 income, 1350 expenses, one 10000
outstanding consumption loan and an unconfigured savings engine.
"""

import pytest
from pydantic import ValidationError

from lifeos.finance import analytics
from lifeos.models import (
    ESBICategory,
    FinancialToolStatus,
    Goal,
    GoalTier,
    IncomeTarget,
    Liability,
    LoanPurpose,
    SavingsConfig,
    Transaction,
    TransactionType,
)
from lifeos.store import build_default_data

from tests.conftest import NOW


@pytest.fixture
def data():
    return build_default_data(NOW)


class TestCashFlow:
    """Tests for income and expense figures."""

    def test_income_stats(self, data):
        stats = analytics.income_stats(data.transactions)
        assert stats.total_income == 5_000
        assert stats.total_expenses == 1_350
        assert stats.net_savings == 3_650
        assert stats.savings_rate == pytest.approx(73.0)
        assert stats.transaction_count == 3

    def test_expense_breakdown(self, data):
        assert analytics.expense_breakdown(data.transactions) == {"Food": 150, "Housing": 1_200}

    def test_esbi_split(self, data):
        """Test that business and investor income is passive."""
        dividend = Transaction(
            id="d1", amount=5_000, description="Dividends", type=TransactionType.INCOME,
            esbi_category=ESBICategory.INVESTOR, date=NOW,
        )
        split = analytics.esbi_split(data.transactions + (dividend,))
        assert split.active_income == 5_000
        assert split.passive_income == 5_000
        assert split.passive_percent == 50
        assert split.by_quadrant == {ESBICategory.EMPLOYEE: 5_000, ESBICategory.INVESTOR: 5_000}

    def test_esbi_split_with_no_income(self):
        assert analytics.esbi_split(()).passive_percent == 0


class TestBalanceSheet:
    """Tests for debt and net worth."""

    def test_debt_analysis(self, data):
        expensive = Liability(
            id="cc", name="Card", total_amount=20_000, paid_amount=0,
            interest_rate=36, start_date=NOW, purpose=LoanPurpose.PRODUCTIVE,
        )
        debt = analytics.debt_analysis(data.liabilities + (expensive,))
        assert debt.bad_debt == 10_000
        assert debt.good_debt == 20_000
        assert debt.high_interest_debt == 20_000
        assert debt.total_debt == 30_000

    def test_net_worth(self, data):
        worth = analytics.net_worth(data)
        assert worth.savings == 10_000
        assert worth.investments == 27_000 + 41_000
        assert worth.liabilities == 10_000
        assert worth.net_worth == 68_000


class TestSafetyNet:
    """Tests for emergency fund, cover and readiness."""

    def test_unconfigured_emergency_fund(self, data):
        progress = analytics.emergency_fund_progress(data)
        assert progress.progress_percent == 0
        assert progress.months_to_goal == 0

    def test_emergency_fund_progress(self, data):
        configured = data.model_copy(update={
            "savings_config": SavingsConfig(
                monthly_expense=5_000, months_multiplier=3,
                target_amount=15_000, is_configured=True,
            ),
        })
        progress = analytics.emergency_fund_progress(configured)
        assert progress.progress_percent == 67
        assert progress.months_to_goal == 10

    def test_months_to_goal_without_savings_target(self, data):
        configured = data.model_copy(update={
            "savings_config": SavingsConfig(target_amount=15_000, is_configured=True),
            "income_target": IncomeTarget(),
        })
        assert analytics.emergency_fund_progress(configured).months_to_goal == 5_000

    def test_negative_income_target_rejected(self):
        with pytest.raises(ValidationError):
            IncomeTarget(savings=-500)

    def test_life_cover_gap(self, data):
        gap = analytics.life_cover_gap(data)
        assert gap.annual_income == 6_700 * 12
        assert gap.required_cover == 6_700 * 12 * 10 + 10_000
        assert gap.current_cover == 10_000_000
        assert gap.gap < 0

    def test_tool_readiness(self, data):
        assert analytics.tool_readiness_score(data) == 0
        tools = tuple(
            tool.model_copy(update={"status": FinancialToolStatus.COMPLETE})
            if tool.is_basic else tool
            for tool in data.financial_tools
        )
        assert analytics.tool_readiness_score(data.model_copy(update={"financial_tools": tools})) == 50


class TestPlan:
    """Tests for the health check, investment gate and goal SIPs."""

    def test_financial_health_check(self, data):
        check = analytics.financial_health_check(data)
        assert check.monthly_expenses == 1_350
        assert check.total_emi == 350
        assert check.monthly_surplus == 3_300
        assert check.required_emergency_fund == 1_350 * 6
        assert check.emergency and check.insurance and check.debt and check.surplus
        assert check.is_safety_secure

    def test_tax_is_not_an_expense(self, data):
        tax = Transaction(
            id="t", amount=900, description="Advance tax", type=TransactionType.EXPENSE,
            category="Tax", date=NOW,
        )
        check = analytics.financial_health_check(
            data.model_copy(update={"transactions": data.transactions + (tax,)})
        )
        assert check.monthly_expenses == 1_350

    def test_investment_readiness(self, data):
        readiness = analytics.investment_readiness(data)
        assert not readiness.emergency
        assert readiness.insurance
        assert readiness.no_high_interest_debt
        assert not readiness.is_eligible

    def test_goal_sip_totals(self, data):
        goals = data.goals + (
            Goal(id="g2", title="Retire", is_financial=True, required_sip=4_000, tier=GoalTier.FREEDOM),
            Goal(id="g3", title="Car", is_financial=True, required_sip=1_500, tier=GoalTier.LIFESTYLE),
        )
        totals = analytics.goal_sip_totals(data.model_copy(update={"goals": goals}))
        assert totals.freedom == 4_000
        assert totals.lifestyle == 1_500
        assert totals.target_total == 5_500
        assert totals.actual_total == 500
