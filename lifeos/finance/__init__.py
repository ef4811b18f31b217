"""Financial formulas and derived analytics."""

from lifeos.finance import analytics, formulas
from lifeos.finance.formulas import (
    GoalPlan,
    PrepaymentSimulation,
    TaxComparison,
    TaxComputation,
    compare_tax_regimes,
    emergency_fund_multiplier,
    emergency_fund_target,
    emi,
    future_value,
    required_monthly_sip,
)

__all__ = [
    "analytics",
    "formulas",
    "GoalPlan",
    "PrepaymentSimulation",
    "TaxComparison",
    "TaxComputation",
    "compare_tax_regimes",
    "emergency_fund_multiplier",
    "emergency_fund_target",
    "emi",
    "future_value",
    "required_monthly_sip",
]
