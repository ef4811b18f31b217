"""
The application data root.

AppData is the single aggregate holding every collection and singleton.
It is immutable; the store derives a new root for each mutation with
model_copy(update=...), so unchanged collections are shared between the
old and new root.
"""

from typing import Optional

from pydantic import Field

from lifeos.models.base import LifeModel
from lifeos.models.finance import (
    FinancialAsset,
    FinancialTool,
    GrowthStrategy,
    IncomeOpportunity,
    IncomeTarget,
    InsurancePolicy,
    Investment,
    Liability,
    RiskProfile,
    SavingsConfig,
    TaxProfile,
    Transaction,
    WishlistItem,
)
from lifeos.models.planner import Contact, Goal, Habit, LifeGoal, Task


class AppData(LifeModel):
    """
    Aggregate root.

    Every field has a default, so a partial document parses and absent
    fields take their type defaults.
    """

    # Planner
    tasks: tuple[Task, ...] = ()
    habits: tuple[Habit, ...] = ()
    goals: tuple[Goal, ...] = ()
    life_goals: tuple[LifeGoal, ...] = ()
    contacts: tuple[Contact, ...] = ()
    mission_statement: str = ""

    # Money flow
    transactions: tuple[Transaction, ...] = ()
    wishlist: tuple[WishlistItem, ...] = ()

    # Balance sheet
    assets: tuple[FinancialAsset, ...] = ()
    liabilities: tuple[Liability, ...] = ()
    insurance_policies: tuple[InsurancePolicy, ...] = ()
    investments: tuple[Investment, ...] = ()
    financial_tools: tuple[FinancialTool, ...] = ()

    # Engines
    savings_config: SavingsConfig = Field(default_factory=SavingsConfig)
    income_target: IncomeTarget = Field(default_factory=IncomeTarget)
    income_opportunities: tuple[IncomeOpportunity, ...] = ()
    growth_strategy: GrowthStrategy = Field(default_factory=GrowthStrategy)
    risk_profile: Optional[RiskProfile] = None
    tax_profile: TaxProfile = Field(default_factory=TaxProfile)
