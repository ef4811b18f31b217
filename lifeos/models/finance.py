"""
Financial Models for Life OS

Cash flow, wishlist, assets, loans, insurance, investments, tax and the
configuration singletons of the savings and income engines.

DESIGN DECISION: Categorical values are closed str enums whose values are
the exact labels stored in the data document. Code compares enum members;
only the serialization boundary sees the labels.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field, model_validator

from lifeos.models.base import Entity, LifeModel, OptionalDate, OptionalStr, ReadOnlyMap


# =============================================================================
# ENUMS - Cash flow
# =============================================================================

class TransactionType(str, Enum):
    INCOME = "Income"
    EXPENSE = "Expense"


class ESBICategory(str, Enum):
    """Cashflow quadrant an income source belongs to."""
    EMPLOYEE = "Employee (E)"
    SELF_EMPLOYED = "Self-Employed (S)"
    BUSINESS = "Business (B)"
    INVESTOR = "Investor (I)"


class MasterCategory(str, Enum):
    """
    The four spending buckets.

    Consumption and Commitment are "present self" spending,
    Safety and Growth are "future self" spending.
    """
    CONSUMPTION = "Consumption (Living)"
    COMMITMENT = "Commitment (Debt)"
    SAFETY = "Safety (Protection)"
    GROWTH = "Growth (Investing)"


class Necessity(str, Enum):
    NEED = "Need"
    WANT = "Want"


class AssetType(str, Enum):
    SAVING = "Saving"
    INVESTMENT = "Investment"


# =============================================================================
# ENUMS - Loans (the five lenses plus product type)
# =============================================================================

class LoanPurpose(str, Enum):
    PRODUCTIVE = "Productive (Asset Building)"
    CONSUMPTION = "Consumption (Lifestyle)"


class LoanCollateral(str, Enum):
    SECURED = "Secured (Asset Backed)"
    UNSECURED = "Unsecured (Credit Score Based)"


class LoanStructure(str, Enum):
    TERM = "Term Loan (Fixed Tenure)"
    REVOLVING = "Revolving (Credit Card/OD)"


class InterestCalculation(str, Enum):
    REDUCING = "Reducing Balance"
    FLAT = "Flat Rate"


class InterestRateType(str, Enum):
    FIXED = "Fixed Rate"
    FLOATING = "Floating Rate"


class LoanType(str, Enum):
    HOME = "Home Loan"
    CAR = "Car Loan"
    PERSONAL = "Personal Loan"
    EDUCATION = "Education Loan"
    CREDIT_CARD = "Credit Card"
    OTHER = "Other"


# =============================================================================
# ENUMS - Protection, investing, tax, tools
# =============================================================================

class InsuranceType(str, Enum):
    HEALTH = "Health"
    TERM_LIFE = "Term Life"
    MOTOR = "Motor"
    ULIP_ENDOWMENT = "ULIP/Endowment"
    OTHER = "Other"


class AssetClass(str, Enum):
    EQUITY = "Equity (Growth)"
    DEBT = "Debt (Stability)"
    COMMODITY = "Commodity (Hedge)"
    REAL_ESTATE = "Real Estate (Illiquid)"
    ALTERNATIVE = "Alternative (High Risk)"


class TaxRegime(str, Enum):
    OLD = "Old Regime"
    NEW = "New Regime"


class RiskLabel(str, Enum):
    CONSERVATIVE = "Conservative"
    MODERATE = "Moderate"
    AGGRESSIVE = "Aggressive"


class FinancialToolCategory(str, Enum):
    IDENTITY = "Identity"
    BANKING = "Banking"
    SALARY = "Salary"
    SAFETY = "Safety"
    INVESTMENT = "Investment"
    CREDIT = "Credit"
    TAX = "Tax"
    LEGACY = "Legacy"


class FinancialToolStatus(str, Enum):
    COMPLETE = "Complete"
    INCOMPLETE = "Incomplete"
    PENDING = "Pending"


# =============================================================================
# COLLECTION ENTITIES
# =============================================================================

class Transaction(Entity):
    """
    A single income or expense entry.

    related_loan_id is a weak reference to a Liability (id only).
    """

    amount: float = Field(..., gt=0, description="Amount, always positive")
    description: str = Field(..., min_length=1, max_length=300)
    type: TransactionType
    category: str = Field(default="General", max_length=100)
    esbi_category: Optional[ESBICategory] = None
    master_category: Optional[MasterCategory] = None
    necessity: Optional[Necessity] = None
    related_loan_id: OptionalStr = None
    date: datetime


class WishlistItem(Entity):
    """A planned purchase parked for the 24-hour cooling-off period."""

    name: str = Field(..., min_length=1, max_length=200)
    amount: float = Field(..., gt=0)
    category: MasterCategory = MasterCategory.CONSUMPTION
    created_at: datetime
    note: OptionalStr = None


class FinancialAsset(Entity):
    """A savings or investment bucket tracked by value only."""

    name: str = Field(..., min_length=1, max_length=200)
    value: float = Field(..., ge=0)
    type: AssetType
    target: Optional[float] = Field(default=None, ge=0)


class Liability(Entity):
    """
    A loan or credit line.

    Outstanding principal is total_amount - paid_amount, and
    0 <= paid_amount <= total_amount always holds.
    """

    name: str = Field(..., min_length=1, max_length=200)
    total_amount: float = Field(..., ge=0, description="Original principal")
    paid_amount: float = Field(default=0, ge=0, description="Principal repaid")
    monthly_payment: float = Field(default=0, ge=0, description="EMI")
    interest_rate: float = Field(default=0, ge=0, description="Annual %")
    tenure_months: int = Field(default=12, ge=0)
    start_date: datetime

    # The five lenses
    purpose: LoanPurpose = LoanPurpose.PRODUCTIVE
    collateral: LoanCollateral = LoanCollateral.SECURED
    structure: LoanStructure = LoanStructure.TERM
    calculation_method: InterestCalculation = InterestCalculation.REDUCING
    rate_type: InterestRateType = InterestRateType.FIXED

    loan_type: LoanType = LoanType.PERSONAL
    credit_limit: Optional[float] = Field(default=None, ge=0)

    @model_validator(mode='after')
    def validate_paid_amount(self) -> 'Liability':
        if self.paid_amount > self.total_amount:
            raise ValueError("Paid amount cannot exceed total amount")
        return self

    @property
    def outstanding(self) -> float:
        return self.total_amount - self.paid_amount


class InsurancePolicy(Entity):
    """An insurance policy in the vault."""

    type: InsuranceType = InsuranceType.HEALTH
    name: str = Field(..., min_length=1, max_length=200)
    policy_number: str = Field(default="", max_length=100)
    insurer: str = Field(default="", max_length=200)
    sum_assured: float = Field(default=0, ge=0, description="Cover amount")
    premium: float = Field(default=0, ge=0, description="Annual premium")
    renewal_date: OptionalDate = None
    tpa_contact: OptionalStr = None
    nominee: OptionalStr = None
    is_corporate: bool = False


class Investment(Entity):
    """
    A holding in the portfolio.

    linked_goal_id is a weak reference to a Goal (id only).
    """

    name: str = Field(..., min_length=1, max_length=200)
    asset_class: AssetClass
    amount_invested: float = Field(default=0, ge=0, description="Principal")
    current_value: float = Field(default=0, ge=0)
    expected_return: float = Field(default=0, description="Expected CAGR %")
    linked_goal_id: OptionalStr = None
    is_sip: bool = Field(default=False, alias="isSIP")
    monthly_sip_amount: float = Field(default=0, ge=0, alias="monthlySIPAmount")


class IncomeOpportunity(Entity):
    """A side-income idea scored on four 1-5 factors."""

    name: str = Field(..., min_length=1, max_length=200)
    interest: int = Field(default=3, ge=1, le=5)
    capability: int = Field(default=3, ge=1, le=5)
    effortlessness: int = Field(default=3, ge=1, le=5)
    return_potential: int = Field(default=3, ge=1, le=5)
    score: int = Field(default=0, ge=0, le=20)


class FinancialTool(Entity):
    """
    A checklist item of the financial foundation audit.

    fields is a free-form, ordered map of labels to values; any label may
    be added by the user.
    """

    category: FinancialToolCategory
    title: str = Field(..., min_length=1, max_length=200)
    status: FinancialToolStatus = FinancialToolStatus.INCOMPLETE
    fields: ReadOnlyMap[str, str] = Field(default_factory=dict, validate_default=True)
    last_updated: datetime
    is_basic: bool = True


# =============================================================================
# SINGLETONS
# =============================================================================

class SavingsConfig(LifeModel):
    """Emergency fund sizing inputs and the derived target."""

    monthly_expense: float = Field(default=0, ge=0)
    is_job_stable: bool = True
    has_dependents: bool = False
    months_multiplier: int = Field(default=6, ge=0)
    target_amount: float = Field(default=0, ge=0)
    is_configured: bool = False


class IncomeTarget(LifeModel):
    """Monthly income needed, broken down by purpose."""

    needs: float = Field(default=0, ge=0)
    wants: float = Field(default=0, ge=0)
    savings: float = Field(default=0, ge=0)
    insurance: float = Field(default=0, ge=0)
    investment: float = Field(default=0, ge=0)
    tax_buffer: float = Field(default=0, ge=0)

    @property
    def total(self) -> float:
        return (
            self.needs + self.wants + self.savings
            + self.insurance + self.investment + self.tax_buffer
        )


class GrowthStrategy(LifeModel):
    """Skills, network, leverage and geography notes of the income engine."""

    unfair_advantage: str = ""
    skills_to_acquire: tuple[str, ...] = ()
    network_notes: str = ""
    leverage_audit: tuple[str, ...] = ()
    geography_plan: str = ""


class RiskProfile(LifeModel):
    score: int = Field(..., ge=0, le=30)
    label: RiskLabel
    description: str = ""


class TaxProfile(LifeModel):
    """Five heads of income, deductions and taxes already paid."""

    # 5 heads of income
    salary: float = Field(default=0, ge=0)
    house_property: float = Field(default=0, ge=0)
    business_profession: float = Field(default=0, ge=0)
    capital_gains: float = Field(default=0, ge=0)
    other_sources: float = Field(default=0, ge=0)

    # Deductions (old regime)
    deduction_80c: float = Field(default=0, ge=0, alias="deduction80C")
    deduction_80d: float = Field(default=0, ge=0, alias="deduction80D")
    deduction_80ccd: float = Field(default=0, ge=0, alias="deduction80CCD")
    hra_exemption: float = Field(default=0, ge=0)
    home_loan_interest: float = Field(default=0, ge=0)

    # Payments
    tds_deducted: float = Field(default=0, ge=0)
    advance_tax_paid: float = Field(default=0, ge=0)

    selected_regime: TaxRegime = TaxRegime.NEW

    @property
    def gross_income(self) -> float:
        return (
            self.salary + self.house_property + self.business_profession
            + self.capital_gains + self.other_sources
        )

    @property
    def total_deductions(self) -> float:
        return (
            self.deduction_80c + self.deduction_80d + self.deduction_80ccd
            + self.hra_exemption + self.home_loan_interest
        )
