"""
Default application data.

build_default_data(now) is the shape a first run starts from, and the base
every stored local document is merged onto. Timestamps come from the
caller so the default shape is deterministic for a given clock.
"""

from datetime import datetime

from lifeos.models.app_data import AppData
from lifeos.models.finance import (
    AssetClass,
    AssetType,
    ESBICategory,
    FinancialAsset,
    FinancialTool,
    FinancialToolCategory,
    FinancialToolStatus,
    GrowthStrategy,
    IncomeTarget,
    InsurancePolicy,
    InsuranceType,
    InterestCalculation,
    InterestRateType,
    Investment,
    Liability,
    LoanCollateral,
    LoanPurpose,
    LoanStructure,
    LoanType,
    SavingsConfig,
    TaxProfile,
    Transaction,
    TransactionType,
)
from lifeos.models.planner import (
    Contact,
    Goal,
    GoalHorizon,
    GoalTier,
    Habit,
    LeadStage,
    Priority,
    Task,
    TaskCategory,
)


DEFAULT_MISSION = "To build meaningful technology and live a balanced, healthy life."

# (id, category, title, is_basic, fields)
_FINANCIAL_TOOLS = (
    ("1", FinancialToolCategory.IDENTITY, "Aadhaar Card", True,
     {"Number": "", "Status": "Active", "Linked to PAN": "No"}),
    ("2", FinancialToolCategory.IDENTITY, "PAN Card", True,
     {"Number": "", "Linked to Bank": "No"}),
    ("3", FinancialToolCategory.BANKING, "3-Account System", True,
     {"Income Acct Setup": "No", "Investment Acct Setup": "No", "Living Acct Setup": "No"}),
    ("4", FinancialToolCategory.SALARY, "EPF / UAN", True,
     {"UAN Number": "", "KYC Verified": "No", "Nominee Added": "No"}),
    ("5", FinancialToolCategory.SAFETY, "Document Vault", True,
     {"Physical Location": "Home Shelf", "Digital Backup": "Google Drive"}),
    ("6", FinancialToolCategory.INVESTMENT, "Demat Account", False,
     {"Broker Name": "", "Client ID": "", "Nominee": ""}),
    ("7", FinancialToolCategory.CREDIT, "Credit Score", False,
     {"Last Score": "", "Last Checked": "", "Report Error Free": "Yes"}),
    ("8", FinancialToolCategory.TAX, "Tax Portal", False,
     {"Login Active": "No", "Form 26AS Checked": "No"}),
    ("9", FinancialToolCategory.LEGACY, "Will & Testament", False,
     {"Drafted": "No", "Registered": "No", "Witnesses": ""}),
)


def default_financial_tools(now: datetime) -> tuple[FinancialTool, ...]:
    return tuple(
        FinancialTool(
            id=tool_id,
            category=category,
            title=title,
            status=FinancialToolStatus.INCOMPLETE,
            fields=fields,
            last_updated=now,
            is_basic=is_basic,
        )
        for tool_id, category, title, is_basic, fields in _FINANCIAL_TOOLS
    )


def build_default_data(now: datetime) -> AppData:
    """The first-run document, with every timestamp set to now."""
    return AppData(
        tasks=(
            Task(id="1", title="Review Quarterly Goals", category=TaskCategory.PROFESSIONAL,
                 priority=Priority.P1, is_today_focus=True),
            Task(id="2", title="Gym Workout", category=TaskCategory.WELLNESS,
                 priority=Priority.P2, is_today_focus=True),
            Task(id="3", title="Pay Credit Card Bill", category=TaskCategory.FINANCIAL,
                 priority=Priority.P1, is_today_focus=False),
        ),
        habits=(
            Habit(id="1", title="Morning Meditation", streak=5, category="Wellness"),
            Habit(id="2", title="Read 30 mins", streak=12, category="Personal"),
        ),
        transactions=(
            Transaction(id="1", amount=5000, description="Monthly Salary",
                        type=TransactionType.INCOME, category="Salary",
                        esbi_category=ESBICategory.EMPLOYEE, date=now),
            Transaction(id="2", amount=150, description="Grocery Run",
                        type=TransactionType.EXPENSE, category="Food", date=now),
            Transaction(id="3", amount=1200, description="Rent",
                        type=TransactionType.EXPENSE, category="Housing", date=now),
        ),
        wishlist=(),
        assets=(
            FinancialAsset(id="1", name="Emergency Fund", value=10000,
                           type=AssetType.SAVING, target=15000),
            FinancialAsset(id="2", name="S&P 500 ETF", value=25000, type=AssetType.INVESTMENT),
            FinancialAsset(id="3", name="Crypto Portfolio", value=2000, type=AssetType.INVESTMENT),
        ),
        liabilities=(
            Liability(
                id="1",
                name="Car Loan",
                total_amount=15000,
                paid_amount=5000,
                monthly_payment=350,
                interest_rate=8.5,
                tenure_months=60,
                start_date=now,
                purpose=LoanPurpose.CONSUMPTION,
                collateral=LoanCollateral.SECURED,
                structure=LoanStructure.TERM,
                calculation_method=InterestCalculation.REDUCING,
                rate_type=InterestRateType.FIXED,
                loan_type=LoanType.CAR,
            ),
        ),
        insurance_policies=(
            InsurancePolicy(
                id="1",
                name="Optima Restore",
                type=InsuranceType.HEALTH,
                insurer="HDFC Ergo",
                policy_number="123456789",
                premium=400,
                sum_assured=1_000_000,
                tpa_contact="1800-102-0333",
                renewal_date="2024-12-31",
                nominee="Spouse",
                is_corporate=False,
            ),
            InsurancePolicy(
                id="2",
                name="iTerm Plan",
                type=InsuranceType.TERM_LIFE,
                insurer="Aegon Life",
                policy_number="TL-987654321",
                premium=500,
                sum_assured=10_000_000,
                renewal_date="2025-06-15",
                nominee="Spouse",
                is_corporate=False,
            ),
        ),
        investments=(
            Investment(id="1", name="Nifty 50 Index Fund", asset_class=AssetClass.EQUITY,
                       amount_invested=20000, current_value=25000, expected_return=12,
                       is_sip=True, monthly_sip_amount=500),
            Investment(id="2", name="Gold Bees", asset_class=AssetClass.COMMODITY,
                       amount_invested=5000, current_value=5500, expected_return=8,
                       is_sip=False),
            Investment(id="3", name="Bank FD", asset_class=AssetClass.DEBT,
                       amount_invested=10000, current_value=10500, expected_return=6,
                       is_sip=False),
        ),
        financial_tools=default_financial_tools(now),
        savings_config=SavingsConfig(
            monthly_expense=0,
            is_job_stable=True,
            has_dependents=False,
            months_multiplier=6,
            target_amount=0,
            is_configured=False,
        ),
        income_target=IncomeTarget(
            needs=3000,
            wants=1000,
            savings=500,
            insurance=200,
            investment=1000,
            tax_buffer=1000,
        ),
        income_opportunities=(),
        growth_strategy=GrowthStrategy(),
        contacts=(
            Contact(id="1", name="John Doe", company="Tech Corp",
                    stage=LeadStage.CONTACTED, last_contacted=now),
            Contact(id="2", name="Sarah Smith", company="Design Studio",
                    stage=LeadStage.WON, deal_value=12000, last_contacted=now),
        ),
        goals=(
            Goal(id="1", title="Launch SaaS Product", horizon=GoalHorizon.ONE_YEAR,
                 progress=45, is_financial=False, tier=GoalTier.FREEDOM),
        ),
        life_goals=(),
        mission_statement=DEFAULT_MISSION,
        risk_profile=None,
        tax_profile=TaxProfile(),
    )
