"""
Data Models Package

This package contains all Pydantic models used in Life OS.
All state held by the store must conform to these schemas.
"""

from lifeos.models.base import Entity, LifeModel
from lifeos.models.planner import (
    Contact,
    Goal,
    GoalHorizon,
    GoalTier,
    Habit,
    LeadStage,
    LifeGoal,
    LifeGoalType,
    Priority,
    Task,
    TaskCategory,
)
from lifeos.models.finance import (
    AssetClass,
    AssetType,
    ESBICategory,
    FinancialAsset,
    FinancialTool,
    FinancialToolCategory,
    FinancialToolStatus,
    GrowthStrategy,
    IncomeOpportunity,
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
    MasterCategory,
    Necessity,
    RiskLabel,
    RiskProfile,
    SavingsConfig,
    TaxProfile,
    TaxRegime,
    Transaction,
    TransactionType,
    WishlistItem,
)
from lifeos.models.app_data import AppData
from lifeos.models.validation import (
    ValidationIssue,
    ValidationOutcome,
    ValidationResult,
)
from lifeos.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Base
    "Entity",
    "LifeModel",
    # Planner models
    "Contact",
    "Goal",
    "GoalHorizon",
    "GoalTier",
    "Habit",
    "LeadStage",
    "LifeGoal",
    "LifeGoalType",
    "Priority",
    "Task",
    "TaskCategory",
    # Finance models
    "AssetClass",
    "AssetType",
    "ESBICategory",
    "FinancialAsset",
    "FinancialTool",
    "FinancialToolCategory",
    "FinancialToolStatus",
    "GrowthStrategy",
    "IncomeOpportunity",
    "IncomeTarget",
    "InsurancePolicy",
    "InsuranceType",
    "InterestCalculation",
    "InterestRateType",
    "Investment",
    "Liability",
    "LoanCollateral",
    "LoanPurpose",
    "LoanStructure",
    "LoanType",
    "MasterCategory",
    "Necessity",
    "RiskLabel",
    "RiskProfile",
    "SavingsConfig",
    "TaxProfile",
    "TaxRegime",
    "Transaction",
    "TransactionType",
    "WishlistItem",
    # Root
    "AppData",
    # Validation models
    "ValidationIssue",
    "ValidationOutcome",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
